"""Random DNS-label-safe strings.

Strings are drawn from lowercase alphanumerics only, so they can be used in
DNS-1035 labels. Total label length rules are left to the caller.

Each 63-bit draw from the entropy source is split into 6-bit groups. A group
selects a symbol only when it is below the alphabet size; larger groups are
skipped rather than reduced modulo 36, which keeps every symbol equally
likely.
"""

from __future__ import annotations

import random
import threading
import time

from ctrlutil.core.config import EntropySettings

LETTERS = "0123456789abcdefghijklmnopqrstuvwxyz"

INDEX_BITS = 6
INDEX_MASK = (1 << INDEX_BITS) - 1
INDICES_PER_DRAW = 63 // INDEX_BITS


class EntropySource:
    """Pseudo-random bit source producing non-negative 63-bit integers.

    Draws are serialized with a lock so one instance can be shared by
    threads.
    """

    def __init__(self, *, seed: int | None = None) -> None:
        self._random = random.Random(time.time_ns() if seed is None else seed)
        self._lock = threading.Lock()

    def int63(self) -> int:
        """Returns 63 random bits as a non-negative int."""

        with self._lock:
            return self._random.getrandbits(63)


class RandomStringGenerator:
    """Generates random strings over ``LETTERS`` from an entropy source."""

    def __init__(self, *, source: EntropySource) -> None:
        self._source = source

    def generate(self, length: int) -> str:
        """Returns a random string of exactly ``length`` characters.

        Raises:
            ValueError: If ``length`` is negative.
        """

        if length < 0:
            raise ValueError(f"length must be non-negative: {length}")
        buf = [""] * length
        cache = 0
        remain = 0
        i = length - 1
        while i >= 0:
            if remain == 0:
                cache, remain = self._source.int63(), INDICES_PER_DRAW
            idx = cache & INDEX_MASK
            if idx < len(LETTERS):
                buf[i] = LETTERS[idx]
                i -= 1
            cache >>= INDEX_BITS
            remain -= 1
        return "".join(buf)


default_source = EntropySource(seed=EntropySettings().random_seed)
_default_generator = RandomStringGenerator(source=default_source)


def rand_string(length: int) -> str:
    """Generates a random string of the desired length from the shared source."""

    return _default_generator.generate(length)
