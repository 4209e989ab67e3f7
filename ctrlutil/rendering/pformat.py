"""Pretty formatting of arbitrary values for log messages."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic_core import to_jsonable_python

_logger = logging.getLogger(__name__)

DEFAULT_INDENT = 2


@dataclass(frozen=True)
class FormatResult:
    """Result of formatting a value.

    Attributes:
        text: Display text. Always set, even when serialization failed.
        fallback: True when ``text`` is the plain string form of the value
            because JSON serialization failed.
        error: The serialization error behind a fallback.
    """

    text: str
    fallback: bool = False
    error: Exception | None = None


def format_value(value: Any, *, indent: int = DEFAULT_INDENT) -> FormatResult:
    """Formats ``value`` as indented JSON unless it is already a string."""

    if isinstance(value, str):
        return FormatResult(text=value)
    try:
        text = json.dumps(
            value,
            indent=indent,
            ensure_ascii=False,
            allow_nan=False,
            default=to_jsonable_python,
        )
    except (TypeError, ValueError, RecursionError) as exc:
        _logger.warning("Couldn't pretty format %s, error: %s", _plain_text(value), exc)
        return FormatResult(text=_plain_text(value), fallback=True, error=exc)
    return FormatResult(text=text)


def pformat(value: Any, *, indent: int = DEFAULT_INDENT) -> str:
    """Returns a pretty format of any value that can be serialized to JSON.

    Strings pass through untouched. Anything that cannot be serialized is
    rendered with ``str()`` and a warning is logged; this never raises.
    """

    return format_value(value, indent=indent).text


def _plain_text(value: Any) -> str:
    for render in (str, repr):
        try:
            text = render(value)
        except Exception:  # noqa: BLE001
            continue
        if text:
            return text
    return object.__repr__(value)
