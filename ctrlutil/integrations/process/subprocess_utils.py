"""Utilities for running subprocesses.

``run`` executes a single command synchronously and returns its standard
output. Both streams are buffered in memory with no size cap, and there is
no timeout unless the caller passes one, so it is only meant for commands
with bounded, modest output.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

_logger = logging.getLogger(__name__)


class EmptyCommandError(ValueError):
    """Raised when a command has no program name."""


class InvalidEnvironmentEntryError(ValueError):
    """Raised when an extra environment entry is not in ``KEY=VALUE`` form."""


class ExecutionError(RuntimeError):
    """Raised when a command cannot be spawned or exits unsuccessfully.

    Captured output is logged by ``run`` and never stored on the error.
    """

    def __init__(
        self,
        *,
        command: Sequence[str | os.PathLike[str]],
        cause: BaseException,
        exit_code: int | None = None,
    ) -> None:
        parts: list[str] = [f"Command failed: {cause}", f"command={' '.join(map(str, command))}"]
        if exit_code is not None:
            parts.append(f"exit_code={exit_code}")
        super().__init__(" | ".join(parts))
        self.command = list(command)
        self.cause = cause
        self.exit_code = exit_code


@dataclass(frozen=True)
class CommandResult:
    """Result of running a command."""

    exit_code: int
    stdout: bytes
    stderr: bytes


class CommandRunner:
    """Runs OS commands with controlled environment and output capturing."""

    def run(
        self,
        *,
        args: list[str],
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> CommandResult:
        """Runs a command and captures stdout/stderr as bytes.

        Args:
            args: Command arguments (no shell).
            cwd: Working directory.
            env: Environment variables to merge with current environment.
            timeout_seconds: Optional timeout.

        Returns:
            Captured result.

        Raises:
            subprocess.TimeoutExpired: If timeout is exceeded.
            OSError: If process cannot be started.
            ValueError: If an argument or environment entry is rejected
                before the process starts (e.g. an embedded NUL byte).
        """

        merged_env = os.environ.copy()
        if env is not None:
            merged_env.update(env)

        completed = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            env=merged_env,
            check=False,
            capture_output=True,
            timeout=timeout_seconds,
        )
        return CommandResult(
            exit_code=int(completed.returncode),
            stdout=completed.stdout,
            stderr=completed.stderr,
        )


def parse_env_entries(entries: Sequence[str] | Mapping[str, str] | None) -> dict[str, str]:
    """Parses ``KEY=VALUE`` entries into a mapping, later keys winning.

    Raises:
        InvalidEnvironmentEntryError: If an entry has no ``=`` or an empty key.
    """

    if entries is None:
        return {}
    if isinstance(entries, Mapping):
        return dict(entries)
    parsed: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise InvalidEnvironmentEntryError(f"environment entry must be KEY=VALUE: {entry!r}")
        parsed[key] = value
    return parsed


def run(
    command: Sequence[str | os.PathLike[str]],
    cwd: str | Path | None = None,
    env: Sequence[str] | Mapping[str, str] | None = None,
    *,
    timeout_seconds: float | None = None,
    runner: CommandRunner | None = None,
) -> bytes:
    """Runs a subprocess and returns its stdout.

    Args:
        command: Program name followed by its arguments.
        cwd: Working directory. Empty or None inherits the caller's.
        env: Extra ``KEY=VALUE`` entries merged over the current environment.
        timeout_seconds: Optional timeout. None waits indefinitely.
        runner: Command runner, replaceable in tests.

    Returns:
        Captured standard output.

    Raises:
        EmptyCommandError: If ``command`` is empty.
        InvalidEnvironmentEntryError: If an ``env`` entry is malformed.
        ExecutionError: If the command cannot be spawned, times out or exits
            with a non-zero status.
    """

    _logger.info("Execute command: %s", " ".join(map(str, command)))
    if len(command) == 0:
        raise EmptyCommandError("Command cannot be empty.")
    args = list(command)
    extra_env = parse_env_entries(env)
    command_runner = runner or CommandRunner()

    try:
        result = command_runner.run(
            args=args,
            cwd=cwd or None,
            env=extra_env,
            timeout_seconds=timeout_seconds,
        )
    except subprocess.TimeoutExpired as exc:
        _log_failure(exc, stderr=exc.stderr, stdout=exc.stdout)
        raise ExecutionError(command=args, cause=exc) from exc
    except (OSError, ValueError, TypeError) as exc:
        _log_failure(exc, stderr=b"", stdout=b"")
        raise ExecutionError(command=args, cause=exc) from exc

    if result.exit_code != 0:
        error = subprocess.CalledProcessError(result.exit_code, args)
        _log_failure(error, stderr=result.stderr, stdout=result.stdout)
        raise ExecutionError(command=args, cause=error, exit_code=result.exit_code) from error

    _logger.info("Subprocess output:\n%s", _decode(result.stdout))
    return result.stdout


def _log_failure(error: BaseException, *, stderr: bytes | None, stdout: bytes | None) -> None:
    _logger.error("Command failed: %s", error)
    _logger.error("Subprocess error:\n%s", _decode(stderr))
    _logger.info("Subprocess output:\n%s", _decode(stdout))


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")
