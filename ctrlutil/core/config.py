"""Library configuration.

Settings are read from ``CTRLUTIL_*`` environment variables and an optional
``.env`` file. Nothing here configures logging handlers; see
``ctrlutil.core.logging_setup`` for that.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EntropySettings(BaseSettings):
    """Settings read when the shared entropy source is created.

    Importing the name generator reads only these.
    """

    model_config = SettingsConfigDict(
        env_prefix="CTRLUTIL_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Seed for the process-wide entropy source. Unset means seed from the clock.
    random_seed: int | None = None


class AppSettings(EntropySettings):
    """Settings for processes embedding ctrlutil."""

    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        """Normalizes the log level name.

        Docker's `--env-file` does not strip quotes, so a single pair of
        surrounding quotes is removed before the name is checked.
        """

        if not isinstance(value, str):
            return value
        text = value.strip()
        if len(text) >= 2 and ((text[0] == text[-1] == '"') or (text[0] == text[-1] == "'")):
            text = text[1:-1].strip()
        text = text.upper()
        if not isinstance(logging.getLevelName(text), int):
            raise ValueError(f"unknown log level: {value!r}")
        return text
