"""Logging setup for processes that use ctrlutil.

The library modules only create loggers; handlers are installed by the
embedding process, usually once at startup via ``configure_logging``.
"""

from __future__ import annotations

import logging

from ctrlutil.core.config import AppSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(*, settings: AppSettings | None = None) -> int:
    """Configures root logging from settings.

    Returns:
        The numeric level that was applied.
    """

    resolved = settings or AppSettings()
    level = logging.getLevelName(resolved.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    return level
