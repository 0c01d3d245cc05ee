"""Logging setup for the arena tools."""

from __future__ import annotations

import logging
import os
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: Optional[str] = None,
    format: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT
) -> logging.Logger:
    """
    Configure logging for the arena.

    Args:
        level: Explicit log level. Falls back to the ``RPS_ARENA_LOG_LEVEL``
            env var, then INFO.
        format: Log format string.
        datefmt: Date format string.

    Returns:
        The ``rps_arena`` logger.
    """
    raw_level = level if level is not None else os.getenv("RPS_ARENA_LOG_LEVEL")
    resolved_level = (raw_level or "INFO").upper()
    logging.basicConfig(level=resolved_level, format=format, datefmt=datefmt)

    app_logger = logging.getLogger("rps_arena")
    app_logger.setLevel(resolved_level)
    return app_logger
