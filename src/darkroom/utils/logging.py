"""Package logger for Darkroom."""

from __future__ import annotations

import logging
import os
from typing import Optional

LOGGER_NAME = "darkroom"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LOGGER: Optional[logging.Logger] = None


def _level_from_env() -> int:
    name = os.getenv("DARKROOM_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the ``darkroom`` logger, or its child *name*.

    The package logger gets a stream handler on first use.  Its level comes
    from ``DARKROOM_LOG_LEVEL`` and defaults to ``INFO``.
    """

    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger(LOGGER_NAME)
        if not _LOGGER.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            _LOGGER.addHandler(handler)
        _LOGGER.setLevel(_level_from_env())
    if name:
        return _LOGGER.getChild(name)
    return _LOGGER


logger = get_logger()
