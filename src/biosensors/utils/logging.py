"""
Logging setup for biosensors.

Modules log through ``logging.getLogger(__name__)`` below the package
logger. ``setup_logging`` gives that logger one stderr handler; calling it
again only moves the level, so the handler is never duplicated.
"""

import logging
import sys
from typing import IO, Optional, Union

__all__ = [
    "PACKAGE_LOGGER",
    "setup_logging",
]

PACKAGE_LOGGER = "biosensors"

_HANDLER_NAME = "biosensors.console"
_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level: {level!r}")
    return value


def _package_handler(logger: logging.Logger) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def setup_logging(level: Union[str, int] = "INFO", stream: Optional[IO] = None) -> logging.Logger:
    """
    Route package log records to a console handler at ``level``.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR) or number
        stream: Output stream for a newly created handler; stderr if None

    Returns:
        The package logger
    """
    level = _resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    handler = _package_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)
    handler.setLevel(level)

    return logger
