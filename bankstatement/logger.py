"""
Unified Logging Module
======================

Single place to configure logging for the ``bankstatement`` package.

Records go to stderr: stdout is reserved for the JSON document produced by
the command line tool.

Usage:
    from bankstatement.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Parsing statement: %s", file_path)
"""

import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = logging.INFO
ROOT_LOGGER_NAME = "bankstatement"

_root_configured = False


def _configure_root_logger() -> None:
    """Attach the stderr handler to the package logger exactly once."""
    global _root_configured
    if _root_configured:
        return

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(DEFAULT_LEVEL)
    root_logger.addHandler(console_handler)
    root_logger.propagate = False

    _root_configured = True


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Return a logger for *name* (usually ``__name__``).

    Loggers outside the ``bankstatement`` hierarchy (e.g. ``app.cli``) are
    nested under it so they share the same handler and level.
    """
    _configure_root_logger()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_level(level: Union[int, str], logger_name: Optional[str] = None) -> None:
    """
    Set the level of *logger_name*, or of the package logger when omitted.

    Example:
        set_level("DEBUG")  # per-row header scores become visible
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger = logging.getLogger(logger_name or ROOT_LOGGER_NAME)
    logger.setLevel(level)
