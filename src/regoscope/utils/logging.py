"""Logging utilities for regoscope.

Library modules only call get_logger(__name__), so every logger sits under
the ``regoscope`` package logger. setup_logging() is for the CLI: it puts a
single stderr handler on that package logger and leaves the root logger and
other libraries' logging alone.
"""

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "regoscope"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False, level: Optional[int] = None) -> logging.Logger:
    """Configure the regoscope package logger.

    Calling it again replaces the handler installed by the previous call,
    so repeated CLI invocations in one process never duplicate output.

    Args:
        verbose: If True, log at DEBUG, otherwise WARNING
        level: Optional explicit log level (overrides verbose)

    Returns:
        The configured package logger
    """
    if level is None:
        level = logging.DEBUG if verbose else logging.WARNING

    # stderr keeps --json output on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module, under the package logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
