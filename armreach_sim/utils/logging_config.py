"""
Logging setup for the ``armreach_sim`` package logger.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once, by the command-line entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

PACKAGE_LOGGER = "armreach_sim"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def _build_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    return handlers


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Route package log records to stdout and, optionally, a file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Threshold applied to the logger and its handlers.
        log_file: Path of a log file, truncated on open.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _build_handlers(log_file):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to stdout%s at %s", f" and {log_file}" if log_file else "",
                 logging.getLevelName(level))
    return logger
