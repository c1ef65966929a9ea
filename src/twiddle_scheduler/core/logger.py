"""Console logging setup for the scheduler package."""

from __future__ import annotations

import logging

LOGGER_NAME = "twiddle_scheduler"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a console handler to the package logger.

    Warm Lambda containers reuse the process, so the handler is only added once.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    logger.propagate = False

    if not logger.handlers:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(console)
    return logger
