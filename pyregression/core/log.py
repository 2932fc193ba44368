"""
Logging setup for interactive use.

Library modules log through ``logging.getLogger(__name__)``; the package
root logger carries a NullHandler so nothing is printed unless the
application configures logging. setup_logging() is a convenience for
notebooks and scripts.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "pyregression"


def setup_logging(level: int = logging.INFO, stream=None) -> logging.Logger:
    """Attach a single stream handler to the package logger and return it."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False  # Avoid duplicate records via the root logger

    for h in list(logger.handlers):
        if not isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "[%(asctime)s] %(levelname)s %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    ))
    logger.addHandler(handler)
    return logger
