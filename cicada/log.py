"""
Logging setup for CICADA.

Modules log through ``logging.getLogger(__name__)``; entry points (CLI, API)
call :func:`configure_logging` once to attach a console handler to the
``cicada`` package logger.
"""

import logging
import sys
from typing import Union

LOGGER_NAME = "cicada"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the package logger and set its level."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not any(getattr(h, "_cicada_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._cicada_handler = True
        logger.addHandler(handler)

    return logger
