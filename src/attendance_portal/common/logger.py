"""Logging utility."""
from __future__ import annotations

import logging
import sys
from typing import Optional

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str = "attendance_portal", level: Optional[int] = None) -> logging.Logger:
    """Attach a stdout handler to the package logger (once) and return it."""
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
