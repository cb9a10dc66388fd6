"""Centralized logging configuration.

Every module logs through get_logger(__name__). The level defaults to
SENTINEL_LOG_LEVEL so the sweeper thread and request handlers agree
without passing a Config around.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger with a single stream handler attached."""
    level_name = (level or os.getenv("SENTINEL_LOG_LEVEL", "INFO")).upper()

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
