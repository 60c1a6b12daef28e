"""Logging setup shared by the web app, the service and the CLI."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Configure and return a logger instance.

    The level defaults to the ``CASHFLOW_LOG_LEVEL`` environment variable,
    then INFO. Calling this twice for the same name does not add a second
    handler.
    """
    log_level = (level or os.getenv("CASHFLOW_LOG_LEVEL", "INFO")).upper()

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)

    return logger
