"""Logging setup for peek-fm.

The terminal belongs to the Textual UI, so records go to a rotating file
under the platform log directory and to the Textual devtools console.

Usage:
    from peekfm.log import get_logger
    log = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import platformdirs
from textual.logging import TextualHandler

from peekfm.config import APP_AUTHOR, APP_NAME

LOGGER_NAME = "peekfm"
LOG_LEVEL_ENV = "PEEKFM_LOG_LEVEL"

_CONFIGURED = False


def log_file_path() -> Path:
    return Path(platformdirs.user_log_dir(APP_NAME, APP_AUTHOR)) / "peek-fm.log"


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> logging.Logger:
    """Attach handlers to the package logger once; later calls only adjust the level."""
    global _CONFIGURED
    logger = logging.getLogger(LOGGER_NAME)
    level_name = (level or os.environ.get(LOG_LEVEL_ENV, "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if _CONFIGURED:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    path = log_file or log_file_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        logger.addHandler(logging.NullHandler())
        logger.warning("Cannot write log file %s: %s", path, e)

    logger.addHandler(TextualHandler())
    logger.propagate = False
    _CONFIGURED = True
    return logger
