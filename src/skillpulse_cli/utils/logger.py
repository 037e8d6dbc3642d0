"""File logging for SkillPulse CLI.

Modules log through ``logging.getLogger(__name__)``; those loggers sit under
the ``skillpulse_cli`` package logger, which writes to a rotating file in the
platformdirs log directory. Nothing is logged to the terminal.

``SKILLPULSE_LOG_LEVEL`` (e.g. ``INFO``) raises the threshold from DEBUG.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "skillpulse_cli"
_LOG_FILE = "skillpulse.log"
_LEVEL_ENV = "SKILLPULSE_LOG_LEVEL"
_MAX_BYTES = 2 * 1024 * 1024
_BACKUP_COUNT = 3

# Their DEBUG output repeats every request and response line
_QUIET_LOGGERS = ("httpx", "httpcore")

_logger: logging.Logger | None = None


def log_file_path() -> Path:
    return Path(user_log_dir(_APP_NAME)) / _LOG_FILE


def _level() -> int:
    name = os.environ.get(_LEVEL_ENV, "DEBUG").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.DEBUG


def get_logger() -> logging.Logger:
    """Configure the package logger on first call and return it."""
    global _logger
    if _logger is not None:
        return _logger

    path = log_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(_APP_NAME)
    logger.setLevel(_level())
    logger.propagate = False
    if not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers):
        handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
        )
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logger = logger
    return _logger
