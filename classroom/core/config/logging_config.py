import logging
import logging.config
import os
from typing import List, Optional

from classroom.core.config.settings import Settings, get_settings

APP_LOGGER = "classroom"
ERROR_LOGGER = "classroom.errors"

def _rotating_file(settings: Settings, filename: str, level: Optional[str] = None) -> dict:
    handler = {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "json",
        "filename": os.path.join(settings.LOG_DIR, filename),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
    }
    if level:
        handler["level"] = level
    return handler

def _logger(handlers: List[str], level: str, propagate: bool = False) -> dict:
    return {"handlers": handlers, "level": level, "propagate": propagate}

def build_logging_config(settings: Settings) -> dict:
    """
    dictConfig for the API

    Everything goes to stdout in plain text and to ``app.log`` as JSON lines.
    Unhandled and storage errors are logged on ``classroom.errors`` and also
    land in ``error.log``.
    """
    app_level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "rename_fields": {"asctime": "time", "levelname": "level"},
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stdout",
            },
            "app_file": _rotating_file(settings, "app.log"),
            "error_file": _rotating_file(settings, "error.log", level="ERROR"),
        },
        "root": {"handlers": ["console", "app_file"], "level": settings.LOG_LEVEL},
        "loggers": {
            APP_LOGGER: _logger(["console", "app_file"], app_level),
            ERROR_LOGGER: _logger(["console", "app_file", "error_file"], "ERROR"),
            # SQL echo only when debugging
            "sqlalchemy.engine": _logger(["console"], "INFO" if settings.DEBUG else "WARNING"),
        },
    }

def setup_logging() -> logging.Logger:
    """Configure logging for the application and return the app logger"""
    settings = get_settings()
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings))
    return logging.getLogger(APP_LOGGER)
