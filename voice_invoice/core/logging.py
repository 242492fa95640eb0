"""Logging setup for the dictation service."""

from __future__ import annotations

import logging

from voice_invoice.core.config import Settings, get_settings

LOGGER_NAME = "voice_invoice"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger and apply the level."""

    settings = settings or get_settings()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
