"""Logging setup shared by the API process and the bootstrap scripts."""

from __future__ import annotations

import logging.config

from otp_server.core.config import Settings


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.debug else settings.logging.level.upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": settings.logging.format},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"handlers": ["console"], "level": level},
            "loggers": {
                # httpx logs every request line at INFO, including provider URLs
                "httpx": {"level": "WARNING"},
                "sqlalchemy.engine": {"level": "INFO" if settings.database.echo else "WARNING"},
            },
        }
    )
