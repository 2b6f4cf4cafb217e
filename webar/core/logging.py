"""Logging setup applied when the application starts."""

from __future__ import annotations

import logging
from logging.config import dictConfig

from webar.core.config import Settings


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.debug else settings.logging.level.upper()
    dictConfig(
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
            "loggers": {
                "webar": {"handlers": ["console"], "level": level, "propagate": False},
            },
        }
    )
    logging.getLogger(__name__).debug("Logging configured at level %s", level)
