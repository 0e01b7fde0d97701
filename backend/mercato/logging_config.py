# Overview: Process-wide logging setup applied by the application factory.

import logging
from logging.config import dictConfig

from flask import Flask


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": LOG_FORMAT,
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "loggers": {
                "mercato": {"level": level},
                "sqlalchemy.engine": {"level": "WARNING"},
            },
            "root": {
                "level": level,
                "handlers": ["console"],
            },
        }
    )

    app.logger.setLevel(getattr(logging, level, logging.INFO))
