from logging.config import dictConfig
import logging

from fitclub.config import settings


class ContextFormatter(logging.Formatter):
    """Fills in request and member placeholders for records logged outside a request."""

    def format(self, record):
        if not hasattr(record, "request_id"):
            record.request_id = "no-request-id"
        if not hasattr(record, "user_id"):
            record.user_id = "-"
        return super().format(record)


LOG_LEVEL = "DEBUG" if settings.DEBUG else "INFO"

# Crud modules log under "fitclub.*"; access logs use the shorter format
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": ContextFormatter,
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] [user=%(user_id)s] - %(message)s",
        },
        "simple": {
            "()": ContextFormatter,
            "format": "%(asctime)s - %(levelname)s - [%(request_id)s] - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
        "access": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "level": LOG_LEVEL,
        "handlers": ["console"],
    },
    "loggers": {
        "fitclub": {
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn.access": {
            "level": "INFO",
            "handlers": ["access"],
            "propagate": False,
        },
        "sqlalchemy.engine": {
            "level": "INFO" if settings.DEBUG else "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
    },
}

def configure_logging():
    """Configure logging for the application."""
    dictConfig(LOGGING_CONFIG)
