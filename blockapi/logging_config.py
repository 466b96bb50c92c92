"""
Custom logging configuration with a dedicated access log and health check suppression
"""

import json
import logging
import logging.config
from typing import Dict, Any


ACCESS_LOGGER = "blockapi.access"


class HealthCheckFilter(logging.Filter):
    """Filter to suppress health check endpoint logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out liveness probe requests from access logs."""
        if record.name not in ("uvicorn.access", ACCESS_LOGGER):
            return True

        message = record.getMessage()
        if record.name == ACCESS_LOGGER:
            # Access records are JSON documents emitted by the logging stage
            try:
                return json.loads(message).get("path") != "/healthz"
            except ValueError:
                return True
        return not ("/healthz" in message and "GET" in message)


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with health check suppression."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "access": {
                "format": "%(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout"
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"]
            }
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["access"],
                "level": level,
                "propagate": False
            },
            ACCESS_LOGGER: {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False
            },
            "blockapi": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration process-wide."""
    logging.config.dictConfig(get_logging_config(level))
