"""
Logging configuration for the nginxarch command-line tools.

Command output goes to stdout through rich; log records go to stderr.
"""

import logging
import logging.config
import os
from typing import Any, Dict, Optional


class HttpxRequestFilter(logging.Filter):
    """Filter to suppress per-request httpx INFO lines."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Drop "HTTP Request: GET ..." records emitted by httpx."""
        if record.name.startswith("httpx") and record.levelno <= logging.INFO:
            if record.getMessage().startswith("HTTP Request:"):
                return False
        return True


def get_logging_config(level: Optional[str] = None) -> Dict[str, Any]:
    """Get logging configuration with httpx request suppression."""
    level = (level or os.environ.get("NGINXARCH_LOG_LEVEL", "WARNING")).upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "httpx_request_filter": {
                "()": HttpxRequestFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
                "filters": ["httpx_request_filter"]
            }
        },
        "loggers": {
            "nginxarch": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "httpx": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
