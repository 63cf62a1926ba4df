"""
Custom logging configuration to suppress probe and static asset access logs
"""

import logging
import logging.config
import re
from typing import Any, Dict

from sessiongate.modules.filters import STATIC_ASSET_PATTERN

# uvicorn access records carry (client, method, path, http_version, status)
_PATH_ARG_INDEX = 2
_STATIC_ASSET_RE = re.compile(STATIC_ASSET_PATTERN)


class QuietAccessFilter(logging.Filter):
    """Filter to suppress health check and static asset requests."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out noisy requests from uvicorn access logs."""
        if record.name != "uvicorn.access":
            return True

        path = None
        if isinstance(record.args, tuple) and len(record.args) > _PATH_ARG_INDEX:
            path = str(record.args[_PATH_ARG_INDEX]).split("?", 1)[0]

        if path is None:
            message = record.getMessage()
            return not ("/health" in message and "GET" in message)

        if path == "/health":
            return False
        return _STATIC_ASSET_RE.search(path) is None


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with access log suppression."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "quiet_access_filter": {
                "()": QuietAccessFilter
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
                "filters": ["quiet_access_filter"]
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
            "sessiongate": {
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
    logging.config.dictConfig(get_logging_config(level))
