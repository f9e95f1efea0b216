"""
Custom logging configuration to suppress health check logs and mask session ids
"""

import logging
import logging.config
import re
from typing import Any, Dict

# Routes carry the session id as the first segment after the action name
SESSION_PATH_PATTERN = re.compile(
    r"(/api/(?:guilds|status|nickname|avatar|username|leave|channels|messages|logout)/)([^/\s\"?]+)"
)


class HealthCheckFilter(logging.Filter):
    """Filter to suppress health check endpoint logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out health check requests from uvicorn access logs."""
        if record.name == "uvicorn.access":
            message = record.getMessage()
            if ("/health " in message or "/healthz " in message) and "GET" in message:
                return False
        return True


class SessionIdFilter(logging.Filter):
    """Mask session ids in uvicorn access log lines."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True

        message = record.getMessage()
        masked = SESSION_PATH_PATTERN.sub(_mask_session, message)
        if masked != message:
            # Freeze the rendered message so handlers print the masked copy
            record.msg = masked
            record.args = ()
        return True


def _mask_session(match: "re.Match[str]") -> str:
    return f"{match.group(1)}{mask_session_id(match.group(2))}"


def mask_session_id(session_id: str) -> str:
    """Shorten a session id to a loggable prefix."""
    return f"{session_id[:6]}***" if session_id else "***"


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with health check suppression."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter
            },
            "session_id_filter": {
                "()": SessionIdFilter
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
                "filters": ["health_check_filter", "session_id_filter"]
            }
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False
            },
            "discord": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            },
            "botpanel": {
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
