"""
Centralized logging configuration with structured logging support.
"""
import json
import logging
import logging.config
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from quiz_analysis.core.config import settings

# Context variable for correlating every log line emitted while one analysis
# or one batch is running, including lines from concurrent batch items.
analysis_id_context: ContextVar[Optional[str]] = ContextVar(
    "analysis_id", default=None
)

# Structured fields copied from ``extra=`` onto JSON log entries
_STRUCTURED_FIELDS = (
    "engine_id",
    "engine_version",
    "response_id",
    "quiz_id",
    "duration_ms",
    "batch_size",
    "failed_count",
)


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for production logging.

    Produces structured log entries with consistent fields for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry: Dict[str, Any] = {
            "timestamp": timestamp.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        analysis_id = analysis_id_context.get()
        if analysis_id:
            log_entry["analysis_id"] = analysis_id

        for field_name in _STRUCTURED_FIELDS:
            if hasattr(record, field_name):
                log_entry[field_name] = getattr(record, field_name)

        # Add source location for error-level logs
        if record.levelno >= logging.ERROR:
            log_entry["source"] = f"{record.pathname}:{record.lineno}"

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(log_level_name: Optional[str] = None) -> None:
    """
    Configure application-wide logging with structured output.

    Configures:
    - Log levels based on settings (or ``log_level_name`` when given)
    - JSON formatting for production (structured for log aggregators)
    - Human-readable format for development
    """
    level_name = log_level_name or settings.LOG_LEVEL
    log_level = getattr(logging, level_name.upper(), logging.INFO)

    is_production = settings.ENV == "production"

    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": JSONFormatter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "json" if is_production else "default",
                "stream": sys.stderr,
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["console"],
        },
        "loggers": {
            "quiz_analysis": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
            "asyncio": {
                "level": logging.WARNING,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
