"""
Logging configuration for kmerscan.

This module provides:
- Structured JSON logging support for machine-readable diagnostics
- A human-readable format for interactive runs
- The service logger used by the scanner

Log output goes to stderr; stdout is reserved for the scan total.
"""

import logging
import sys
from typing import Any

from .settings import get_settings

settings = get_settings()

# LogRecord attributes that are not user-supplied "extra" fields
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "asctime",
    }
)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON objects for easy parsing and analysis.
    Includes standard fields plus any extra fields from the log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a JSON string."""
        import json
        from datetime import datetime, timezone

        log_dict: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            log_dict["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_dict["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        # These come from logger.debug("message", extra={"path": ...})
        extra_fields = _extra_fields(record)
        if extra_fields:
            log_dict.update(extra_fields)

        return json.dumps(log_dict, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable formatter with context support.

    Appends any extra fields of the record as key=value pairs.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a human-readable string."""
        base_format = super().format(record)

        extra_fields = _extra_fields(record)
        if extra_fields:
            extras = " | ".join(f"{k}={v}" for k, v in extra_fields.items())
            return f"{base_format} | {extras}"

        return base_format


def setup_logging(level: str, use_json: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_json: If True, use JSON structured logging; otherwise use human-readable format
    """
    if use_json:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = HumanReadableFormatter(
            fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Pydantic can be chatty at DEBUG while validating settings
    logging.getLogger("pydantic").setLevel(logging.WARNING)


# Use JSON logging in production (ENV=prod)
use_json_logging = settings.ENV.lower() == "prod"

setup_logging(settings.LOG_LEVEL, use_json=use_json_logging)

logger_kmer = logging.getLogger(settings.KMER_LOG_NAME)

if use_json_logging:
    logger_kmer.debug("JSON structured logging enabled")
else:
    logger_kmer.debug("Human-readable logging enabled (set ENV=prod for JSON logging)")
