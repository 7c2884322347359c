"""
Structured JSON logging configuration.

This module provides:
- JSON-formatted single-line log output for log shippers (Loki, CloudWatch)
- Request ID and acting user ID propagation via contextvars
- The same formatter for the API process and Celery workers

Log Structure (JSON):
{
    "timestamp": "2024-01-15T10:30:00.123Z",
    "level": "INFO",
    "logger": "services.intake_service",
    "message": "Intake form submitted",
    "request_id": "abc12345",
    "user_id": "6f1c...",
    "extra": { ... }
}

Usage:
    from core.logging_config import setup_logging

    # At app startup
    setup_logging()

    # Anywhere (request_id/user_id are attached automatically)
    logger.info("Intake form submitted", extra={"form_id": form_id})

Patient data (names, form contents) should not be passed in `extra`; log
ids instead. Email addresses under the "recipient" or "email" keys are
masked by the formatter.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# =============================================================================
# REQUEST CONTEXT
# =============================================================================

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

# Top-level packages whose loggers are configured by setup_logging()
APP_LOGGERS = ("core", "api", "services", "repositories", "tasks", "celery_app")

_STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
})

# `extra` keys whose values are email addresses
MASKED_EMAIL_KEYS = frozenset({"recipient", "email"})


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    """Set the request ID for the current request/coroutine."""
    request_id_var.set(request_id)


def clear_request_id() -> None:
    """Clear the request ID (call at end of request)."""
    request_id_var.set(None)


def get_user_id() -> Optional[str]:
    """Get the acting user's profile ID from context."""
    return user_id_var.get()


def set_user_id(user_id: Optional[str]) -> None:
    """Set the acting user's profile ID for the current request."""
    user_id_var.set(user_id)


# =============================================================================
# JSON FORMATTER
# =============================================================================

def mask_email(value: Any) -> Any:
    """
    Reduce an address to its first character and domain.

    Example:
        >>> mask_email("jane.doe@example.com")
        'j***@example.com'
    """
    if not isinstance(value, str) or "@" not in value:
        return value
    local, _, domain = value.strip().partition("@")
    return f"{local[:1]}***@{domain}"


class JSONFormatter(logging.Formatter):
    """
    Single-line JSON log formatter.

    All timestamps are UTC with millisecond precision.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_entry["request_id"] = request_id

        user_id = get_user_id()
        if user_id:
            log_entry["user_id"] = user_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: mask_email(value) if key in MASKED_EMAIL_KEYS else value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry, default=str, ensure_ascii=False)


# =============================================================================
# LOGGING SETUP
# =============================================================================

def _build_handler(json_format: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
    return handler


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    include_uvicorn: bool = True
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, use JSON format; if False, use human-readable format
        include_uvicorn: If True, route uvicorn loggers through the root handler

    Environment Variables:
        LOG_LEVEL: Override the log level (default: INFO)
        LOG_FORMAT: Override format ("json" or "text", default: json)
    """
    level = os.environ.get("LOG_LEVEL", level).upper()
    json_format = os.environ.get("LOG_FORMAT", "json" if json_format else "text").lower() == "json"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [_build_handler(json_format)]

    for logger_name in APP_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.handlers = []
        logger.propagate = True

    if include_uvicorn:
        for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
            logger = logging.getLogger(logger_name)
            logger.handlers = []
            logger.propagate = True

    # httpx logs every request URL at INFO, which includes Metricool tokens in query strings
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"level": level, "format": "json" if json_format else "text"}
    )


def setup_worker_logging(logger: logging.Logger, **kwargs: Any) -> None:
    """
    Celery `after_setup_logger` signal handler.

    Replaces Celery's default handlers with the JSON handler so worker
    logs share the API's structure.
    """
    json_format = os.environ.get("LOG_FORMAT", "json").lower() == "json"
    logger.handlers = [_build_handler(json_format)]
