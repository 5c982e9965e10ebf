"""Logging configuration for the workflow designer.

Request-scoped fields (request id, method, path) live in a context
variable, so concurrent requests served by the same event loop each log
their own values.
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar, Token
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(module)s:%(funcName)s:%(lineno)d] - %(message)s"

_request_context: ContextVar[Dict[str, Any]] = ContextVar("workflow_designer_log_context", default={})


class StructuredFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info)
            }

        entry.update(getattr(record, "extra_fields", {}))
        return json.dumps(entry, default=str)


class RequestContextFilter(logging.Filter):
    """Copies the current request context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        fields = dict(_request_context.get())
        fields.update(getattr(record, "extra_fields", {}))
        record.extra_fields = fields
        return True


def _build_formatter(structured: bool, log_format: Optional[str]) -> logging.Formatter:
    if structured:
        return StructuredFormatter()
    return logging.Formatter(fmt=log_format or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    structured: bool = False,
    max_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure logging for the workflow designer.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for rotating log output
        log_format: Custom log format string, ignored for structured output
        structured: Whether to emit JSON lines
        max_size: Maximum log file size in bytes before rotation
        backup_count: Number of rotated files to keep

    Returns:
        Root logger instance
    """
    formatter = _build_formatter(structured, log_format)
    context_filter = RequestContextFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_file, maxBytes=max_size, backupCount=backup_count))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    engine_level = logging.DEBUG if level.upper() == "DEBUG" else logging.INFO
    logging.getLogger("workflow_designer.core").setLevel(engine_level)
    logging.getLogger("workflow_designer.api").setLevel(logging.INFO)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name."""
    return logging.getLogger(name)


def get_logging_context() -> Dict[str, Any]:
    """Context fields attached to records logged from the current task."""
    return dict(_request_context.get())


def set_logging_context(**kwargs) -> Token:
    """
    Add context fields for records logged from the current task.

    Returns:
        Token restoring the previous context when passed to reset_logging_context
    """
    return _request_context.set({**_request_context.get(), **kwargs})


def reset_logging_context(token: Token) -> None:
    _request_context.reset(token)


def clear_logging_context() -> None:
    """Drop every context field for the current task."""
    _request_context.set({})


def log_with_context(logger: logging.Logger, level: int, message: str, **context):
    """Log a message with additional context fields."""
    logger.log(level, message, extra={"extra_fields": context})
