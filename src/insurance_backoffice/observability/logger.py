"""Structured logging with entity context for observability.

This module provides:
- EntityLogger: A structured logger that attaches entity type/id to log messages
- entity_context: A context manager for setting entity context on a block
- log_event: Helper for logging domain events
"""

import json
import logging
import sys
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from insurance_backoffice.config.settings import get_log_format, get_log_level

# Thread-local storage for entity context
_context = threading.local()


def _get_entity_context() -> dict[str, Any]:
    """Get the current entity context from thread-local storage."""
    return getattr(_context, "entity_data", {})


def _set_entity_context(data: dict[str, Any]) -> None:
    """Set the entity context in thread-local storage."""
    _context.entity_data = data


def _context_fields(record: logging.LogRecord) -> dict[str, Any]:
    ctx = _get_entity_context()
    entity_type = getattr(record, "entity_type", None) or ctx.get("entity_type")
    entity_id = getattr(record, "entity_id", None) or ctx.get("entity_id")
    fields: dict[str, Any] = {}
    if entity_type:
        fields["entity_type"] = entity_type
    if entity_id is not None:
        fields["entity_id"] = entity_id
    return fields


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON with entity context."""
        log_data: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_timestamp:
            log_data["timestamp"] = datetime.now(timezone.utc).isoformat()

        log_data.update(_context_fields(record))

        if hasattr(record, "extra_data") and record.extra_data:
            log_data["data"] = record.extra_data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter with entity context prefix."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

        fields = _context_fields(record)
        ctx_str = ""
        if fields:
            ctx_str = f" [{fields.get('entity_type', '?')}={fields.get('entity_id', '?')}]"

        message = record.getMessage()
        if hasattr(record, "extra_data") and record.extra_data:
            message += f" | {record.extra_data}"

        return f"{timestamp} {record.levelname:8}{ctx_str} {record.name}: {message}"


class EntityLogger(logging.LoggerAdapter):
    """Logger adapter that adds entity context to all log messages."""

    def __init__(
        self,
        logger: logging.Logger,
        entity_type: str | None = None,
        entity_id: int | str | None = None,
    ):
        super().__init__(logger, {})
        self._entity_type = entity_type
        self._entity_id = entity_id

    def bind(self, entity_type: str, entity_id: int | str | None) -> "EntityLogger":
        """Return a logger for the same target bound to one entity."""
        return EntityLogger(self.logger, entity_type, entity_id)

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        if self._entity_type:
            extra.setdefault("entity_type", self._entity_type)
        if self._entity_id is not None:
            extra.setdefault("entity_id", self._entity_id)
        kwargs["extra"] = extra
        return msg, kwargs

    def log_event(
        self,
        event: str,
        level: int = logging.INFO,
        **data: Any,
    ) -> None:
        """Log a structured domain event with additional data."""
        log_event(self, event, level=level, **data)


def get_logger(
    name: str,
    structured: bool | None = None,
) -> EntityLogger:
    """Get an EntityLogger instance.

    Args:
        name: Logger name (typically __name__)
        structured: If True, use JSON format. If False, use human-readable.
                   If None, use BACKOFFICE_LOG_FORMAT env var (default: human)

    Returns:
        EntityLogger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        if structured is None:
            structured = get_log_format() == "json"

        handler = logging.StreamHandler(sys.stdout)
        if structured:
            handler.setFormatter(StructuredFormatter())
        else:
            handler.setFormatter(HumanReadableFormatter())

        logger.addHandler(handler)
        logger.setLevel(getattr(logging, get_log_level(), logging.INFO))
        # Prevent duplicate logs from propagating to parent handlers
        logger.propagate = False

    return EntityLogger(logger)


@contextmanager
def entity_context(entity_type: str, entity_id: int | str | None = None, **extra: Any):
    """Context manager for setting entity context on all logs within the block.

    Usage:
        with entity_context("claim", 42):
            logger.info("Approving")  # includes entity_type/entity_id
    """
    old_context = _get_entity_context()
    _set_entity_context({"entity_type": entity_type, "entity_id": entity_id, **extra})
    try:
        yield
    finally:
        _set_entity_context(old_context)


def log_event(
    logger: logging.Logger | logging.LoggerAdapter,
    event: str,
    level: int = logging.INFO,
    **data: Any,
) -> None:
    """Log a domain event with structured data.

    Args:
        logger: Logger instance
        event: Event name (e.g., "claim_created", "policy_renewed")
        level: Log level
        **data: Additional event data
    """
    message = f"[{event}]"
    if data:
        details = ", ".join(f"{k}={v}" for k, v in data.items())
        message = f"{message} {details}"
    logger.log(level, message, extra={"extra_data": {"event": event, **data}})
