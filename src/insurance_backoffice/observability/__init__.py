"""Observability module: structured logging with entity context."""

from insurance_backoffice.observability.logger import (
    EntityLogger,
    entity_context,
    get_logger,
    log_event,
)

__all__ = [
    "EntityLogger",
    "entity_context",
    "get_logger",
    "log_event",
]
