"""Retry utilities with exponential backoff for storage operations."""

import functools
import logging
import sqlite3
from typing import Callable, TypeVar

from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from insurance_backoffice.config.settings import DB_RETRY_ATTEMPTS

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLite reports writer contention with these messages
TRANSIENT_MESSAGES = ("database is locked", "database table is locked")


def is_transient_db_error(exc: BaseException) -> bool:
    """True for SQLite lock contention, which is worth retrying."""
    if not isinstance(exc, sqlite3.OperationalError):
        return False
    message = str(exc).lower()
    return any(m in message for m in TRANSIENT_MESSAGES)


def _log_retry(retry_state) -> None:
    logger.warning(
        "Retrying %s after transient storage error (attempt %d)",
        getattr(retry_state.fn, "__name__", "operation"),
        retry_state.attempt_number,
    )


def with_db_retry(
    max_attempts: int = DB_RETRY_ATTEMPTS,
    min_wait: float = 0.05,
    max_wait: float = 1.0,
    multiplier: float = 0.1,
):
    """Decorator that retries a storage call with exponential backoff on lock contention.

    Args:
        max_attempts: Maximum number of attempts (default BACKOFFICE_DB_RETRY_ATTEMPTS).
        min_wait: Minimum wait between retries in seconds.
        max_wait: Maximum wait between retries in seconds.
        multiplier: Base multiplier for exponential backoff.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
            retry=retry_if_exception(is_transient_db_error),
            before_sleep=_log_retry,
            reraise=True,
        )
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return func(*args, **kwargs)

        return wrapper

    return decorator
