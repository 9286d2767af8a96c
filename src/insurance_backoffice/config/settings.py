"""Centralized configuration from environment variables with defaults."""

import os

from dotenv import load_dotenv

load_dotenv()


def _int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _str(key: str, default: str) -> str:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

DEFAULT_DB_PATH = "data/backoffice.db"
DB_RETRY_ATTEMPTS = _int("BACKOFFICE_DB_RETRY_ATTEMPTS", 3)


# ---------------------------------------------------------------------------
# Policies and identifiers
# ---------------------------------------------------------------------------

DEFAULT_RENEWAL_MONTHS = _int("BACKOFFICE_DEFAULT_RENEWAL_MONTHS", 12)
ID_SUFFIX_LENGTH = _int("BACKOFFICE_ID_SUFFIX_LENGTH", 12)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def get_log_format() -> str:
    """Log output format: 'human' (default) or 'json'."""
    return _str("BACKOFFICE_LOG_FORMAT", "human").lower()


def get_log_level() -> str:
    """Log level name from BACKOFFICE_LOG_LEVEL (default INFO)."""
    return _str("BACKOFFICE_LOG_LEVEL", "INFO").upper()
