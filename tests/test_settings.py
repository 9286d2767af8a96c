"""Tests for centralized configuration (settings)."""

import importlib

from insurance_backoffice.config import settings


def test_defaults_are_positive_integers():
    """Numeric settings default to positive integers."""
    assert settings.DEFAULT_RENEWAL_MONTHS == 12
    assert settings.ID_SUFFIX_LENGTH == 12
    assert settings.DB_RETRY_ATTEMPTS >= 1


def test_get_log_format_default(monkeypatch):
    monkeypatch.delenv("BACKOFFICE_LOG_FORMAT", raising=False)
    assert settings.get_log_format() == "human"


def test_get_log_format_respects_env(monkeypatch):
    monkeypatch.setenv("BACKOFFICE_LOG_FORMAT", "JSON")
    assert settings.get_log_format() == "json"


def test_get_log_level_default_and_blank(monkeypatch):
    """A blank value falls back to the default."""
    monkeypatch.delenv("BACKOFFICE_LOG_LEVEL", raising=False)
    assert settings.get_log_level() == "INFO"
    monkeypatch.setenv("BACKOFFICE_LOG_LEVEL", "  ")
    assert settings.get_log_level() == "INFO"
    monkeypatch.setenv("BACKOFFICE_LOG_LEVEL", "debug")
    assert settings.get_log_level() == "DEBUG"


def test_renewal_months_from_env(monkeypatch):
    """Module-level constants are read from the environment at import."""
    monkeypatch.setenv("BACKOFFICE_DEFAULT_RENEWAL_MONTHS", "24")
    try:
        importlib.reload(settings)
        assert settings.DEFAULT_RENEWAL_MONTHS == 24
    finally:
        monkeypatch.delenv("BACKOFFICE_DEFAULT_RENEWAL_MONTHS")
        importlib.reload(settings)
    assert settings.DEFAULT_RENEWAL_MONTHS == 12


def test_invalid_integer_falls_back(monkeypatch):
    monkeypatch.setenv("BACKOFFICE_ID_SUFFIX_LENGTH", "twelve")
    assert settings._int("BACKOFFICE_ID_SUFFIX_LENGTH", 12) == 12
