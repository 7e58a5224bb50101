"""
Tests for settings and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError

from puzzle_verifier.config import Settings, get_settings
from puzzle_verifier.logging_setup import configure_logging, parse_log_level


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("PUZZLE_CATALOG_PATH", "PUZZLE_STRICT", "PUZZLE_MAX_WORKERS",
                 "PUZZLE_VERIFY_TIMEOUT_S", "PUZZLE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.catalog_path == "data/puzzles.json"
    assert settings.strict is False
    assert settings.max_workers == 1
    assert settings.verify_timeout_s is None
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PUZZLE_CATALOG_PATH", "/tmp/other.json")
    monkeypatch.setenv("PUZZLE_STRICT", "1")
    monkeypatch.setenv("PUZZLE_MAX_WORKERS", "4")
    monkeypatch.setenv("PUZZLE_VERIFY_TIMEOUT_S", "2.5")
    settings = Settings(_env_file=None)
    assert settings.catalog_path == "/tmp/other.json"
    assert settings.strict is True
    assert settings.max_workers == 4
    assert settings.verify_timeout_s == 2.5


def test_invalid_values_rejected(monkeypatch):
    monkeypatch.setenv("PUZZLE_MAX_WORKERS", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("PUZZLE_MAX_WORKERS", "8")
    assert get_settings() is first
    get_settings.cache_clear()
    assert get_settings().max_workers == 8


def test_parse_log_level():
    assert parse_log_level("debug") == logging.DEBUG
    assert parse_log_level(None) == logging.WARNING
    assert parse_log_level("nonsense") == logging.WARNING


def test_configure_logging_is_repeatable():
    configure_logging("INFO")
    configure_logging("DEBUG")
    logger = logging.getLogger("puzzle_verifier")
    assert logger.level == logging.DEBUG
    named = [h for h in logger.handlers if h.get_name() == "puzzle_verifier.stderr"]
    assert len(named) == 1
