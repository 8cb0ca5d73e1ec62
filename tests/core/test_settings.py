"""Tests for ctxmgr.core.settings."""

import pytest
from pydantic import ValidationError

from ctxmgr.core.settings import ContextSettings, get_settings


class TestContextSettings:
    def test_defaults(self):
        settings = ContextSettings(_env_file=None)
        assert settings.lock_timeout_ms == 500
        assert settings.lock_guard == "script"
        assert settings.log_level == "INFO"
        assert settings.json_logs is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CTXMGR_LOCK_TIMEOUT_MS", "1500")
        monkeypatch.setenv("CTXMGR_LOCK_GUARD", "user")
        monkeypatch.setenv("CTXMGR_JSON_LOGS", "true")
        settings = ContextSettings(_env_file=None)
        assert settings.lock_timeout_ms == 1500
        assert settings.lock_guard == "user"
        assert settings.json_logs is True

    def test_negative_timeout_rejected(self, monkeypatch):
        monkeypatch.setenv("CTXMGR_LOCK_TIMEOUT_MS", "-1")
        with pytest.raises(ValidationError):
            ContextSettings(_env_file=None)

    def test_unrelated_env_ignored(self, monkeypatch):
        monkeypatch.setenv("CTXMGR_NOT_A_FIELD", "x")
        settings = ContextSettings(_env_file=None)
        assert not hasattr(settings, "not_a_field")


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_cache_clear_reloads(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("CTXMGR_LOCK_TIMEOUT_MS", "42")
        assert get_settings().lock_timeout_ms == first.lock_timeout_ms
        get_settings.cache_clear()
        assert get_settings().lock_timeout_ms == 42
