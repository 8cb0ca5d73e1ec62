"""
Shared pytest fixtures and configuration for ctxmgr tests.

This module provides:
- Settings/log-context cleanup for test isolation
- Recording lock-service doubles for the lock-guarded factory

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.
"""

import os
from unittest.mock import MagicMock

import pytest
import structlog

from ctxmgr.core.settings import get_settings
from ctxmgr.execution.concurrency import reset_default_lock_service


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Reset cached settings and ignore any CTXMGR_* env from the host."""
    for key in [k for k in os.environ if k.startswith("CTXMGR_")]:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    reset_default_lock_service()
    yield
    get_settings.cache_clear()
    reset_default_lock_service()


@pytest.fixture(autouse=True)
def clean_log_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


# =============================================================================
# Lock Doubles
# =============================================================================


class RecordingLock:
    """Lock handle that records every call into a shared journal."""

    def __init__(self, journal: list, fail_with: Exception | None = None):
        self.journal = journal
        self.fail_with = fail_with

    def wait_lock(self, timeout):
        self.journal.append(("wait_lock", timeout))
        if self.fail_with is not None:
            raise self.fail_with

    def release_lock(self):
        self.journal.append(("release_lock",))


class RecordingLockService:
    """Lock service double; ``fail_with`` makes every wait_lock raise."""

    def __init__(self, fail_with: Exception | None = None):
        self.journal: list = []
        self.fail_with = fail_with

    def _lock(self, kind: str) -> RecordingLock:
        self.journal.append((f"get_{kind}_lock",))
        return RecordingLock(self.journal, self.fail_with)

    def get_script_lock(self):
        return self._lock("script")

    def get_document_lock(self):
        return self._lock("document")

    def get_user_lock(self):
        return self._lock("user")


@pytest.fixture()
def lock_service() -> RecordingLockService:
    return RecordingLockService()


@pytest.fixture()
def failing_lock_service() -> RecordingLockService:
    return RecordingLockService(fail_with=TimeoutError("Timeout!"))


@pytest.fixture()
def flush_service() -> MagicMock:
    service = MagicMock(spec=["flush"])
    service.flush.return_value = None
    return service
