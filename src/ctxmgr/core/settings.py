"""Environment-driven settings for ctxmgr.

``ContextSettings`` supplies the defaults the lock factory falls back to
when the caller does not pass them explicitly, plus the logging knobs used
by ``configure_from_settings``.

Fields
──────
lock_timeout_ms : Default lock acquisition timeout (milliseconds)
lock_guard      : Default guard kind (script, document, user)
log_level       : structlog log level
json_logs       : True for JSON, False for console, unset for auto

All values can be overridden with ``CTXMGR_``-prefixed environment
variables or a ``.env`` file.

Examples:
    >>> from ctxmgr.core.settings import ContextSettings
    >>> ContextSettings().lock_timeout_ms
    500

Tags:
    settings, configuration, pydantic, environment, ctxmgr

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ContextSettings(BaseSettings):
    """Settings shared by every Context built from this process."""

    model_config = SettingsConfigDict(
        env_prefix="CTXMGR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Locking ──────────────────────────────────────────────────
    lock_timeout_ms: int = Field(
        default=500,
        ge=0,
        description="Default lock acquisition timeout in milliseconds",
    )
    lock_guard: str = Field(
        default="script",
        description="Default guard kind for using_wait_lock()",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None


@lru_cache(maxsize=1)
def get_settings() -> ContextSettings:
    """Return cached settings (call ``get_settings.cache_clear()`` to reload)."""
    return ContextSettings()


__all__ = ["ContextSettings", "get_settings"]
