"""
Structural protocols for ctxmgr.

Callbacks and the lock collaborators are consumed by shape, never by
inheritance: any callable with the right arity is a callback, and any
object exposing the right methods is a lock service.

Architecture:
    ::

        protocols.py
        ├── PhaseCallback   — head/body/tail: (state, param) -> Any
        ├── ErrorCallback   — error: (state, exc) -> Any (SWALLOW to suppress)
        ├── Lock            — wait_lock(timeout), release_lock()
        ├── LockService     — get_script_lock(), get_document_lock(), get_user_lock()
        └── FlushService    — flush()

    Consumers:
        core/callbacks.py, core/context.py, execution/concurrency.py

Guardrails:
    ❌ DON'T: Subclass these protocols in collaborators
    ✅ DO: Expose the methods; @runtime_checkable isinstance() checks follow

Tags:
    protocol, callback, lock, ctxmgr, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


class PhaseCallback(Protocol):
    """head, body or tail callback."""

    def __call__(self, state: Any, param: Any) -> Any: ...


class ErrorCallback(Protocol):
    """Error callback. Return ``SWALLOW`` to suppress the error."""

    def __call__(self, state: Any, error: Exception) -> Any: ...


@runtime_checkable
class Lock(Protocol):
    """
    A lock handle obtained from a LockService.

    ``wait_lock`` blocks up to ``timeout`` milliseconds and raises if the
    lock could not be acquired. ``release_lock`` gives it back.
    """

    def wait_lock(self, timeout: float) -> Any: ...

    def release_lock(self) -> Any: ...


@runtime_checkable
class LockService(Protocol):
    """Hands out lock handles, one accessor per guard kind."""

    def get_script_lock(self) -> Lock: ...

    def get_document_lock(self) -> Lock: ...

    def get_user_lock(self) -> Lock: ...


@runtime_checkable
class FlushService(Protocol):
    """Commits pending external writes before the lock is released."""

    def flush(self) -> Any: ...


__all__ = [
    "PhaseCallback",
    "ErrorCallback",
    "Lock",
    "LockService",
    "FlushService",
]
