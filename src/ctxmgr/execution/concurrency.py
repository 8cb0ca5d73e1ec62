"""Lock-guarded Contexts — run a critical section under a timed lock.

WHY
───
The most common use of a head/tail pair is "take a lock, do the work,
always give the lock back". ``using_wait_lock`` builds that Context once,
validates its inputs up front, and leaves the actual locking to a lock
service that can be swapped out (a platform service, a test double, or the
default ``ThreadingLockService``).

ARCHITECTURE
────────────
::

    using_wait_lock(timeout, guard, dependencies)
      ├── validate dependency keys   ─ UnexpectedDependencyError
      ├── GuardKind.resolve(guard)   ─ InvalidGuardError
      ├── validate timeout           ─ InvalidConfigError
      └── Context
            head:  lock = service.get_<guard>_lock()
                   lock.wait_lock(timeout)
                   state["lock"] = lock          (only after acquiring)
            tail:  lock = state.pop("lock")      (absent → no-op)
                   flush_service.flush()         (if configured)
                   lock.release_lock()           (always, in finally)
            error: propagate

BEST PRACTICES
──────────────
- Keep the guarded body short; every other caller waits up to ``timeout``.
- Inject ``flush_service`` when pending writes must land before unlock.

Example::

    ctx = using_wait_lock(500, "script")
    ctx.body = lambda state, param: append_row(param)
    ctx.execute(row)
"""

from __future__ import annotations

import math
import threading
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ctxmgr.core.callbacks import propagate
from ctxmgr.core.context import Context
from ctxmgr.core.errors import (
    InvalidConfigError,
    InvalidGuardError,
    LockTimeoutError,
    UnexpectedDependencyError,
)
from ctxmgr.core.logging import get_logger
from ctxmgr.core.settings import get_settings

logger = get_logger(__name__)

# State key holding the acquired lock handle between head and tail.
LOCK_STATE_KEY = "lock"


class GuardKind(str, Enum):
    """Kind of lock a guarded Context requests."""

    SCRIPT = "script"
    DOCUMENT = "document"
    USER = "user"

    @property
    def method_name(self) -> str:
        """Lock-service accessor for this kind, e.g. ``get_script_lock``."""
        return f"get_{self.value}_lock"

    @classmethod
    def resolve(cls, value: Any) -> GuardKind:
        """Accept a GuardKind, a kind name, or its accessor name.

        Matching is case-insensitive. ``"Script"``, ``"get_script_lock"``
        and ``"getScriptLock"`` all resolve to ``GuardKind.SCRIPT``.

        Raises:
            InvalidGuardError: ``value`` matches no kind.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            for kind in cls:
                if name in (kind.value, kind.method_name, f"get{kind.value}lock"):
                    return kind
        raise InvalidGuardError(value)


class LockDependencies(BaseModel):
    """Injectable collaborators for a lock-guarded Context."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True, frozen=True)

    lock_service: Any = None
    flush_service: Any = None

    @field_validator("flush_service")
    @classmethod
    def _check_flush(cls, value: Any) -> Any:
        if value is not None and not callable(getattr(value, "flush", None)):
            raise ValueError("flush_service must provide a flush() method")
        return value


class ThreadingLock:
    """Lock handle over a ``threading.Lock`` shared by one guard kind."""

    def __init__(self, lock: threading.Lock, guard: GuardKind):
        self._lock = lock
        self._guard = guard
        self._held = False

    def try_lock(self, timeout: float) -> bool:
        """Block up to ``timeout`` ms; True if the lock is now held."""
        if self._held:
            return True
        self._held = self._lock.acquire(timeout=max(timeout, 0) / 1000)
        return self._held

    def wait_lock(self, timeout: float) -> None:
        """Block up to ``timeout`` ms or raise LockTimeoutError."""
        if not self.try_lock(timeout):
            raise LockTimeoutError(self._guard.value, timeout)

    def release_lock(self) -> None:
        """Release the lock if this handle holds it."""
        if self._held:
            self._held = False
            self._lock.release()

    def has_lock(self) -> bool:
        return self._held

    def __repr__(self) -> str:
        return f"ThreadingLock(guard={self._guard.value!r}, held={self._held})"


class ThreadingLockService:
    """In-process lock service, one ``threading.Lock`` per guard kind.

    Handles obtained from the same service for the same kind exclude each
    other; different kinds never do.
    """

    def __init__(self) -> None:
        self._locks = {kind: threading.Lock() for kind in GuardKind}

    def get_lock(self, guard: GuardKind | str) -> ThreadingLock:
        kind = GuardKind.resolve(guard)
        return ThreadingLock(self._locks[kind], kind)

    def get_script_lock(self) -> ThreadingLock:
        return self.get_lock(GuardKind.SCRIPT)

    def get_document_lock(self) -> ThreadingLock:
        return self.get_lock(GuardKind.DOCUMENT)

    def get_user_lock(self) -> ThreadingLock:
        return self.get_lock(GuardKind.USER)


# === PROCESS-WIDE DEFAULT SERVICE ===

_default_service: ThreadingLockService | None = None
_default_service_guard = threading.Lock()


def default_lock_service() -> ThreadingLockService:
    """Process-wide lock service used when none is injected.

    Created lazily on first access; concurrent first calls get the same
    instance.
    """
    global _default_service
    if _default_service is None:
        with _default_service_guard:
            if _default_service is None:
                _default_service = ThreadingLockService()
    return _default_service


def reset_default_lock_service() -> None:
    """Drop the process-wide service (for testing)."""
    global _default_service
    with _default_service_guard:
        _default_service = None


def _resolve_dependencies(dependencies: LockDependencies | Mapping[str, Any] | None) -> LockDependencies:
    if dependencies is None:
        return LockDependencies()
    if isinstance(dependencies, LockDependencies):
        return dependencies

    unknown = set(dependencies) - set(LockDependencies.model_fields)
    if unknown:
        raise UnexpectedDependencyError(unknown)

    try:
        return LockDependencies(**dependencies)
    except ValidationError as exc:
        raise InvalidConfigError("dependencies", dict(dependencies), str(exc)) from exc


def _validate_timeout(timeout: Any) -> float:
    if (
        isinstance(timeout, bool)
        or not isinstance(timeout, (int, float))
        or not math.isfinite(timeout)
        or timeout < 0
    ):
        raise InvalidConfigError("timeout", timeout, f"timeout must be a non-negative number of milliseconds, got {timeout!r}")
    return timeout


def using_wait_lock(
    timeout: float | None = None,
    guard: GuardKind | str | None = None,
    dependencies: LockDependencies | Mapping[str, Any] | None = None,
    *,
    context_class: type[Context] | None = None,
) -> Context:
    """Build a Context whose head/tail acquire and release a lock.

    Args:
        timeout: Milliseconds to wait for the lock (settings default: 500).
        guard: Guard kind (settings default: ``"script"``).
        dependencies: ``lock_service`` and/or ``flush_service``. Any other
            key is rejected.
        context_class: Context subclass to instantiate.

    Raises:
        UnexpectedDependencyError: ``dependencies`` has unknown keys.
        InvalidGuardError: ``guard`` is not script, document or user.
        InvalidConfigError: Bad timeout, or a collaborator missing a method.
    """
    settings = get_settings()
    deps = _resolve_dependencies(dependencies)
    kind = GuardKind.resolve(settings.lock_guard if guard is None else guard)
    timeout = _validate_timeout(settings.lock_timeout_ms if timeout is None else timeout)

    lock_service = deps.lock_service
    if lock_service is None:
        lock_service = default_lock_service()
    acquire = getattr(lock_service, kind.method_name, None)
    if not callable(acquire):
        raise InvalidConfigError(
            "lock_service", lock_service, f"lock_service does not provide {kind.method_name}()"
        )
    flush_service = deps.flush_service
    log = logger.bind(guard=kind.value, timeout_ms=timeout)

    def head(state: Any, param: Any) -> None:
        lock = acquire()
        lock.wait_lock(timeout)
        state[LOCK_STATE_KEY] = lock
        log.debug("lock_acquired")

    def tail(state: Any, param: Any) -> None:
        lock = state.pop(LOCK_STATE_KEY, None)
        if lock is None:
            return
        try:
            if flush_service is not None:
                flush_service.flush()
        finally:
            lock.release_lock()
            log.debug("lock_released")

    cls = context_class or Context
    return cls(callbacks={"head": head, "tail": tail, "error": propagate})


__all__ = [
    "GuardKind",
    "LockDependencies",
    "LOCK_STATE_KEY",
    "ThreadingLock",
    "ThreadingLockService",
    "default_lock_service",
    "reset_default_lock_service",
    "using_wait_lock",
]
