"""Execution helpers built on the core Context.

- concurrency.py — lock-guarded Contexts (``using_wait_lock``)
"""

from ctxmgr.execution.concurrency import (
    LOCK_STATE_KEY,
    GuardKind,
    LockDependencies,
    ThreadingLock,
    ThreadingLockService,
    default_lock_service,
    reset_default_lock_service,
    using_wait_lock,
)

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
