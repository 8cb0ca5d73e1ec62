"""
ctxmgr - structured resource lifecycle.

Run work between a setup (``head``) and a teardown (``tail``) that is
guaranteed to happen, with one hook (``error``) deciding per failure
whether to swallow or propagate it.

Usage::

    import ctxmgr

    ctx = ctxmgr.create([])
    ctx.head = lambda state, param: state.append("open")
    ctx.tail = lambda state, param: state.append("close")
    ctx.body = lambda state, param: param.upper()
    ctx.execute("hi")      # "HI"; state == ["open", "close"]

    locked = ctxmgr.using_wait_lock(500, "script")
"""

from typing import Any

from ctxmgr.core import *  # noqa: F401,F403
from ctxmgr.core import __all__ as _core_all
from ctxmgr.core.context import Context
from ctxmgr.execution.concurrency import GuardKind, LockDependencies, using_wait_lock

__version__ = "0.1.0"


def create(state: Any = None, callbacks: Any = None) -> Context:
    """Create a Context with optional initial state and callbacks."""
    return Context.create(state, callbacks)


__all__ = [
    *_core_all,
    "create",
    "using_wait_lock",
    "GuardKind",
    "LockDependencies",
    "__version__",
]
