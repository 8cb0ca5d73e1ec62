"""Callback sets and their normalization.

A Context holds exactly one ``CallbackSet``. ``normalize`` builds one from
whatever the caller supplied (nothing, a mapping, or another set) and fills
every slot except ``body`` with a default, so the engine never has to check
for a missing head, tail or error handler.

Non-callable values are not rejected here; they fail when the engine
invokes them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ctxmgr.core.logging import get_logger
from ctxmgr.core.protocols import ErrorCallback, PhaseCallback

logger = get_logger(__name__)


class Swallow(Enum):
    """Return value an error callback uses to suppress the error."""

    SWALLOW = "swallow"

    def __repr__(self) -> str:
        return "SWALLOW"


SWALLOW = Swallow.SWALLOW

CALLBACK_SLOTS = ("head", "body", "tail", "error")
SETTING_KEYS = CALLBACK_SLOTS + ("param",)


def noop(state: Any, param: Any) -> None:
    """Default head/tail."""
    return None


def propagate(state: Any, error: Exception) -> None:
    """Default error callback: never returns SWALLOW, so errors propagate."""
    return None


@dataclass
class CallbackSet:
    """The four behavior slots and the carried ``param``.

    ``body`` is the only slot without a default; the engine refuses to
    ``execute`` while it is None.
    """

    head: PhaseCallback = noop
    body: PhaseCallback | None = None
    tail: PhaseCallback = noop
    error: ErrorCallback = propagate
    param: Any = None


def normalize(partial: CallbackSet | Mapping[str, Any] | None = None) -> CallbackSet:
    """Build a CallbackSet with defaults for every slot but ``body``.

    Args:
        partial: None, an existing CallbackSet (copied, never shared), or a
            mapping with any subset of head/body/tail/error/param.

    Returns:
        A fresh CallbackSet. Slots given as None are defaulted like absent
        ones. Unknown mapping keys are ignored with a warning.
    """
    if partial is None:
        return CallbackSet()

    if isinstance(partial, CallbackSet):
        partial = {key: getattr(partial, key) for key in SETTING_KEYS}

    extra = [key for key in partial if key not in SETTING_KEYS]
    if extra:
        logger.warning("callback_set_ignored_keys", keys=sorted(map(str, extra)))

    defaults = CallbackSet()
    values = {}
    for key in SETTING_KEYS:
        value = partial.get(key)
        values[key] = getattr(defaults, key) if value is None else value
    return CallbackSet(**values)


__all__ = [
    "SWALLOW",
    "Swallow",
    "CallbackSet",
    "CALLBACK_SLOTS",
    "normalize",
    "noop",
    "propagate",
]
