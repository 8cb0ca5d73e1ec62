"""
Context engine: head → body → tail with guaranteed teardown.

A ``Context`` owns one ``state`` value and one ``CallbackSet``. Running it
calls ``head``, then the work function, then ``tail``, always in that order
and with ``tail`` running exactly once no matter where a failure happened.
Every failure is offered to the ``error`` callback, which decides whether it
is swallowed (becomes the return value) or propagated (raised after
``tail``).

Manifesto:
    - **Teardown is unconditional:** tail runs after a failing head too
    - **Caller decides disposition:** one error hook, per failing phase
    - **Nothing is silently lost:** a swallowed tail failure still carries
      the body's result
    - **State persists:** the same state is reused across runs

Architecture:
    ::

        Ready
          │  materialize state (None → default_state())
          ▼
        HeadPhase ── raises ──► dispatch ─┬─ SWALLOW → outcome = Err(e), skip body
          │ ok                            └─ other   → pending = e
          ▼
        BodyPhase ── raises ──► dispatch ─┬─ SWALLOW → outcome = Err(e)
          │ ok → outcome = Ok(value)      └─ other   → pending = e
          ▼
        TailPhase (finally) ── raises ──► dispatch ─┬─ SWALLOW → outcome = Err(t, body_result=outcome)
          │                                         └─ other   → raise t (supersedes pending)
          ▼
        Completed: return outcome     Failed: raise pending

    Dispatch:
        error(state, exc) is SWALLOW  → suppressed
        anything else (incl. None)    → propagated

Examples:
    Basic run:

    >>> from ctxmgr import Context
    >>> ctx = Context()
    >>> ctx.head = lambda state, param: state.setdefault("log", []).append("head")
    >>> ctx.tail = lambda state, param: state["log"].append("tail")
    >>> ctx.body = lambda state, param: param * 2
    >>> ctx.execute(21)
    42
    >>> ctx.state
    {'log': ['head', 'tail']}

    Swallowing an error:

    >>> from ctxmgr import SWALLOW
    >>> ctx = Context(callbacks={"error": lambda state, exc: SWALLOW})
    >>> ctx.body = lambda state, param: 1 / 0
    >>> ctx.execute()
    ZeroDivisionError('division by zero')

Guardrails:
    ❌ DON'T: Share one Context between threads
    ✅ DO: Give each logical owner its own Context

    ❌ DON'T: Return None from the error callback expecting suppression
    ✅ DO: Return SWALLOW

Tags:
    context-manager, lifecycle, teardown, error-handling, ctxmgr

Doc-Types:
    - API Reference
    - Lifecycle Guide
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, TypeVar

from ctxmgr.core.callbacks import CALLBACK_SLOTS, SWALLOW, CallbackSet, normalize
from ctxmgr.core.errors import InvalidConfigError, MissingBodyError
from ctxmgr.core.logging import get_logger
from ctxmgr.core.result import Err, Ok, Result

logger = get_logger(__name__)

T = TypeVar("T")


class Phase(str, Enum):
    """Lifecycle phase a failure is reported for."""

    HEAD = "head"
    BODY = "body"
    TAIL = "tail"


def _slot(name: str) -> property:
    def getter(self: Context) -> Any:
        return getattr(self._callbacks, name)

    def setter(self: Context, fn: Any) -> None:
        self.set_callback(name, fn)

    return property(getter, setter, doc=f"The ``{name}`` callback.")


class Context:
    """Runs a work function between ``head`` and ``tail``.

    Args:
        state: Initial state. None means "use ``default_state()``".
        callbacks: Mapping or CallbackSet with any of
            head/body/tail/error/param.
        default_state: Zero-argument factory for the default state
            (``dict`` unless given). Subclasses may override
            ``default_state()`` instead.
    """

    def __init__(
        self,
        state: Any = None,
        callbacks: CallbackSet | Mapping[str, Any] | None = None,
        *,
        default_state: Callable[[], Any] | None = None,
    ) -> None:
        self._default_state_factory = default_state or dict
        self._callbacks = normalize(callbacks)
        self._state: Any = None
        self.state = state

    @classmethod
    def create(
        cls,
        state: Any = None,
        callbacks: CallbackSet | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Context:
        return cls(state, callbacks, **kwargs)

    @classmethod
    def using_wait_lock(
        cls,
        timeout: float | None = None,
        guard: Any = None,
        dependencies: Any = None,
    ) -> Context:
        """Build a lock-guarded Context. See ``ctxmgr.execution.concurrency``."""
        from ctxmgr.execution.concurrency import using_wait_lock

        return using_wait_lock(timeout, guard, dependencies, context_class=cls)

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    def default_state(self) -> Any:
        """Fresh container used whenever state is None."""
        return self._default_state_factory()

    @property
    def state(self) -> Any:
        return self._state

    @state.setter
    def state(self, value: Any) -> None:
        self._state = self.default_state() if value is None else value

    def set_state(self, value: Any) -> Context:
        self.state = value
        return self

    def _materialize_state(self) -> Any:
        if self._state is None:
            self._state = self.default_state()
        return self._state

    # ------------------------------------------------------------------ #
    # Callbacks
    # ------------------------------------------------------------------ #

    @property
    def callbacks(self) -> CallbackSet:
        return self._callbacks

    @callbacks.setter
    def callbacks(self, value: CallbackSet | Mapping[str, Any] | None) -> None:
        self._callbacks = normalize(value)

    head = _slot("head")
    body = _slot("body")
    tail = _slot("tail")
    error = _slot("error")

    def set_callback(self, slot: str, fn: Any) -> Context:
        """Assign one callback slot. None restores the slot's default."""
        if slot not in CALLBACK_SLOTS:
            raise InvalidConfigError(
                "slot", slot, f"Unknown callback slot {slot!r}; expected one of {', '.join(CALLBACK_SLOTS)}"
            )
        if fn is None:
            fn = getattr(CallbackSet(), slot)
        setattr(self._callbacks, slot, fn)
        return self

    @property
    def param(self) -> Any:
        return self._callbacks.param

    @param.setter
    def param(self, value: Any) -> None:
        self._callbacks.param = value

    def set_param(self, value: Any) -> Context:
        self.param = value
        return self

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    def _prepare(self, param: Any) -> Callable[[Any, Any], Any]:
        self._callbacks.param = param
        body = self._callbacks.body
        if body is None:
            raise MissingBodyError()
        return body

    def execute(self, param: Any = None) -> Any:
        """Run the assigned body with ``param``.

        Returns:
            The body's return value, or the swallowed error.

        Raises:
            MissingBodyError: No body has been assigned.
        """
        return self.run_with(self._prepare(param))

    def execute_result(self, param: Any = None) -> Result[Any]:
        """Like ``execute`` but returns the ``Ok``/``Err`` outcome."""
        return self.run(self._prepare(param))

    def run_with(self, work: Callable[[Any, Any], T]) -> T | Exception:
        """Run ``work`` as the body step and return a plain value.

        A swallowed error is returned as-is. If it came from the tail, the
        prior result is attached under ``BODY_RESULT_ATTR``.
        """
        return self.run(work).to_value()

    def run(self, work: Callable[[Any, Any], T]) -> Result[T]:
        """Run head → work → tail and return the structured outcome."""
        state = self._materialize_state()
        callbacks = self._callbacks
        param = callbacks.param
        outcome: Result[Any] = Ok(None)

        try:
            phase = Phase.HEAD
            try:
                callbacks.head(state, param)
                phase = Phase.BODY
                outcome = Ok(work(state, param))
            except Exception as exc:
                if not self.dispatch_error(exc, phase, state):
                    raise
                outcome = Err(exc)
        finally:
            try:
                callbacks.tail(state, param)
            except Exception as exc:
                if not self.dispatch_error(exc, Phase.TAIL, state):
                    raise
                outcome = Err(exc, body_result=outcome)

        return outcome

    def wrap(self, work: Callable[[Any, Any], T]) -> Callable[..., T | Exception]:
        """Decorator form of ``run_with``.

        Example:
            @ctx.wrap
            def update(state, param):
                ...

            update("row-1")
        """

        @functools.wraps(work)
        def runner(param: Any = None) -> T | Exception:
            self._callbacks.param = param
            return self.run_with(work)

        return runner

    def dispatch_error(self, error: Exception, phase: Phase | str, state: Any = None) -> bool:
        """Offer ``error`` to the error callback; True if it was swallowed.

        ``state`` is the value the failing phase ran with; None means the
        Context's current state.
        """
        if state is None:
            state = self._materialize_state()
        swallowed = self._callbacks.error(state, error) is SWALLOW
        logger.debug(
            "context_phase_failed",
            phase=Phase(phase).value,
            error_type=type(error).__name__,
            swallowed=swallowed,
        )
        return swallowed

    def __repr__(self) -> str:
        body = getattr(self._callbacks.body, "__name__", self._callbacks.body)
        return f"{self.__class__.__name__}(state={self._state!r}, body={body!r})"


__all__ = ["Context", "Phase"]
