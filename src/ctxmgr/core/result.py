"""
Outcome envelope for a Context run.

A run ends in one of three ways: the body returned a value, an error was
swallowed by the error callback, or an error propagated. The first two are
values and are represented here as ``Ok[T]`` and ``Err[T]``; the third is an
ordinary raised exception.

``Err`` carries one extra structured field, ``body_result``. It is only set
when the swallowed error came from the tail phase, and then holds the
outcome the run had reached before teardown failed, so work done by the
body is never silently discarded.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T]                                │
        ├─────────────────┬───────────────────────────────────────────┤
        │     Ok[T]       │     Err[T]                                 │
        │   (Success)     │   (Swallowed error)                        │
        ├─────────────────┼───────────────────────────────────────────┤
        │ • value: T      │ • error: Exception                         │
        │ • map()         │ • body_result: Result | None  (tail only)  │
        │ • unwrap()      │ • unwrap_or()                              │
        │ • to_value()    │ • to_value() → error + attached attribute  │
        └─────────────────┴───────────────────────────────────────────┘

Examples:
    >>> from ctxmgr.core.result import Ok, Err
    >>> Ok(10).map(lambda x: x * 2).unwrap()
    20
    >>> Err(ValueError("oops")).unwrap_or(0)
    0

    Tail failure after a successful body:

    >>> err = Err(RuntimeError("tail"), body_result=Ok("hey"))
    >>> exc = err.to_value()
    >>> body_result_of(exc)
    'hey'

Guardrails:
    ❌ DON'T: Read ``BODY_RESULT_ATTR`` with ``getattr`` and no default
    ✅ DO: Use ``body_result_of(error)``, which tolerates plain errors

Tags:
    result-pattern, error-handling, outcome, ctxmgr

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from ctxmgr.core.errors import CtxError, ErrorCategory


T = TypeVar("T")
U = TypeVar("U")

# Attribute set on a swallowed tail error holding the run's prior result.
BODY_RESULT_ATTR = "ctxmgr_body_result"

_MISSING = object()


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful outcome containing the body's return value.

    Examples:
        >>> ok = Ok(42)
        >>> ok.is_ok()
        True
        >>> ok.unwrap()
        42
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get value or default (always returns value for Ok)."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with error for side effects (no-op for Ok)."""
        return self

    def to_value(self) -> T:
        """Plain-value form returned by ``Context.run_with``."""
        return self.value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Swallowed error.

    ``body_result`` is None unless the error was raised by the tail phase.
    In that case it is the outcome reached before the tail ran: ``Ok`` with
    the body's value, or ``Err`` with an earlier swallowed error.

    Examples:
        >>> err = Err(ValueError("something went wrong"))
        >>> err.is_err()
        True
        >>> err.unwrap_or("default")
        'default'
        >>> Err(ValueError("x")).map(lambda x: x * 2).is_err()
        True
    """

    error: Exception
    body_result: Ok[Any] | Err[Any] | None = None

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def is_tail_failure(self) -> bool:
        """True when the swallowed error came from the tail phase."""
        return self.body_result is not None

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        """Get default since this is Err."""
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err."""
        return self

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with error for side effects, return self."""
        f(self.error)
        return self

    def to_value(self) -> Exception:
        """
        Plain-value form returned by ``Context.run_with``.

        The error itself. For a tail failure the prior outcome, converted
        to its own plain value, is attached under ``BODY_RESULT_ATTR``.
        """
        if self.body_result is not None:
            setattr(self.error, BODY_RESULT_ATTR, self.body_result.to_value())
        return self.error

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if isinstance(self.error, CtxError):
            error = self.error.to_dict()
        else:
            error = {
                "error_type": type(self.error).__name__,
                "message": str(self.error),
                "category": ErrorCategory.PHASE.value,
            }
        result: dict[str, Any] = {"ok": False, "error": error}
        if self.body_result is not None:
            result["body_result"] = self.body_result.to_dict()
        return result

    def __repr__(self) -> str:
        if self.body_result is not None:
            return f"Err({self.error!r}, body_result={self.body_result!r})"
        return f"Err({self.error!r})"


# Type alias for Result
Result = Ok[T] | Err[T]


def body_result_of(error: BaseException, default: Any = None) -> Any:
    """
    Return the prior result attached to a swallowed tail error.

    Examples:
        >>> body_result_of(ValueError("no attachment"), default="n/a")
        'n/a'
    """
    value = getattr(error, BODY_RESULT_ATTR, _MISSING)
    if value is _MISSING:
        return default
    return value


__all__ = [
    "Result",
    "Ok",
    "Err",
    "BODY_RESULT_ATTR",
    "body_result_of",
]
