"""
Structured error types for ctxmgr.

Provides a small hierarchy of typed errors with metadata for retry
decisions, categorization and logging.

Errors raised by user callbacks (head, body, tail) are never wrapped: they
travel through the error dispatcher untouched, so a swallowed error is the
very object that was raised. The types below cover what ctxmgr itself
raises: configuration mistakes caught before a run starts, and failures
reported by the lock collaborator.

Manifesto:
    - **Fail fast on configuration:** Bad guard names, unknown dependency
      keys and missing bodies are ConfigErrors, raised synchronously
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry phase/guard/timeout metadata
    - **Never wrap user errors:** Callback exceptions keep their identity

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                         CtxError                                 │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigError                     ResourceError                   │
        │  (CONFIG, never retryable)       (RESOURCE)                      │
        │       │                               │                          │
        │  MissingBodyError                LockTimeoutError                │
        │  InvalidConfigError              (retryable=True)                │
        │  InvalidGuardError                                               │
        │  UnexpectedDependencyError                                       │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidGuardError("bogus")
    >>> error.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> error.retryable
    False

    >>> LockTimeoutError("script", 500).retryable
    True

Guardrails:
    ❌ DON'T: Wrap exceptions raised by head/body/tail
    ✅ DO: Let them flow through the error dispatcher as-is

    ❌ DON'T: Route ConfigError through the error callback
    ✅ DO: Raise it before the lifecycle starts

Tags:
    error-handling, exception-hierarchy, retry-logic, error-context, ctxmgr

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        CONFIG: Invalid factory arguments, missing body, bad slot names
        PHASE: Plain exceptions raised inside a head/body/tail phase
        RESOURCE: Lock or flush collaborator failures (timeouts, etc.)
        INTERNAL: Bugs, unexpected state
    """

    CONFIG = "CONFIG"             # Invalid configuration, never retryable
    PHASE = "PHASE"               # head/body/tail failure
    RESOURCE = "RESOURCE"         # Lock/flush collaborator failure
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields cover what ctxmgr knows about a failure (the lifecycle
    phase, the lock guard and its timeout). Anything else goes into
    ``metadata``. ``to_dict()`` serializes the non-None fields for logging.

    Examples:
        >>> ctx = ErrorContext(phase="head", guard="script", timeout_ms=500)
        >>> ctx.to_dict()
        {'phase': 'head', 'guard': 'script', 'timeout_ms': 500}

        >>> ctx = ErrorContext()
        >>> ctx.metadata["keys"] = ["lock_servce"]
        >>> ctx.to_dict()
        {'keys': ['lock_servce']}

    Attributes:
        phase: Lifecycle phase where the error occurred (head, body, tail)
        guard: Lock guard kind (script, document, user)
        timeout_ms: Lock acquisition timeout in milliseconds
        metadata: Additional key-value pairs
    """

    phase: str | None = None
    guard: str | None = None
    timeout_ms: float | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["phase", "guard", "timeout_ms"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CtxError(Exception):
    """
    Base exception for all ctxmgr errors.

    All CtxError instances carry:
    - **category:** ErrorCategory enum for classification
    - **retryable:** Boolean indicating if the operation can be retried
    - **context:** ErrorContext with structured metadata
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` and ``default_retryable`` class
    attributes to provide defaults for their domain.

    Examples:
        >>> error = CtxError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = CtxError("Lock failed").with_context(guard="user")
        >>> error.context.guard
        'user'

        >>> CtxError("x", category=ErrorCategory.CONFIG).to_dict()["category"]
        'CONFIG'
    """

    # Default category for this error type
    default_category: ErrorCategory = ErrorCategory.INTERNAL

    # Default retryable setting
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CtxError:
        """
        Add context to this error (fluent API).

        Usage:
            raise CtxError("Failed").with_context(phase="tail", guard="script")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(CtxError):
    """
    Configuration error.

    Never retryable and never routed through the error callback: these are
    raised before a Context's lifecycle starts.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingBodyError(ConfigError):
    """execute() was called before a body callback was assigned."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "Body method for context has not been defined")


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


class InvalidGuardError(ConfigError):
    """Guard name does not match any known lock kind."""

    def __init__(self, guard: Any):
        self.guard = guard
        super().__init__(f"No such guard {guard!r}")
        self.context.guard = str(guard)


class UnexpectedDependencyError(ConfigError):
    """Dependencies mapping contains keys the lock factory does not know."""

    def __init__(self, keys: Iterable[str]):
        self.keys = sorted(str(k) for k in keys)
        super().__init__("Invalid dependency passed. One of these: " + ", ".join(self.keys))
        self.context.metadata["keys"] = list(self.keys)


# =============================================================================
# RESOURCE ERRORS
# =============================================================================


class ResourceError(CtxError):
    """Failure reported by an external lock or flush collaborator."""

    default_category = ErrorCategory.RESOURCE
    default_retryable = False


class LockTimeoutError(ResourceError):
    """Lock could not be acquired within the timeout."""

    default_retryable = True

    def __init__(self, guard: str, timeout_ms: float, message: str | None = None):
        self.guard = guard
        self.timeout_ms = timeout_ms
        super().__init__(
            message or f"Could not acquire {guard} lock within {timeout_ms}ms",
            context=ErrorContext(guard=guard, timeout_ms=timeout_ms),
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, CtxError):
        return error.retryable
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CtxError",
    "ConfigError",
    "MissingBodyError",
    "InvalidConfigError",
    "InvalidGuardError",
    "UnexpectedDependencyError",
    "ResourceError",
    "LockTimeoutError",
    "is_retryable",
]
