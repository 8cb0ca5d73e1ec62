"""ctxmgr core -- the lifecycle engine and its supporting primitives.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Structured error hierarchy (CtxError, ConfigError)
        result.py          Ok / Err outcome envelope
        protocols.py       Callback and lock-collaborator protocols

    Layer 2 -- Engine
        callbacks.py       CallbackSet + normalize() + SWALLOW
        context.py         Context: head → body → tail state machine

    Layer 3 -- Cross-Cutting Concerns
        logging.py         Structured logging (structlog)
        settings.py        ContextSettings (pydantic-settings)

Tags:
    ctxmgr, core, lifecycle, engine

Doc-Types:
    package-overview, module-index
"""

from ctxmgr.core.callbacks import SWALLOW, CallbackSet, normalize
from ctxmgr.core.context import Context, Phase
from ctxmgr.core.errors import (
    ConfigError,
    CtxError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    InvalidGuardError,
    LockTimeoutError,
    MissingBodyError,
    ResourceError,
    UnexpectedDependencyError,
    is_retryable,
)
from ctxmgr.core.result import BODY_RESULT_ATTR, Err, Ok, Result, body_result_of

__all__ = [
    # Engine
    "Context",
    "Phase",
    "CallbackSet",
    "normalize",
    "SWALLOW",
    # Outcomes
    "Result",
    "Ok",
    "Err",
    "BODY_RESULT_ATTR",
    "body_result_of",
    # Errors
    "CtxError",
    "ErrorCategory",
    "ErrorContext",
    "ConfigError",
    "MissingBodyError",
    "InvalidConfigError",
    "InvalidGuardError",
    "UnexpectedDependencyError",
    "ResourceError",
    "LockTimeoutError",
    "is_retryable",
]
