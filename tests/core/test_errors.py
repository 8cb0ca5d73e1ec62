"""Tests for ctxmgr.core.errors module."""

import pytest

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


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.phase is None
        assert ctx.metadata == {}
        assert ctx.to_dict() == {}

    def test_to_dict_excludes_none(self):
        ctx = ErrorContext(phase="tail", timeout_ms=500)
        ctx.metadata["attempt"] = 2
        assert ctx.to_dict() == {"phase": "tail", "timeout_ms": 500, "attempt": 2}


class TestCtxError:
    """Test base error."""

    def test_defaults(self):
        error = CtxError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.category == ErrorCategory.INTERNAL
        assert error.retryable is False
        assert error.cause is None

    def test_cause_is_chained(self):
        cause = OSError("disk")
        error = CtxError("wrapped", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "disk"

    def test_with_context(self):
        error = CtxError("x").with_context(phase="head", owner="worker-1")
        assert error.context.phase == "head"
        assert error.context.metadata == {"owner": "worker-1"}

    def test_to_dict(self):
        error = CtxError("x", category=ErrorCategory.PHASE).with_context(phase="body")
        assert error.to_dict() == {
            "error_type": "CtxError",
            "message": "x",
            "category": "PHASE",
            "retryable": False,
            "context": {"phase": "body"},
        }

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"


class TestConfigErrors:
    """Configuration errors are never retryable."""

    @pytest.mark.parametrize("error", [
        MissingBodyError(),
        InvalidConfigError("timeout", -1),
        InvalidGuardError("bogus"),
        UnexpectedDependencyError(["x"]),
    ])
    def test_config_category(self, error):
        assert isinstance(error, ConfigError)
        assert error.category == ErrorCategory.CONFIG
        assert is_retryable(error) is False

    def test_missing_body_message(self):
        assert str(MissingBodyError()) == "Body method for context has not been defined"

    def test_invalid_config_message(self):
        error = InvalidConfigError("timeout", -1)
        assert str(error) == "Invalid configuration for timeout: -1"
        assert error.key == "timeout"
        assert error.value == -1

    def test_invalid_guard(self):
        error = InvalidGuardError("bogus")
        assert "No such guard" in str(error)
        assert error.context.guard == "bogus"

    def test_unexpected_dependency_keys_sorted(self):
        error = UnexpectedDependencyError({"b_key", "a_key"})
        assert error.keys == ["a_key", "b_key"]
        assert str(error) == "Invalid dependency passed. One of these: a_key, b_key"
        assert error.context.metadata["keys"] == ["a_key", "b_key"]


class TestResourceErrors:
    def test_lock_timeout_is_retryable(self):
        error = LockTimeoutError("script", 500)
        assert isinstance(error, ResourceError)
        assert error.category == ErrorCategory.RESOURCE
        assert is_retryable(error) is True
        assert error.context.to_dict() == {"guard": "script", "timeout_ms": 500}
        assert "500ms" in str(error)

    def test_plain_exception_not_retryable(self):
        assert is_retryable(TimeoutError("x")) is False
