"""Tests for ctxmgr.core.callbacks — CallbackSet normalization."""

from structlog.testing import capture_logs

from ctxmgr.core.callbacks import SWALLOW, CallbackSet, noop, normalize, propagate


def body(state, param):
    return param


class TestNormalize:
    """normalize() fills defaults for every slot but body."""

    def test_none_gives_all_defaults(self):
        callbacks = normalize(None)
        assert callbacks.head is noop
        assert callbacks.tail is noop
        assert callbacks.error is propagate
        assert callbacks.body is None
        assert callbacks.param is None

    def test_partial_mapping(self):
        callbacks = normalize({"body": body, "param": 5})
        assert callbacks.body is body
        assert callbacks.param == 5
        assert callbacks.head is noop

    def test_explicit_none_is_defaulted(self):
        callbacks = normalize({"head": None, "error": None})
        assert callbacks.head is noop
        assert callbacks.error is propagate

    def test_non_callable_passes_through(self):
        """Fail-late: bad values only fail when invoked."""
        callbacks = normalize({"tail": "not callable"})
        assert callbacks.tail == "not callable"

    def test_callback_set_is_copied(self):
        original = CallbackSet(body=body)
        copied = normalize(original)
        assert copied == original
        assert copied is not original

    def test_unknown_keys_are_ignored_with_warning(self):
        with capture_logs() as logs:
            callbacks = normalize({"body": body, "enter": noop, "exit": noop})
        assert callbacks.body is body
        assert not hasattr(callbacks, "enter")
        assert logs == [
            {"event": "callback_set_ignored_keys", "keys": ["enter", "exit"], "log_level": "warning"}
        ]


class TestDefaults:
    def test_default_error_does_not_swallow(self):
        assert propagate({}, RuntimeError("x")) is not SWALLOW

    def test_noop_returns_none(self):
        assert noop({}, "param") is None

    def test_swallow_repr(self):
        assert repr(SWALLOW) == "SWALLOW"
