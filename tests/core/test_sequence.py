"""Tests for callback ordering when a phase fails and the error is swallowed."""

from ctxmgr import create
from ctxmgr.core.callbacks import SWALLOW


def make_context(actual: list, fail_in: str):
    def step(marker, phase):
        def callback(state, param):
            actual.append(marker)
            if phase == fail_in:
                raise RuntimeError(f"{phase} failed")

        return callback

    def on_error(state, exc):
        actual.append(-1)
        return SWALLOW

    return create(None, {
        "head": step(1, "head"),
        "body": step(2, "body"),
        "tail": step(3, "tail"),
        "error": on_error,
    })


class TestSequence:
    """Observed call order per failing phase."""

    def test_error_in_head_is_1_minus1_3(self):
        actual = []
        make_context(actual, "head").execute()
        assert actual == [1, -1, 3]

    def test_error_in_body_is_1_2_minus1_3(self):
        actual = []
        make_context(actual, "body").execute()
        assert actual == [1, 2, -1, 3]

    def test_error_in_tail_is_1_2_3_minus1(self):
        actual = []
        make_context(actual, "tail").execute()
        assert actual == [1, 2, 3, -1]

    def test_no_error_is_1_2_3(self):
        actual = []
        make_context(actual, "none").execute()
        assert actual == [1, 2, 3]

    def test_run_with_uses_given_work_function(self):
        actual = []
        ctx = make_context(actual, "head")
        ctx.run_with(lambda state, param: actual.append(2))
        assert actual == [1, -1, 3]
