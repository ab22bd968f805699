"""
Tests for the bounded retry around in-page calls.
"""

import pytest

from conftest import FakeContext, timeout_error, transient_error
from errors import ExecutionFailure
from execution_context import ErrorKind, RemoteExecutionError
from execution_guard import LIVENESS_BACKOFF, RELOAD_SETTLE, TRANSIENT_BACKOFF, ExecutionGuard


class FlakyCall:
    """Raises the queued errors, then returns the value."""

    def __init__(self, errors, value="ok"):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    def __call__(self, context):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


class TestGuardedRun:

    def test_returns_value_without_waiting(self, sleep):
        guard = ExecutionGuard(sleep=sleep)
        assert guard.guarded_run(FakeContext(), lambda ctx: 42) == 42
        assert sleep.calls == []

    def test_transient_failure_reloads_and_retries(self, sleep):
        context = FakeContext()
        call = FlakyCall([transient_error(), transient_error()], value="html")

        assert ExecutionGuard(sleep=sleep).guarded_run(context, call) == "html"
        assert call.calls == 3
        assert context.call_names().count("reload") == 2
        assert sleep.calls == [TRANSIENT_BACKOFF, RELOAD_SETTLE, TRANSIENT_BACKOFF, RELOAD_SETTLE]

    def test_exhausts_exactly_max_attempts(self, sleep):
        call = FlakyCall([transient_error() for _ in range(10)])

        with pytest.raises(ExecutionFailure) as excinfo:
            ExecutionGuard(sleep=sleep).guarded_run(FakeContext(), call, max_attempts=3)

        assert call.calls == 3
        assert excinfo.value.kind is ErrorKind.CONTEXT_DESTROYED
        assert "Execution context was destroyed" in excinfo.value.message
        assert sleep.calls == [TRANSIENT_BACKOFF, RELOAD_SETTLE, TRANSIENT_BACKOFF, RELOAD_SETTLE]

    def test_non_transient_failure_is_not_retried(self, sleep):
        call = FlakyCall([timeout_error()])

        with pytest.raises(ExecutionFailure) as excinfo:
            ExecutionGuard(sleep=sleep).guarded_run(FakeContext(), call)

        assert call.calls == 1
        assert excinfo.value.kind is ErrorKind.TIMEOUT
        assert not excinfo.value.is_transient
        assert sleep.calls == []

    def test_closed_context_backs_off_then_fails(self, sleep):
        call = FlakyCall([])

        with pytest.raises(ExecutionFailure) as excinfo:
            ExecutionGuard(sleep=sleep).guarded_run(FakeContext(alive=False), call, max_attempts=3)

        assert call.calls == 0
        assert "closed or detached" in excinfo.value.message
        assert sleep.calls == [LIVENESS_BACKOFF, LIVENESS_BACKOFF]

    def test_missing_context_fails(self, sleep):
        with pytest.raises(ExecutionFailure):
            ExecutionGuard(sleep=sleep).guarded_run(None, lambda ctx: "never", max_attempts=2)
        assert sleep.calls == [LIVENESS_BACKOFF]

    def test_failing_probe_counts_as_liveness_problem(self, sleep):
        context = FakeContext(probe_error=transient_error("Frame was detached"))

        with pytest.raises(ExecutionFailure) as excinfo:
            ExecutionGuard(sleep=sleep).guarded_run(context, lambda ctx: "never", max_attempts=2)

        assert "Frame was detached" in excinfo.value.message

    def test_unrecognized_probe_failure_is_reported_as_closed_page(self, sleep):
        context = FakeContext(probe_error=RemoteExecutionError(ErrorKind.OTHER, "Protocol error: Internal error"))

        with pytest.raises(ExecutionFailure) as excinfo:
            ExecutionGuard(sleep=sleep).guarded_run(context, lambda ctx: "never", max_attempts=2)

        assert excinfo.value.kind is ErrorKind.TARGET_CLOSED
        assert excinfo.value.is_transient
        assert "Internal error" in excinfo.value.message

    def test_failed_reload_is_ignored(self, sleep):
        context = FakeContext(reload_error=transient_error("Target closed"))
        call = FlakyCall([transient_error()], value="done")

        assert ExecutionGuard(sleep=sleep).guarded_run(context, call) == "done"
        assert sleep.calls == [TRANSIENT_BACKOFF]

    def test_dead_context_is_not_reloaded(self, sleep):
        context = FakeContext()
        call = FlakyCall([transient_error()], value="done")

        def close_then_fail(ctx):
            ctx.alive = False
            return call(ctx)

        with pytest.raises(ExecutionFailure):
            ExecutionGuard(sleep=sleep).guarded_run(context, close_then_fail, max_attempts=2)
        assert "reload" not in context.call_names()

    def test_other_exceptions_become_execution_failures(self, sleep):
        def broken(ctx):
            raise KeyError("price")

        with pytest.raises(ExecutionFailure) as excinfo:
            ExecutionGuard(sleep=sleep).guarded_run(FakeContext(), broken)

        assert excinfo.value.kind is ErrorKind.OTHER
        assert sleep.calls == []

    def test_rejects_zero_attempts(self, sleep):
        with pytest.raises(ValueError):
            ExecutionGuard(sleep=sleep).guarded_run(FakeContext(), lambda ctx: None, max_attempts=0)
