"""
Tests for the navigate-and-settle sequence and context ownership.
"""

import pytest

from conftest import FakeContext, FakeSession, timeout_error, transient_error
from errors import NavigationFailure
from execution_context import ErrorKind, RemoteExecutionError
from navigation import (
    AFTER_SCROLL_DOWN_WAIT,
    AFTER_SCROLL_UP_WAIT,
    CONTEXT_REPLACEMENT_WAIT,
    INITIAL_SCRIPT_WAIT,
    LISTING_LOAD_TIMEOUT,
    LISTING_SETTLE_WAIT,
    PAGE_LOAD_TIMEOUT,
    SETTLE_RETRY_WAIT,
    NavigationController,
    NavigationState,
)

TARGET = "https://store.playstation.com/en-rs/product/EP0000-TEST00000_00-GAME000000000000"
SETTLE_WAITS = [INITIAL_SCRIPT_WAIT, AFTER_SCROLL_DOWN_WAIT, AFTER_SCROLL_UP_WAIT]


def test_settle_sequence_order_and_waits(sleep):
    context = FakeContext()
    controller = NavigationController(FakeSession([context]), sleep=sleep)

    assert controller.settle_at(TARGET) is context
    assert controller.state is NavigationState.READY
    assert context.calls == [
        ("goto", TARGET, "domcontentloaded", PAGE_LOAD_TIMEOUT),
        ("wait_for_load_state", "networkidle", 5000),
        ("scroll", 0.5),
        ("scroll", 0),
        ("wait_for_selector", "h1", 10000),
    ]
    assert sleep.calls == SETTLE_WAITS


def test_transient_navigation_failure_replaces_context(sleep):
    first = FakeContext(goto_errors=[transient_error("Target closed")])
    second = FakeContext()
    session = FakeSession([first, second])
    controller = NavigationController(session, sleep=sleep)

    context = controller.settle_at(TARGET)

    assert context is second
    assert context.generation == 2
    assert session.discarded == [first]
    assert controller.context is second
    assert sleep.calls == [CONTEXT_REPLACEMENT_WAIT] + SETTLE_WAITS


def test_non_transient_navigation_failure_is_not_retried(sleep):
    context = FakeContext(goto_errors=[timeout_error()])
    session = FakeSession([context])
    controller = NavigationController(session, sleep=sleep)

    with pytest.raises(NavigationFailure) as excinfo:
        controller.settle_at(TARGET)

    assert excinfo.value.target == TARGET
    assert context.call_names() == ["goto"]
    assert len(session.created) == 1
    assert sleep.calls == []


def test_transient_navigation_failures_exhaust_retry_budget(sleep):
    contexts = [FakeContext(goto_errors=[transient_error()]) for _ in range(3)]
    session = FakeSession(contexts)
    controller = NavigationController(session, sleep=sleep, max_retries=2)

    with pytest.raises(NavigationFailure):
        controller.settle_at(TARGET)

    assert len(session.created) == 3
    assert sleep.calls == [CONTEXT_REPLACEMENT_WAIT, CONTEXT_REPLACEMENT_WAIT]


def test_transient_settle_failure_restarts_on_live_context(sleep):
    context = FakeContext(load_state_errors=[transient_error()])
    session = FakeSession([context])
    controller = NavigationController(session, sleep=sleep)

    assert controller.settle_at(TARGET) is context
    assert context.call_names().count("goto") == 2
    assert len(session.created) == 1
    assert sleep.calls == [INITIAL_SCRIPT_WAIT, SETTLE_RETRY_WAIT] + SETTLE_WAITS


def test_transient_settle_failure_on_dead_context_replaces_it(sleep):
    first = FakeContext(load_state_errors=[transient_error("Target page, context or browser has been closed")])
    second = FakeContext()
    session = FakeSession([first, second])
    controller = NavigationController(session, sleep=sleep)

    original_wait = first.wait_for_load_state

    def close_and_fail(state="networkidle", timeout_ms=5000):
        first.alive = False
        original_wait(state, timeout_ms)

    first.wait_for_load_state = close_and_fail

    assert controller.settle_at(TARGET) is second
    assert session.discarded == [first]


def test_unrecognized_probe_failure_replaces_context(sleep):
    first = FakeContext(probe_error=RemoteExecutionError(ErrorKind.OTHER, "Protocol error (Runtime.evaluate): Internal error"))
    second = FakeContext()
    session = FakeSession([first, second])
    controller = NavigationController(session, sleep=sleep)

    assert controller.settle_at(TARGET) is second
    assert len(session.created) == 2
    assert session.discarded == [first]
    assert controller.state is NavigationState.READY


def test_optional_waits_swallow_timeouts(sleep):
    context = FakeContext(load_state_errors=[timeout_error()], selector_errors=[timeout_error()])
    controller = NavigationController(FakeSession([context]), sleep=sleep)

    assert controller.settle_at(TARGET) is context
    assert controller.state is NavigationState.READY
    assert context.call_names().count("goto") == 1


def test_open_listing_waits_for_network_idle(sleep):
    context = FakeContext()
    controller = NavigationController(FakeSession([context]), sleep=sleep)
    url = "https://store.playstation.com/en-rs/category/games"

    assert controller.open_listing(url) is context
    assert context.calls == [("goto", url, "networkidle", LISTING_LOAD_TIMEOUT)]
    assert sleep.calls == [LISTING_SETTLE_WAIT]


def test_open_listing_failure_is_not_retried(sleep):
    context = FakeContext(goto_errors=[transient_error()])
    session = FakeSession([context])
    controller = NavigationController(session, sleep=sleep)

    with pytest.raises(NavigationFailure):
        controller.open_listing("https://store.playstation.com/en-rs/search/gran%20turismo")

    assert len(session.created) == 1
