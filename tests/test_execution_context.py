"""
Tests for the error classification and the page adapter.
"""

import pytest
from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from execution_context import ErrorKind, ExecutionContext, RemoteExecutionError, classify_error


class FakePage:
    """Minimal stand-in for a Playwright page."""

    def __init__(self, error=None, closed=False):
        self.error = error
        self.closed = closed
        self.calls = []

    def is_closed(self):
        if isinstance(self.error, RuntimeError):
            raise self.error
        return self.closed

    def goto(self, url, wait_until=None, timeout=None):
        self.calls.append(("goto", url, wait_until, timeout))
        if self.error is not None:
            raise self.error

    def content(self):
        return "<html></html>"

    def evaluate(self, script, *args):
        self.calls.append(("evaluate", script) + args)

    def close(self):
        self.closed = True


@pytest.mark.parametrize("message,kind", [
    ("Execution context was destroyed, most likely because of a navigation", ErrorKind.CONTEXT_DESTROYED),
    ("Frame was detached", ErrorKind.FRAME_DETACHED),
    ("Target page, context or browser has been closed", ErrorKind.TARGET_CLOSED),
    ("Protocol error: Session closed. Most likely the page has been closed.", ErrorKind.SESSION_CLOSED),
    ("net::ERR_NAME_NOT_RESOLVED", ErrorKind.OTHER),
])
def test_classify_playwright_messages(message, kind):
    assert classify_error(PlaywrightError(message)) is kind


def test_timeouts_are_not_transient():
    kind = classify_error(PlaywrightTimeoutError("Timeout 30000ms exceeded."))
    assert kind is ErrorKind.TIMEOUT
    assert not kind.is_transient


def test_teardown_markers_win_over_timeouts():
    assert classify_error(PlaywrightTimeoutError("Timeout exceeded: target closed")) is ErrorKind.TARGET_CLOSED


def test_adapter_wraps_playwright_errors():
    context = ExecutionContext(FakePage(error=PlaywrightError("Execution context was destroyed")), generation=1)

    with pytest.raises(RemoteExecutionError) as excinfo:
        context.goto("https://example.test")

    assert excinfo.value.is_transient
    assert excinfo.value.kind is ErrorKind.CONTEXT_DESTROYED


def test_liveness_probe():
    assert ExecutionContext(FakePage(), generation=1).is_alive()
    assert not ExecutionContext(FakePage(closed=True), generation=2).is_alive()

    with pytest.raises(RemoteExecutionError):
        ExecutionContext(FakePage(error=RuntimeError("Target closed")), generation=3).is_alive()


def test_scroll_passes_fraction_to_script():
    page = FakePage()
    ExecutionContext(page, generation=1).scroll_to_fraction(0.5)

    assert page.calls[0][0] == "evaluate"
    assert page.calls[0][2] == 0.5


class FakeBrowserContext:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class UnclosablePage(FakePage):
    def close(self):
        raise PlaywrightError("Target page, context or browser has been closed")


def test_close_releases_browser_context_when_page_close_fails():
    browser_context = FakeBrowserContext()
    context = ExecutionContext(UnclosablePage(), generation=1, browser_context=browser_context)

    with pytest.raises(RemoteExecutionError) as excinfo:
        context.close()

    assert excinfo.value.kind is ErrorKind.TARGET_CLOSED
    assert browser_context.closed
