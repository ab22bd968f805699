"""
Shared fakes for the scraper tests. No browser is started: contexts,
sessions and waits are replaced by small recording objects.
"""

import pytest

from execution_context import ErrorKind, RemoteExecutionError


def transient_error(message="Execution context was destroyed, most likely because of a navigation"):
    return RemoteExecutionError(ErrorKind.CONTEXT_DESTROYED, message)


def timeout_error(message="Timeout 60000ms exceeded"):
    return RemoteExecutionError(ErrorKind.TIMEOUT, message)


class SleepRecorder:
    """Stands in for time.sleep and remembers every wait."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class FakeContext:
    """
    Mimics ExecutionContext. Error queues hold one entry per call; None
    means the call succeeds.
    """

    def __init__(self, generation=1, html="", alive=True, goto_errors=None, load_state_errors=None,
                 selector_errors=None, scroll_errors=None, reload_error=None, probe_error=None):
        self.generation = generation
        self.htmls = list(html) if isinstance(html, (list, tuple)) else [html]
        self.alive = alive
        self.goto_errors = list(goto_errors or [])
        self.load_state_errors = list(load_state_errors or [])
        self.selector_errors = list(selector_errors or [])
        self.scroll_errors = list(scroll_errors or [])
        self.reload_error = reload_error
        self.probe_error = probe_error
        self.calls = []

    @staticmethod
    def _raise_next(queue):
        if queue:
            error = queue.pop(0)
            if error is not None:
                raise error

    def is_alive(self):
        if self.probe_error is not None:
            raise self.probe_error
        return self.alive

    def goto(self, url, wait_until="domcontentloaded", timeout_ms=60000):
        self.calls.append(("goto", url, wait_until, timeout_ms))
        self._raise_next(self.goto_errors)

    def reload(self, wait_until="domcontentloaded", timeout_ms=30000):
        self.calls.append(("reload", wait_until, timeout_ms))
        if self.reload_error is not None:
            raise self.reload_error

    def content(self):
        self.calls.append(("content",))
        return self.htmls.pop(0) if len(self.htmls) > 1 else self.htmls[0]

    def wait_for_load_state(self, state="networkidle", timeout_ms=5000):
        self.calls.append(("wait_for_load_state", state, timeout_ms))
        self._raise_next(self.load_state_errors)

    def wait_for_selector(self, selector, timeout_ms=10000):
        self.calls.append(("wait_for_selector", selector, timeout_ms))
        self._raise_next(self.selector_errors)

    def scroll_to_fraction(self, fraction):
        self.calls.append(("scroll", fraction))
        self._raise_next(self.scroll_errors)

    def scroll_to_top(self):
        self.calls.append(("scroll", 0))
        self._raise_next(self.scroll_errors)

    def close(self):
        self.calls.append(("close",))
        self.alive = False

    def call_names(self):
        return [call[0] for call in self.calls]


class FakeSession:
    """
    Mimics BrowserSession. Prepared contexts are handed out in order; when
    they run out, fresh FakeContext objects are created.
    """

    def __init__(self, contexts=None):
        self.prepared = list(contexts or [])
        self.created = []
        self.discarded = []
        self.launched = False
        self.closed = False

    def launch(self):
        self.launched = True

    def new_context(self):
        context = self.prepared.pop(0) if self.prepared else FakeContext()
        context.generation = len(self.created) + 1
        self.created.append(context)
        return context

    def discard(self, context):
        self.discarded.append(context)
        if context is not None:
            context.close()

    def close(self):
        self.closed = True


@pytest.fixture
def sleep():
    return SleepRecorder()
