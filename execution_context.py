"""
================================================================================
Execution Context Adapter
================================================================================
Created     : 2026-10-17
Description :
    Thin adapter over a Playwright page. Every call into the browser goes
    through `ExecutionContext`, which maps Playwright errors into a
    `RemoteExecutionError` carrying an `ErrorKind`. This is the only place in
    the project where browser error messages are inspected; every other
    module decides on the kind.

    Each ExecutionContext has a generation number. Recreating a context (see
    navigation.py) always produces a new object with a higher generation, the
    old one is discarded and never reused.

Dependencies:
    - playwright
"""

import enum  # For the error kind enumeration
from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError  # For browser automation errors
from typing import Any, Optional  # For type hints


# Scroll Scripts:
SCROLL_TO_FRACTION_SCRIPT = "fraction => window.scrollTo(0, document.body.scrollHeight * fraction)"  # Scroll to a fraction of the document height
SCROLL_TO_TOP_SCRIPT = "() => window.scrollTo(0, 0)"  # Scroll back to the top of the document


class ErrorKind(enum.Enum):
    """
    Classification of failures raised by the browser automation layer.
    """

    CONTEXT_DESTROYED = "context_destroyed"  # Execution context was destroyed, usually by a navigation
    FRAME_DETACHED = "frame_detached"  # The frame running the script was detached
    TARGET_CLOSED = "target_closed"  # The page, context or browser was closed
    SESSION_CLOSED = "session_closed"  # The protocol session went away
    TIMEOUT = "timeout"  # An operation exceeded its own timeout
    OTHER = "other"  # Anything else (script errors, bad selectors, network errors)

    @property
    def is_transient(self) -> bool:
        return self in TRANSIENT_KINDS  # Teardown kinds are worth a retry


TRANSIENT_KINDS = frozenset(
    {ErrorKind.CONTEXT_DESTROYED, ErrorKind.FRAME_DETACHED, ErrorKind.TARGET_CLOSED, ErrorKind.SESSION_CLOSED}
)  # Kinds that mean the context was torn down mid-operation

ERROR_MARKERS = (
    ("execution context was destroyed", ErrorKind.CONTEXT_DESTROYED),
    ("cannot find context with specified id", ErrorKind.CONTEXT_DESTROYED),
    ("frame was detached", ErrorKind.FRAME_DETACHED),
    ("detached", ErrorKind.FRAME_DETACHED),
    ("target page, context or browser has been closed", ErrorKind.TARGET_CLOSED),
    ("target closed", ErrorKind.TARGET_CLOSED),
    ("page closed", ErrorKind.TARGET_CLOSED),
    ("browser has been closed", ErrorKind.TARGET_CLOSED),
    ("session closed", ErrorKind.SESSION_CLOSED),
    ("connection closed", ErrorKind.SESSION_CLOSED),
)  # Lowercase message fragments mapped to their kind, first match wins


class RemoteExecutionError(Exception):
    """
    A browser call failed; `kind` tells callers whether a retry makes sense.

    :param kind: ErrorKind of the failure
    :param message: Underlying error message
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)  # Keep the message as the exception text
        self.kind = kind  # Classified kind of the failure
        self.message = message  # Underlying error message

    @property
    def is_transient(self) -> bool:
        return self.kind.is_transient  # Delegate to the kind


def classify_error(error: BaseException) -> ErrorKind:
    """
    Maps a browser automation exception to an ErrorKind.

    :param error: Exception raised by Playwright (or by a fake in tests)
    :return: The matching ErrorKind, OTHER when nothing matches
    """

    if isinstance(error, RemoteExecutionError):  # Already classified
        return error.kind  # Keep the existing kind

    message = str(error).lower()  # Compare messages case-insensitively
    for marker, kind in ERROR_MARKERS:  # Teardown markers take priority over timeouts
        if marker in message:  # Verify if the marker appears in the message
            return kind  # Return the first matching kind

    if isinstance(error, (PlaywrightTimeoutError, TimeoutError)) or "timeout" in message:  # Timeouts are not teardown events
        return ErrorKind.TIMEOUT  # Signal a timeout

    return ErrorKind.OTHER  # Nothing matched


class ExecutionContext:
    """
    A live, navigable page owned by the navigation controller.

    :param page: Playwright Page object
    :param generation: Sequence number of this context within the session
    :param browser_context: Playwright BrowserContext that owns the page, closed together with it
    """


    def __init__(self, page: Any, generation: int, browser_context: Optional[Any] = None) -> None:
        self.page = page  # Underlying Playwright page
        self.generation = generation  # Every recreation yields a new generation
        self.browser_context = browser_context  # Owning browser context, closed with the page


    def __repr__(self) -> str:
        return f"ExecutionContext(generation={self.generation})"


    def _call(self, operation, *args, **kwargs):
        """
        Runs a page operation and converts browser errors into RemoteExecutionError.

        :param operation: Bound page method to call
        :return: Whatever the operation returns
        """

        try:  # Attempt the browser call
            return operation(*args, **kwargs)  # Forward the call to Playwright
        except RemoteExecutionError:  # Already classified by a nested call
            raise  # Keep the original classification
        except PlaywrightError as e:  # Browser automation failure
            raise RemoteExecutionError(classify_error(e), str(e)) from e  # Classify once at the boundary


    def is_alive(self) -> bool:
        """
        Verifies if the page is still open.

        :return: True when the page is open, False when it was closed
        :raises RemoteExecutionError: When the liveness probe itself fails
        """

        try:  # The probe may fail when the page is already detached
            return not self.page.is_closed()  # Open pages are alive
        except Exception as e:  # Any failure here means the context is probably invalidated
            raise RemoteExecutionError(classify_error(e), str(e) or "Liveness probe failed") from e


    def goto(self, url: str, wait_until: str = "domcontentloaded", timeout_ms: int = 60000):
        return self._call(self.page.goto, url, wait_until=wait_until, timeout=timeout_ms)  # Navigate to the address


    def reload(self, wait_until: str = "domcontentloaded", timeout_ms: int = 30000):
        return self._call(self.page.reload, wait_until=wait_until, timeout=timeout_ms)  # Reload the current document


    def evaluate(self, script: str, arg: Any = None) -> Any:
        if arg is None:  # Playwright treats a missing argument differently from None
            return self._call(self.page.evaluate, script)  # Run the script without an argument
        return self._call(self.page.evaluate, script, arg)  # Run the script with its argument


    def content(self) -> str:
        return self._call(self.page.content)  # Fully rendered HTML of the document


    def wait_for_load_state(self, state: str = "networkidle", timeout_ms: int = 5000):
        return self._call(self.page.wait_for_load_state, state, timeout=timeout_ms)  # Wait for a load state


    def wait_for_selector(self, selector: str, timeout_ms: int = 10000):
        return self._call(self.page.wait_for_selector, selector, timeout=timeout_ms)  # Wait for an element


    def scroll_to_fraction(self, fraction: float):
        return self.evaluate(SCROLL_TO_FRACTION_SCRIPT, fraction)  # Scroll to a fraction of the document height


    def scroll_to_top(self):
        return self.evaluate(SCROLL_TO_TOP_SCRIPT)  # Scroll back to the top


    def close(self) -> None:
        """
        Closes the page and its browser context.

        :return: None
        :raises RemoteExecutionError: When closing fails
        """

        try:  # The owning context must be released even when the page refuses to close
            if not self.page.is_closed():  # Only close pages that are still open
                self._call(self.page.close)  # Close the page
        finally:
            if self.browser_context is not None:  # Close the owning context as well
                self._call(self.browser_context.close)  # Release cookies and storage of this generation
