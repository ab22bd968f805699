"""
================================================================================
Navigation Controller
================================================================================
Created     : 2026-10-17
Description :
    Drives the execution context to a target address and performs the settle
    sequence needed before extraction:

        NAVIGATING -> SETTLING -> READY

    The store lazy-renders price and offer widgets only once they intersect
    the viewport, and some widgets mount after the scroll event fires, so the
    settle sequence scrolls to the middle, pauses, scrolls back up and pauses
    again before waiting for the title heading.

    The controller is the only owner of the execution context. Replacing the
    context (after a teardown during navigation) discards the old one and
    asks the session for a new generation; no other component replaces it.

Usage:
    controller = NavigationController(session)
    context = controller.settle_at("https://store.playstation.com/en-rs/product/...")
"""

import enum  # For navigation states
import time  # For settle waits
from colorama import Style  # For coloring the terminal
from errors import ExecutionFailure, NavigationFailure  # For failure reporting
from execution_context import ExecutionContext, RemoteExecutionError  # For classified browser errors
from execution_guard import ExecutionGuard  # For guarded scroll calls
from terminal import BackgroundColors, verbose_output, warning_output  # For terminal output
from typing import Any, Callable, Optional  # For type hints


# Navigation Constants:
MAX_NAVIGATION_RETRIES = 2  # Retries of the whole navigate-and-settle sequence
PAGE_LOAD_TIMEOUT = 60000  # 60 seconds timeout for detail page navigation
LISTING_LOAD_TIMEOUT = 30000  # 30 seconds timeout for catalog page navigation
NETWORK_IDLE_TIMEOUT = 5000  # Milliseconds to wait for network idle on detail pages
HEADING_TIMEOUT = 10000  # Milliseconds to wait for the title heading
HEADING_SELECTOR = "h1"  # Primary heading that marks a rendered detail page

# Settle Timing Constants (seconds):
INITIAL_SCRIPT_WAIT = 3.0  # Wait for initial script execution after navigation
AFTER_SCROLL_DOWN_WAIT = 3.0  # Wait after scrolling to the middle of the page
AFTER_SCROLL_UP_WAIT = 2.0  # Wait after scrolling back to the top
CONTEXT_REPLACEMENT_WAIT = 1.0  # Wait after recreating a context
SETTLE_RETRY_WAIT = 2.0  # Wait before restarting after a settle failure
LISTING_SETTLE_WAIT = 3.0  # Wait after loading a catalog page
SCROLL_MIDPOINT = 0.5  # Fraction of the document height scrolled to during settle


class NavigationState(enum.Enum):
    """
    States of one navigate-and-settle run.
    """

    NAVIGATING = "navigating"
    SETTLING = "settling"
    READY = "ready"


class NavigationController:
    """
    Owns the execution context and brings it to a settled target page.

    :param session: BrowserSession used to create and discard contexts
    :param guard: ExecutionGuard used for in-page calls
    :param sleep: Callable used for waits (seconds), replaceable in tests
    :param max_retries: Retries of the whole sequence on transient failures
    """


    def __init__(self, session: Any, guard: Optional[ExecutionGuard] = None, sleep: Callable[[float], Any] = time.sleep, max_retries: int = MAX_NAVIGATION_RETRIES) -> None:
        self.session = session  # Factory for execution contexts
        self.sleep = sleep  # Wait function
        self.guard = guard if guard is not None else ExecutionGuard(sleep=sleep)  # Guard for scroll calls
        self.max_retries = max_retries  # Retry budget for the whole sequence
        self.context: Optional[ExecutionContext] = None  # Currently owned context
        self.state: Optional[NavigationState] = None  # Last state reached


    def current_context(self) -> ExecutionContext:
        """
        Returns the owned context, creating the first one on demand.

        :return: The current ExecutionContext
        """

        if self.context is None:  # No context yet
            self.context = self.session.new_context()  # Create the first generation
        return self.context  # Return the owned context


    def replace_context(self) -> ExecutionContext:
        """
        Discards the current context and acquires a new one with the same identity.

        :return: The new ExecutionContext
        """

        old_context = self.context  # Context being replaced
        self.context = None  # Drop ownership before discarding
        self.session.discard(old_context)  # Close the old page, ignoring failures
        self.context = self.session.new_context()  # New generation, same identity
        verbose_output(f"{BackgroundColors.GREEN}Replaced {old_context} with {self.context}{Style.RESET_ALL}")
        return self.context  # Return the new context


    def _context_is_alive(self, context: ExecutionContext) -> bool:
        try:  # The probe may fail on detached pages
            return context.is_alive()  # True for open pages
        except RemoteExecutionError:  # A failing probe counts as dead
            return False  # Signal a dead context


    def _best_effort(self, description: str, operation: Callable[[], Any]) -> None:
        """
        Runs an optional wait; non-transient failures (timeouts, unsupported calls) are ignored.

        :param description: Short label for verbose output
        :param operation: Callable performing the wait
        :return: None
        :raises RemoteExecutionError: When the failure is a transient teardown
        """

        try:  # Optional step
            operation()  # Perform the wait
        except RemoteExecutionError as e:  # Classified browser failure
            if e.is_transient:  # Teardown must restart the sequence
                raise  # Let the settle loop handle it
            verbose_output(f"{BackgroundColors.YELLOW}Skipping {description}: {e}{Style.RESET_ALL}")


    def settle(self, context: ExecutionContext) -> None:
        """
        Runs the settle sequence on a freshly navigated context.

        :param context: Context that has just loaded the target
        :return: None
        :raises RemoteExecutionError: On transient failures of the optional waits
        :raises ExecutionFailure: When a guarded scroll gives up
        """

        self.sleep(INITIAL_SCRIPT_WAIT)  # Let the initial scripts run
        self._best_effort("network idle wait", lambda: context.wait_for_load_state("networkidle", timeout_ms=NETWORK_IDLE_TIMEOUT))  # Detail pages rarely go fully idle
        self.guard.guarded_run(context, lambda ctx: ctx.scroll_to_fraction(SCROLL_MIDPOINT))  # Bring lazy widgets into the viewport
        self.sleep(AFTER_SCROLL_DOWN_WAIT)  # Let widgets mount after the scroll event
        self.guard.guarded_run(context, lambda ctx: ctx.scroll_to_top())  # Scroll back to the top
        self.sleep(AFTER_SCROLL_UP_WAIT)  # Let late widgets finish rendering
        self._best_effort("heading wait", lambda: context.wait_for_selector(HEADING_SELECTOR, timeout_ms=HEADING_TIMEOUT))  # The heading may be missing on some pages


    def settle_at(self, target: str) -> ExecutionContext:
        """
        Navigates to the target and settles the page.

        :param target: Absolute address of a detail page
        :return: A live, settled ExecutionContext
        :raises NavigationFailure: When the page cannot be loaded and settled within the retry budget
        """

        retry_count = 0  # Retries used so far
        context = self.current_context()  # Start from the owned context

        while True:  # Bounded by retry_count checks below
            attempt_label = f" (attempt {retry_count + 1})" if retry_count > 0 else ""  # Only label retries
            print(f"Loading details for: {target}{attempt_label}")

            self.state = NavigationState.NAVIGATING  # Enter the navigating state
            try:  # Navigate with minimal readiness, background requests keep running
                context.goto(target, wait_until="domcontentloaded", timeout_ms=PAGE_LOAD_TIMEOUT)
            except RemoteExecutionError as e:  # Navigation failed
                if e.is_transient and retry_count < self.max_retries:  # The page was torn down, recreate it
                    warning_output("  Page closed, creating a new one...")
                    context = self.replace_context()  # New generation with the same identity
                    retry_count += 1  # Count the retry
                    self.sleep(CONTEXT_REPLACEMENT_WAIT)  # Give the new page a moment
                    continue  # Restart from navigating
                raise NavigationFailure(target, e.message) from e  # Hard failure for this target

            self.state = NavigationState.SETTLING  # Enter the settling state
            try:  # Run the settle sequence
                self.settle(context)
            except (RemoteExecutionError, ExecutionFailure) as e:  # Settle failed
                if e.is_transient and retry_count < self.max_retries:  # Teardown with retries left
                    retry_count += 1  # Count the retry
                    warning_output(f"  Error: {e.message}, retrying...")
                    self.sleep(SETTLE_RETRY_WAIT)  # Back off before navigating again
                    if not self._context_is_alive(context):  # A dead context cannot navigate again
                        context = self.replace_context()  # New generation with the same identity
                    continue  # Restart from navigating
                raise NavigationFailure(target, e.message) from e  # Non-transient or exhausted

            self.state = NavigationState.READY  # The page is settled
            return context  # Hand the settled context to the caller


    def open_listing(self, url: str, settle_wait: float = LISTING_SETTLE_WAIT) -> ExecutionContext:
        """
        Loads a category or search page and waits for the product grid.

        :param url: Absolute address of the catalog page
        :param settle_wait: Seconds to wait after loading
        :return: The loaded ExecutionContext
        :raises NavigationFailure: When the page cannot be loaded
        """

        print(f"Accessing URL: {url}")
        context = self.current_context()  # Use the owned context
        self.state = NavigationState.NAVIGATING  # Enter the navigating state
        try:  # Catalog pages settle once the network goes idle
            context.goto(url, wait_until="networkidle", timeout_ms=LISTING_LOAD_TIMEOUT)
        except RemoteExecutionError as e:  # Navigation failed
            raise NavigationFailure(url, e.message) from e  # Listing mode does not retry
        self.state = NavigationState.SETTLING  # Enter the settling state
        self.sleep(settle_wait)  # Wait for the product grid to render
        self.state = NavigationState.READY  # The page is ready
        return context  # Return the loaded context
