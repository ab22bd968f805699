"""
================================================================================
Execution Guard
================================================================================
Created     : 2026-10-17
Description :
    Wraps any call into the page with detection of invalidated contexts and a
    bounded retry:

        - Missing, closed or unprobeable context: wait LIVENESS_BACKOFF and
          try again.
        - Transient teardown (context destroyed, frame detached, target or
          session closed): wait TRANSIENT_BACKOFF, reload the document on a
          best-effort basis, wait RELOAD_SETTLE after a successful reload,
          and try again.
        - Anything else, or no attempts left: raise ExecutionFailure with the
          last underlying message.

    The guard never replaces the context; that is the navigation
    controller's job.

Usage:
    guard = ExecutionGuard()
    html = guard.guarded_run(context, lambda ctx: ctx.content())
"""

import time  # For backoff waits
from colorama import Style  # For coloring the terminal
from errors import ExecutionFailure  # Raised when the guard gives up
from execution_context import ErrorKind, ExecutionContext, RemoteExecutionError  # For classified browser errors
from terminal import BackgroundColors, verbose_output  # For terminal output
from typing import Any, Callable, Optional  # For type hints


# Retry Constants:
DEFAULT_MAX_ATTEMPTS = 3  # Attempts before giving up
LIVENESS_BACKOFF = 1.0  # Seconds to wait after a liveness failure
TRANSIENT_BACKOFF = 1.5  # Seconds to wait after a transient teardown failure
RELOAD_SETTLE = 2.0  # Seconds to wait after a recovery reload
RELOAD_TIMEOUT = 30000  # Milliseconds allowed for a recovery reload


class ExecutionGuard:
    """
    Bounded retry around calls into an ExecutionContext.

    :param sleep: Callable used for waits (seconds), replaceable in tests
    """


    def __init__(self, sleep: Callable[[float], Any] = time.sleep) -> None:
        self.sleep = sleep  # Wait function


    def _liveness_problem(self, context: Optional[ExecutionContext]) -> Optional[RemoteExecutionError]:
        """
        Verifies if the context can be used.

        :param context: Context to verify
        :return: None when the context is usable, otherwise the problem as a RemoteExecutionError
        """

        if context is None:  # No context at all
            return RemoteExecutionError(ErrorKind.TARGET_CLOSED, "Execution context is missing")
        try:  # The probe itself may fail when the page is detached
            if not context.is_alive():  # The page was closed
                return RemoteExecutionError(ErrorKind.TARGET_CLOSED, "Page is closed")
        except RemoteExecutionError as e:  # A failing probe means the context is probably invalidated
            if e.is_transient:  # Already classified as a teardown
                return e  # Report the probe failure as is
            return RemoteExecutionError(ErrorKind.TARGET_CLOSED, e.message)  # Unrecognized probe failures still mean a dead context
        return None  # The context is usable


    def _recover_document(self, context: ExecutionContext) -> None:
        """
        Reloads the document after a teardown. Reload failures are ignored.

        :param context: Context to reload
        :return: None
        """

        try:  # Recovery is best effort
            if context.is_alive():  # Only reload pages that are still open
                context.reload(wait_until="domcontentloaded", timeout_ms=RELOAD_TIMEOUT)  # Reload the document
                self.sleep(RELOAD_SETTLE)  # Let the reloaded document run its scripts
        except RemoteExecutionError as e:  # The reload can fail for the same reason the call did
            verbose_output(f"{BackgroundColors.YELLOW}Recovery reload failed: {e}{Style.RESET_ALL}")


    def guarded_run(self, context: Optional[ExecutionContext], fn: Callable[[ExecutionContext], Any], max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> Any:
        """
        Runs fn against the context, retrying on invalidated contexts.

        :param context: Context to run against
        :param fn: Callable receiving the context
        :param max_attempts: Total number of attempts
        :return: The value returned by fn
        :raises ExecutionFailure: When no attempt succeeded or a non-transient failure occurred
        """

        if max_attempts < 1:  # At least one attempt is always made
            raise ValueError("max_attempts must be at least 1")

        for attempt in range(1, max_attempts + 1):  # Bounded attempt loop
            has_attempts_left = attempt < max_attempts  # Whether another attempt may follow

            problem = self._liveness_problem(context)  # Verify the context before using it
            if problem is not None:  # The context cannot be used right now
                if has_attempts_left:  # Wait and try again
                    print(f"{BackgroundColors.YELLOW}  Page problem detected, retrying ({attempt}/{max_attempts})...{Style.RESET_ALL}")
                    self.sleep(LIVENESS_BACKOFF)  # Back off before the next attempt
                    continue  # Next attempt
                raise ExecutionFailure(f"Page is closed or detached: {problem.message}", problem.kind) from problem

            try:  # Run the call against the live context
                return fn(context)  # Success ends the loop
            except RemoteExecutionError as e:  # Classified browser failure
                if e.is_transient and has_attempts_left:  # Teardown with attempts remaining
                    print(f"{BackgroundColors.YELLOW}  Detached context detected, retrying ({attempt}/{max_attempts})...{Style.RESET_ALL}")
                    self.sleep(TRANSIENT_BACKOFF)  # Back off before recovering
                    self._recover_document(context)  # Best-effort reload
                    continue  # Next attempt
                raise ExecutionFailure(e.message, e.kind) from e  # Non-transient or exhausted
            except ExecutionFailure:  # Nested guarded call already gave up
                raise  # Keep the nested failure
            except Exception as e:  # Failures outside the browser layer are not retried
                raise ExecutionFailure(str(e) or type(e).__name__, ErrorKind.OTHER) from e
