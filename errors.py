"""
errors.py — Failure taxonomy for the scraper

Created     : 2026-10-17
Description :
    Exceptions raised across component boundaries:

    - ExecutionFailure: a call inside the page could not complete after the
      guard exhausted its attempts (or failed for a non-transient reason).
    - NavigationFailure: a target could not be loaded and settled within the
      retry budget. Terminal for that target only.
    - IOFailure: the URL list could not be read or the results could not be
      written. Propagated to the caller of the run.
    - SessionFailure: the browser session cannot create contexts any more.
      Stops the whole run.

    Missing fields are not failures; they are reported as None or "N/A".
"""

from typing import Optional  # For type hints


class ExecutionFailure(Exception):
    """
    A guarded call inside the execution context could not complete.

    :param message: Last underlying error message
    :param kind: ErrorKind of the last underlying error, when known
    """

    def __init__(self, message: str, kind=None) -> None:
        super().__init__(message)  # Keep the message as the exception text
        self.message = message  # Last underlying error message
        self.kind = kind  # ErrorKind of the last underlying error

    @property
    def is_transient(self) -> bool:
        return bool(self.kind is not None and self.kind.is_transient)  # True when the context was torn down


class NavigationFailure(Exception):
    """
    The settle sequence for a target could not reach the ready state.

    :param target: The address that failed
    :param message: Description of the last failure
    """

    def __init__(self, target: str, message: str) -> None:
        super().__init__(message)  # Keep the message as the exception text
        self.target = target  # Address that failed
        self.message = message  # Description of the last failure


class IOFailure(Exception):
    """
    Reading the URL list or writing the results file failed.

    :param path: File path involved
    :param message: Description of the failure
    """

    def __init__(self, path: str, message: Optional[str] = None) -> None:
        super().__init__(f"{path}: {message}" if message else path)  # Compose a readable exception text
        self.path = path  # File path involved
        self.message = message  # Description of the failure


class SessionFailure(RuntimeError):
    """
    The browser session itself is unusable (not launched, or the browser or
    driver process is gone). Not confined to one target: propagated to the
    top level of the run.

    :param message: Description of the failure
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)  # Keep the message as the exception text
        self.message = message  # Description of the failure
