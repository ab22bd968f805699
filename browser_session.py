"""
================================================================================
Browser Session
================================================================================
Created     : 2026-10-17
Description :
    Owns the Playwright process and the Chromium browser, and hands out fresh
    ExecutionContext objects. Every context gets the same desktop client
    identity (user agent and 1920x1080 viewport) before its first navigation,
    because the store serves degraded markup to unrecognized clients.

Usage:
    session = BrowserSession(headless=True)
    session.launch()
    context = session.new_context()
    ...
    session.close()

Dependencies:
    - playwright
    - colorama
"""

import os  # For reading browser environment variables
from colorama import Style  # For coloring the terminal
from errors import SessionFailure  # Raised when the browser cannot hand out contexts
from execution_context import ExecutionContext, RemoteExecutionError  # For wrapping pages
from playwright.sync_api import Error as PlaywrightError, sync_playwright  # For browser automation
from terminal import BackgroundColors, verbose_output, warning_output  # For terminal output
from typing import Any, Optional  # For type hints


# Browser Constants:
CHROME_EXECUTABLE_PATH = os.getenv("CHROME_EXECUTABLE_PATH", "")  # Path to Chrome executable
HEADLESS = os.getenv("HEADLESS", "True").lower() == "true"  # Headless mode flag
BROWSER_LAUNCH_TIMEOUT = 60000  # 60 seconds timeout for browser launch
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]  # Chromium flags for container environments

# Client Identity Constants:
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)  # Desktop browser identity sent on every context
VIEWPORT = {"width": 1920, "height": 1080}  # Full HD viewport applied to every context


class BrowserSession:
    """
    Launches Chromium and creates identically configured execution contexts.

    :param headless: Run the browser without a window
    :param executable_path: Optional Chrome executable to use instead of the bundled Chromium
    :param playwright_factory: Callable returning a started-able Playwright manager (injectable for tests)
    """


    def __init__(self, headless: bool = HEADLESS, executable_path: str = CHROME_EXECUTABLE_PATH, playwright_factory=sync_playwright) -> None:
        self.headless = headless  # Headless flag for the launch
        self.executable_path = executable_path  # Optional Chrome executable
        self.playwright_factory = playwright_factory  # Factory for the Playwright manager
        self.playwright: Optional[Any] = None  # Placeholder for Playwright instance
        self.browser: Optional[Any] = None  # Placeholder for browser instance
        self.generation = 0  # Number of contexts created so far


    def launch(self) -> None:
        """
        Starts Playwright and launches Chromium.

        :return: None
        """

        verbose_output(f"{BackgroundColors.GREEN}Launching browser...{Style.RESET_ALL}")
        try:  # Attempt to launch browser with error handling
            self.playwright = self.playwright_factory().start()  # Start the Playwright driver
            launch_options = {"headless": self.headless, "args": list(BROWSER_ARGS), "timeout": BROWSER_LAUNCH_TIMEOUT}  # Configure browser launch options
            if self.executable_path:  # Verify if custom Chrome executable path is provided
                launch_options["executable_path"] = self.executable_path  # Set custom executable path in launch options
                verbose_output(f"{BackgroundColors.GREEN}Using Chrome executable: {BackgroundColors.CYAN}{self.executable_path}{Style.RESET_ALL}")
            self.browser = self.playwright.chromium.launch(**launch_options)  # Launch Chromium browser with configured options
            if self.browser is None:  # Verify browser instance was created successfully
                raise RuntimeError("Failed to initialize browser")  # Raise exception if browser initialization failed
            print(f"{BackgroundColors.GREEN}Browser launched successfully.{Style.RESET_ALL}")
        except Exception as e:
            print(f"{BackgroundColors.RED}Failed to launch browser: {e}{Style.RESET_ALL}")
            raise


    def new_context(self) -> ExecutionContext:
        """
        Creates a new page with the standard client identity.

        :return: A fresh ExecutionContext with the next generation number
        """

        if self.browser is None:  # A context needs a running browser
            raise SessionFailure("Browser is not launched")  # Nothing can be scraped without a browser
        try:  # A crashed browser or driver cannot hand out pages
            browser_context = self.browser.new_context(user_agent=USER_AGENT, viewport=dict(VIEWPORT), ignore_https_errors=True)  # Identity must be set before the first navigation
            page = browser_context.new_page()  # Create the page inside the configured context
        except PlaywrightError as e:  # The session itself is gone
            raise SessionFailure(f"Failed to create a browser context: {e}") from e
        self.generation += 1  # Every context gets a distinct generation
        verbose_output(f"{BackgroundColors.GREEN}Created execution context generation {BackgroundColors.CYAN}{self.generation}{Style.RESET_ALL}")
        return ExecutionContext(page, self.generation, browser_context)  # Wrap the page for the rest of the project


    def discard(self, context: Optional[ExecutionContext]) -> None:
        """
        Closes a context that is being replaced. Failures are reported and ignored.

        :param context: Context to close (None is accepted)
        :return: None
        """

        if context is None:  # Nothing to discard
            return  # Exit early
        try:  # The page may already be gone
            context.close()  # Close page and browser context
        except RemoteExecutionError as e:  # Closing a torn-down page commonly fails
            verbose_output(f"{BackgroundColors.YELLOW}Ignoring error while discarding {context}: {e}{Style.RESET_ALL}")


    def close(self) -> None:
        """
        Safely closes the browser and Playwright instances.

        :return: None
        """

        verbose_output(f"{BackgroundColors.GREEN}Closing browser...{Style.RESET_ALL}")
        try:  # Attempt to close browser resources with error handling
            if self.browser:  # Verify if browser instance exists before closing
                self.browser.close()  # Close the browser to release resources
            if self.playwright:  # Verify if Playwright instance exists before stopping
                self.playwright.stop()  # Stop the Playwright instance
            print(f"{BackgroundColors.GREEN}Browser closed.{Style.RESET_ALL}")
        except Exception as e:
            warning_output(f"Warning during browser close: {e}")
        finally:
            self.browser = None  # Drop the closed browser
            self.playwright = None  # Drop the stopped driver
