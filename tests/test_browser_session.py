"""
Tests for context creation on the browser session, without a real browser.
"""

import pytest
from playwright.sync_api import Error as PlaywrightError

from browser_session import USER_AGENT, VIEWPORT, BrowserSession
from errors import SessionFailure


class FakeBrowserContext:
    def __init__(self):
        self.pages = 0

    def new_page(self):
        self.pages += 1
        return object()


class FakeBrowser:
    def __init__(self, error=None):
        self.error = error
        self.options = []

    def new_context(self, **options):
        self.options.append(options)
        if self.error is not None:
            raise self.error
        return FakeBrowserContext()


def test_new_context_applies_client_identity_and_counts_generations():
    session = BrowserSession()
    session.browser = FakeBrowser()

    first = session.new_context()
    second = session.new_context()

    assert (first.generation, second.generation) == (1, 2)
    assert session.browser.options[0]["user_agent"] == USER_AGENT
    assert session.browser.options[0]["viewport"] == VIEWPORT


def test_new_context_without_browser_is_a_session_failure():
    with pytest.raises(SessionFailure):
        BrowserSession().new_context()


def test_crashed_browser_is_a_session_failure():
    session = BrowserSession()
    session.browser = FakeBrowser(error=PlaywrightError("Target page, context or browser has been closed"))

    with pytest.raises(SessionFailure) as excinfo:
        session.new_context()

    assert "has been closed" in excinfo.value.message
