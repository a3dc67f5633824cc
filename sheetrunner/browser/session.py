"""
Thread-scoped Playwright browser sessions.

Each worker thread owns one Playwright instance, browser, context and page.
Sessions are opened before a test method and closed after it, so parallel
tests never share browser state.
"""

import threading
from typing import Optional

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    sync_playwright,
)

from ..core.exceptions import BrowserSessionError
from ..core.logging_config import get_logger


logger = get_logger(__name__)

CHROMIUM_ARGS = ["--start-maximized"]


def engine_name(browser_name: Optional[str]) -> str:
    """Map a Run Manager browser value onto a Playwright engine."""
    name = (browser_name or "").strip().lower()
    if name == "firefox":
        return "firefox"
    if name in ("webkit", "safari"):
        return "webkit"
    return "chromium"


class BrowserSession:
    """One Playwright instance with its browser, context and page."""

    def __init__(self, browser_name: str = "chrome", headless: bool = False):
        self.browser_name = browser_name
        self.engine = engine_name(browser_name)
        self.headless = headless
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    def start(self) -> Page:
        """
        Launch the browser and open a page.

        Raises:
            BrowserSessionError: If Playwright fails to start the browser
        """
        logger.info(
            f"Starting {self.engine} session for browser '{self.browser_name}'",
            extra={"browser": self.browser_name},
        )
        try:
            self.playwright = sync_playwright().start()
            browser_type = getattr(self.playwright, self.engine)
            if self.engine == "chromium":
                self.browser = browser_type.launch(
                    headless=self.headless, args=CHROMIUM_ARGS
                )
                self.context = self.browser.new_context(no_viewport=True)
            else:
                self.browser = browser_type.launch(headless=self.headless)
                self.context = self.browser.new_context()
            self.page = self.context.new_page()
        except PlaywrightError as e:
            self.close()
            raise BrowserSessionError(
                f"Failed to start {self.engine} browser: {e}",
                browser=self.browser_name,
            )
        return self.page

    def close(self) -> None:
        """Close page, context, browser and Playwright in that order."""
        for name in ("page", "context", "browser"):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                resource.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing {name}: {e}")
            setattr(self, name, None)

        if self.playwright is not None:
            try:
                self.playwright.stop()
            except PlaywrightError as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self.playwright = None

    @property
    def is_open(self) -> bool:
        return self.page is not None


class SessionRegistry:
    """Keeps one browser session per thread."""

    def __init__(self):
        self._local = threading.local()

    def open(self, browser_name: str = "chrome", headless: bool = False) -> Page:
        """Start a session for the calling thread, replacing any open one."""
        self.close()
        session = BrowserSession(browser_name, headless)
        page = session.start()
        self._local.session = session
        return page

    def current(self) -> Optional[BrowserSession]:
        return getattr(self._local, "session", None)

    def page(self) -> Optional[Page]:
        session = self.current()
        return session.page if session else None

    def close(self) -> None:
        session = self.current()
        if session is not None:
            session.close()
            self._local.session = None


sessions = SessionRegistry()
