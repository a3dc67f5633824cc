"""
Page Object base class.

Page objects hold the Playwright page they act on and define their
locators in ``__init__``.
"""

import traceback
from typing import Callable

from playwright.sync_api import Page

from ..reporting.step_log import StepFailure, log_result


class BasePage:
    """Base page object bound to a Playwright page."""

    def __init__(self, page: Page):
        self._page = page

    @property
    def page(self) -> Page:
        return self._page

    @page.setter
    def page(self, page: Page) -> None:
        self._page = page

    def step(self, action: Callable[[], None], passed: str, failed: str) -> None:
        """
        Run a page action and record its outcome as a report step.

        A failing action logs its stack trace as INFO and then records a FAIL
        step, which fails the test.
        """
        try:
            action()
        except StepFailure:
            raise
        except Exception:
            log_result("INFO", traceback.format_exc())
            log_result("FAIL", failed)
        else:
            log_result("PASS", passed)
