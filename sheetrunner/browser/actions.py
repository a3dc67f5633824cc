"""
Reusable page actions for page objects.

Thin wrappers over Playwright locators that wait for the element to be in
the right state before interacting with it.
"""

import base64
import time
from pathlib import Path
from typing import Union

from playwright.sync_api import Dialog, Locator, Page, expect

from ..core.logging_config import get_logger


logger = get_logger(__name__)

SYNC_CONDITIONS = (
    "visibilityOfElement",
    "invisibilityOfElement",
    "elementToBeClickable",
    "alertPresent",
)


def sync_till(page: Page, condition: str, locator: Locator) -> bool:
    """
    Wait until an element satisfies a condition.

    Args:
        page: Page the element belongs to
        condition: One of visibilityOfElement, invisibilityOfElement,
            elementToBeClickable or alertPresent (case-insensitive)
        locator: Element to wait on; ignored for alertPresent

    Returns:
        True once the condition holds; for alertPresent, whether an alert
        role element is visible

    Raises:
        ValueError: For an unknown condition
    """
    key = condition.lower()
    if key == "visibilityofelement":
        locator.wait_for(state="visible")
    elif key == "invisibilityofelement":
        locator.wait_for(state="hidden")
    elif key == "elementtobeclickable":
        locator.wait_for(state="visible")
        expect(locator).to_be_enabled()
    elif key == "alertpresent":
        return page.get_by_role("alert").is_visible()
    else:
        raise ValueError(
            f"Unsupported sync condition: {condition}. Must be one of {SYNC_CONDITIONS}"
        )
    return True


def pause(seconds: float) -> None:
    time.sleep(seconds)


def wait_on_page(page: Page, seconds: float) -> None:
    page.wait_for_timeout(seconds * 1000)


def enter_value(page: Page, locator: Locator, text: str) -> None:
    """Clear a text box and fill it."""
    sync_till(page, "visibilityOfElement", locator)
    sync_till(page, "elementToBeClickable", locator)
    locator.hover()
    locator.clear()
    locator.fill(text)


def type_value(page: Page, locator: Locator, text: str) -> None:
    """Clear a text box and type into it key by key."""
    sync_till(page, "visibilityOfElement", locator)
    sync_till(page, "elementToBeClickable", locator)
    locator.hover()
    locator.click()
    locator.clear()
    page.keyboard.type(text)


def click_element(page: Page, locator: Locator) -> None:
    sync_till(page, "elementToBeClickable", locator)
    locator.hover()
    locator.click()


def double_click_element(page: Page, locator: Locator) -> None:
    sync_till(page, "elementToBeClickable", locator)
    locator.hover()
    locator.dblclick()


def _page_at(page: Page, tab: int) -> Page:
    pages = page.context.pages
    logger.info(f"Number of pages: {len(pages)}")
    if 0 <= tab < len(pages):
        target = pages[tab]
        logger.info(f"Switched to tab {tab}: {target.url} ({target.title()})")
        return target
    logger.warning(
        f"Attempted to switch to tab index {tab} but only {len(pages)} pages "
        "are open. Remaining on current page."
    )
    return page


def go_to_new_page(page: Page, locator: Locator, tab: int) -> Page:
    """Click an element that opens a new tab and return the page at ``tab``."""
    locator.hover()
    with page.context.expect_page() as page_info:
        locator.click()
    new_page = page_info.value
    new_page.wait_for_load_state()
    return _page_at(new_page, tab)


def go_to_page(page: Page, tab: int) -> Page:
    """Return the open page at index ``tab``, or ``page`` when out of range."""
    return _page_at(page, tab)


def upload_files(page: Page, locator: Locator, path: Union[str, Path]) -> None:
    """Upload a file through the file chooser opened by ``locator``."""
    sync_till(page, "elementToBeClickable", locator)
    with page.expect_file_chooser() as chooser_info:
        locator.click()
    chooser_info.value.set_files(str(path))


def text_contains(locator: Locator, expected: str) -> bool:
    locator.hover()
    text = locator.text_content() or ""
    return expected in text or text.lower() == expected.lower()


def text_value_equals(locator: Locator, expected: str) -> bool:
    """Compare a text box value with ``expected``, ignoring case."""
    locator.hover()
    value = locator.get_attribute("value")
    return value is not None and value.lower() == expected.lower()


def select_option(page: Page, by: str, locator: Locator, value: str) -> None:
    """
    Select a dropdown option by VALUE, LABEL or INDEX.

    Raises:
        ValueError: For an unknown mode or a non-numeric index
    """
    sync_till(page, "visibilityOfElement", locator)
    locator.hover()

    mode = by.upper()
    if mode == "VALUE":
        locator.select_option(value=value)
    elif mode == "LABEL":
        locator.select_option(label=value)
    elif mode == "INDEX":
        try:
            index = int(value)
        except ValueError:
            message = f"Invalid index '{value}' provided for select_option"
            logger.error(message)
            raise ValueError(message)
        locator.select_option(index=index)
    else:
        message = f"Unsupported select option condition: {by}"
        logger.error(message)
        raise ValueError(message)

    logger.debug(f"Selected option '{value}' by {mode}")


def accept_alerts(page: Page) -> None:
    """Register a handler that accepts every dialog raised by ``page``."""

    def _accept(dialog: Dialog) -> None:
        logger.info(
            f"Alert with message: '{dialog.message}' and type: '{dialog.type}' "
            "detected. Accepting."
        )
        dialog.accept()

    page.on("dialog", _accept)
    logger.info("Alert accept handler set.")


def browser_name(page: Page) -> str:
    """Browser engine and version of a page, e.g. ``chromium v:120.0``."""
    browser = page.context.browser if page is not None else None
    if browser is None:
        return "Unknown Browser"
    return f"{browser.browser_type.name} v:{browser.version}"


def decode_base64(text: str) -> str:
    return base64.b64decode(text.encode("utf-8")).decode("utf-8")
