"""Helpers for locating iframes and checking their content."""

from typing import Optional

from playwright.sync_api import Error as PlaywrightError, Frame, Page, TimeoutError

from ..core.logging_config import get_logger


logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30000  # ms
RETRY_ATTEMPTS = 3
RETRY_DELAY = 2000  # ms


def switch_to_frame(page: Page, name_or_id: str) -> Optional[Frame]:
    """
    Find a frame by name or id, retrying while it loads.

    Returns:
        The loaded frame, or None after three failed attempts
    """
    logger.info(f"Attempting to switch to frame: {name_or_id}")
    selector = f"iframe[name='{name_or_id}'], iframe#{name_or_id}"

    for attempt in range(1, RETRY_ATTEMPTS + 1):
        try:
            page.wait_for_selector(selector, timeout=DEFAULT_TIMEOUT)
            frame = page.frame(name=name_or_id)
            if frame is None:
                handle = page.query_selector(selector)
                frame = handle.content_frame() if handle else None
            if frame is not None:
                frame.wait_for_load_state()
                logger.info(f"Switched to frame: {name_or_id}")
                return frame

            logger.warning(f"Frame {name_or_id} not found on attempt {attempt}")
            page.wait_for_timeout(RETRY_DELAY)
        except TimeoutError as e:
            logger.warning(
                f"Timeout while switching to frame {name_or_id} on attempt {attempt}: {e}"
            )
        except PlaywrightError as e:
            logger.warning(
                f"Playwright error while switching to frame {name_or_id} "
                f"on attempt {attempt}: {e}"
            )

    logger.error(f"Failed to switch to frame {name_or_id} after {RETRY_ATTEMPTS} attempts")
    return None


def verify_frame_content(page: Page, name_or_id: str, selector: str) -> bool:
    """Check that ``selector`` is visible inside the frame."""
    frame = switch_to_frame(page, name_or_id)
    if frame is None:
        return False
    try:
        frame.wait_for_selector(selector, timeout=DEFAULT_TIMEOUT)
        if frame.locator(selector).is_visible():
            logger.info(f"Verified content in frame: {name_or_id}")
            return True
    except TimeoutError as e:
        logger.error(f"Timeout while verifying frame content for {name_or_id}: {e}")
    except PlaywrightError as e:
        logger.error(f"Playwright error while verifying frame content for {name_or_id}: {e}")
    return False
