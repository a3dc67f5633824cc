"""
Thread-scoped step logging for the HTML report.

Each test thread has one active report entry. Page objects and tests log
PASS/FAIL/INFO/WARN steps against it; logging a FAIL step also fails the
test.
"""

import base64
import threading
from datetime import datetime
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError, Page

from ..core.logging_config import get_logger
from .models import ReportStep, StepStatus, TestReportEntry, TestStatus


logger = get_logger(__name__)

OUTCOME_STEPS = {
    TestStatus.PASSED: StepStatus.PASS,
    TestStatus.FAILED: StepStatus.FAIL,
    TestStatus.SKIPPED: StepStatus.SKIP,
    TestStatus.ERROR: StepStatus.FAIL,
}


class StepFailure(AssertionError):
    """Raised when a FAIL step is logged."""


class StepLog:
    """Per-thread report entries plus the list of finished ones."""

    def __init__(self):
        self._local = threading.local()
        self._lock = threading.Lock()
        self._finished: List[TestReportEntry] = []

    def start_test(
        self,
        name: str,
        description: str = "",
        suite: str = "",
        browser: str = "",
        node_id: str = "",
        attempt: int = 1,
    ) -> TestReportEntry:
        logger.info(f"Starting report entry: {name}", extra={"test_name": name})
        entry = TestReportEntry(
            name=name,
            description=description,
            suite=suite,
            browser=browser,
            node_id=node_id,
            attempt=attempt,
        )
        self._local.entry = entry
        return entry

    def current(self) -> Optional[TestReportEntry]:
        return getattr(self._local, "entry", None)

    def _add(self, entry: TestReportEntry, status: StepStatus, message: str, screenshot=None):
        entry.steps.append(
            ReportStep(status=status, message=message, screenshot=screenshot)
        )

    def log_result(self, kind: str, message: str) -> None:
        """
        Record a step on the current test.

        Args:
            kind: PASS, FAIL, INFO, WARN or SKIP (case-insensitive)
            message: Step description

        Raises:
            StepFailure: When ``kind`` is FAIL
        """
        entry = self.current()
        if entry is None:
            logger.error(
                f"Cannot log test result, no active test on "
                f"{threading.current_thread().name}"
            )
            return

        entry.step_count += 1
        try:
            status = StepStatus(kind.upper())
        except ValueError:
            logger.warning(f"Unsupported log type: {kind}")
            return

        self._add(entry, status, message)
        if status is StepStatus.FAIL:
            logger.error(f"TEST FAIL: {message}", extra={"test_name": entry.name})
            raise StepFailure(message)
        if status is StepStatus.WARN:
            logger.warning(f"TEST WARN: {message}", extra={"test_name": entry.name})
        else:
            logger.info(f"TEST {status.value}: {message}", extra={"test_name": entry.name})

    def take_screenshot(self, page: Optional[Page], status: str, message: str) -> None:
        """Attach a full-page screenshot to the current test."""
        if page is None:
            logger.error("Cannot take screenshot, page is not available")
            return
        entry = self.current()
        if entry is None:
            logger.error("Cannot take screenshot, no active test")
            return

        try:
            step_status = StepStatus(status.upper())
        except ValueError:
            step_status = StepStatus.INFO

        try:
            image = base64.b64encode(page.screenshot(full_page=True)).decode("ascii")
        except PlaywrightError as e:
            logger.error(f"Failed to take screenshot: {e}")
            self._add(entry, StepStatus.FAIL, f"Screenshot capture failed: {e}")
            return

        self._add(entry, step_status, message, screenshot=image)
        logger.info(f"Screenshot captured for status: {step_status.value}")

    def record_outcome(
        self, status: TestStatus, message: str, error: Optional[str] = None
    ) -> None:
        """Set the final status of the current test and log it as a step."""
        entry = self.current()
        if entry is None:
            return
        entry.status = status
        entry.error_message = error
        entry.step_count += 1
        self._add(entry, OUTCOME_STEPS[status], message)
        if error:
            self._add(entry, StepStatus.FAIL, error)

    def end_test(self) -> Optional[TestReportEntry]:
        """Close the current entry, logging its total step count."""
        entry = self.current()
        if entry is None:
            logger.warning("No active test to end")
            return None

        self._add(entry, StepStatus.INFO, f"Total Steps: {entry.step_count}")
        entry.ended_at = datetime.now()
        logger.info(f"Test '{entry.name}' ended with {entry.step_count} steps.")
        with self._lock:
            self._finished.append(entry)
        self._local.entry = None
        return entry

    def finished(self) -> List[TestReportEntry]:
        with self._lock:
            return list(self._finished)

    def reset(self) -> None:
        with self._lock:
            self._finished.clear()
        self._local.entry = None


step_log = StepLog()


def log_result(kind: str, message: str) -> None:
    step_log.log_result(kind, message)


def take_screenshot(page: Optional[Page], status: str, message: str) -> None:
    step_log.take_screenshot(page, status, message)
