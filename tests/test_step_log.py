"""Unit tests for the thread-scoped step log."""

import base64
import threading
from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from sheetrunner.reporting.models import StepStatus, TestStatus
from sheetrunner.reporting.step_log import StepFailure, StepLog


@pytest.fixture
def log():
    return StepLog()


class TestStepLog:
    """Test cases for StepLog."""

    def test_start_test_creates_entry(self, log):
        entry = log.start_test("LoginTest", "Logs in", "Smoke", "chrome", "a::b", 2)

        assert log.current() is entry
        assert entry.attempt == 2
        assert entry.suite == "Smoke"

    def test_log_result_without_active_test_is_ignored(self, log):
        log.log_result("PASS", "nothing to attach to")

        assert log.current() is None

    def test_log_result_records_steps(self, log):
        entry = log.start_test("LoginTest")

        log.log_result("pass", "clicked")
        log.log_result("INFO", "note")
        log.log_result("Warn", "careful")

        assert [s.status for s in entry.steps] == [
            StepStatus.PASS,
            StepStatus.INFO,
            StepStatus.WARN,
        ]
        assert entry.step_count == 3

    def test_unsupported_kind_counts_but_adds_no_step(self, log):
        entry = log.start_test("LoginTest")

        log.log_result("DEBUG", "ignored")

        assert entry.steps == []
        assert entry.step_count == 1

    def test_fail_raises_step_failure(self, log):
        entry = log.start_test("LoginTest")

        with pytest.raises(StepFailure, match="button missing"):
            log.log_result("FAIL", "button missing")

        assert entry.steps[-1].status is StepStatus.FAIL
        assert isinstance(StepFailure("x"), AssertionError)

    def test_take_screenshot_embeds_base64(self, log, mock_page):
        entry = log.start_test("LoginTest")

        log.take_screenshot(mock_page, "pass", "Logged in")

        step = entry.steps[-1]
        assert step.status is StepStatus.PASS
        assert base64.b64decode(step.screenshot) == b"png-bytes"
        mock_page.screenshot.assert_called_once_with(full_page=True)
        assert entry.screenshots == [step]

    def test_take_screenshot_failure_logged_as_step(self, log):
        entry = log.start_test("LoginTest")
        page = MagicMock()
        page.screenshot.side_effect = PlaywrightError("page closed")

        log.take_screenshot(page, "FAIL", "Test Failed")

        assert entry.steps[-1].status is StepStatus.FAIL
        assert "Screenshot capture failed" in entry.steps[-1].message

    def test_take_screenshot_without_page(self, log):
        entry = log.start_test("LoginTest")

        log.take_screenshot(None, "FAIL", "Test Failed")

        assert entry.steps == []

    def test_record_outcome_and_end_test(self, log):
        entry = log.start_test("LoginTest")
        log.log_result("PASS", "step one")

        log.record_outcome(TestStatus.FAILED, "Test Failed: LoginTest", error="boom")
        ended = log.end_test()

        assert ended is entry
        assert entry.status is TestStatus.FAILED
        assert entry.error_message == "boom"
        assert entry.steps[-1].message == "Total Steps: 2"
        assert entry.ended_at is not None
        assert log.current() is None
        assert log.finished() == [entry]

    def test_end_test_without_active(self, log):
        assert log.end_test() is None

    def test_entries_are_thread_scoped(self, log):
        log.start_test("MainThreadTest")
        seen = {}

        def worker():
            seen["before"] = log.current()
            log.start_test("WorkerTest")
            log.log_result("PASS", "worker step")
            log.end_test()

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert seen["before"] is None
        assert log.current().name == "MainThreadTest"
        assert [e.name for e in log.finished()] == ["WorkerTest"]

    def test_reset(self, log):
        log.start_test("LoginTest")
        log.end_test()

        log.reset()

        assert log.finished() == []
