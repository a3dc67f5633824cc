"""
pytest plugin that drives SheetRunner UI tests.

Loaded with ``-p sheetrunner.plugin``. It opens a browser for every test
method on the worker's thread, records report steps, takes a screenshot
when a test fails and writes the report entries to ``--sr-result-file`` at
the end of the session.
"""

import inspect
import json
from pathlib import Path
from typing import Dict, Optional

import pytest
from playwright.sync_api import Error as PlaywrightError, Page

from .browser.session import sessions
from .core.config import Config, load_config
from .core.exceptions import ConfigurationError
from .core.logging_config import get_logger
from .data.test_data import TestDataHandler
from .reporting.models import TestStatus
from .reporting.step_log import StepFailure, step_log


logger = get_logger(__name__)

ENVIRONMENTS = (("dev", "DEV"), ("qa", "QA"), ("test", "TEST"))


def classify_environment(url: str) -> str:
    """Name the environment an application URL points at."""
    lowered = url.lower()
    for marker, name in ENVIRONMENTS:
        if marker in lowered:
            return name
    return "PROD"


class UITest:
    """
    Base class for browser tests.

    Subclasses are collected by pytest whatever their name. Page objects are
    created in ``setup_pages``, which runs before every test method with a
    fresh page.
    """

    page: Page
    config: Config

    @pytest.fixture(autouse=True)
    def _bind_browser(self, page, sr_config):
        self.page = page
        self.config = sr_config
        self.setup_pages(page)
        yield

    def setup_pages(self, page: Page) -> None:
        """Create the page objects used by the test."""

    def launch_url(self) -> None:
        """Open the configured application URL."""
        try:
            url = self.config.require("application_url")
        except ConfigurationError as e:
            step_log.log_result("FAIL", e.message)
            return
        try:
            self.page.goto(url, wait_until="domcontentloaded")
        except PlaywrightError as e:
            step_log.log_result("FAIL", f"Failed to launch URL {url}: {e}")
            return
        step_log.log_result(
            "INFO", f"Launched URL in {classify_environment(url)} Environment: {url}"
        )


def pytest_addoption(parser):
    group = parser.getgroup("sheetrunner", "SheetRunner UI tests")
    group.addoption("--sr-config", default=None, help="Path to sheetrunner.yaml")
    group.addoption("--sr-browser", default="chromium", help="Browser to launch")
    group.addoption("--sr-description", default="", help="Test description")
    group.addoption("--sr-suite", default="", help="Suite name")
    group.addoption("--sr-test-name", default="", help="Testcase ID")
    group.addoption("--sr-attempt", type=int, default=1, help="Attempt number")
    group.addoption("--sr-result-file", default=None, help="JSON result output")
    group.addoption(
        "--sr-headless",
        choices=["true", "false"],
        default=None,
        help="Override headless mode",
    )


def pytest_pycollect_makeitem(collector, name, obj):
    if (
        inspect.isclass(obj)
        and issubclass(obj, UITest)
        and obj is not UITest
        and not name.startswith("_")
    ):
        return pytest.Class.from_parent(collector, name=name)
    return None


def _is_ui_test(item) -> bool:
    cls = getattr(item, "cls", None)
    return cls is not None and issubclass(cls, UITest)


def _test_name(item) -> str:
    return item.config.getoption("--sr-test-name") or item.cls.__name__


@pytest.fixture(scope="session")
def sr_config(pytestconfig) -> Config:
    """Environment configuration; a missing or bad file aborts the session."""
    return load_config(pytestconfig.getoption("--sr-config"))


@pytest.fixture
def browser_session(pytestconfig, sr_config):
    """Open a browser on the current thread for one test method."""
    headless_option = pytestconfig.getoption("--sr-headless")
    headless = (
        headless_option == "true"
        if headless_option is not None
        else sr_config.is_headless
    )
    page = sessions.open(pytestconfig.getoption("--sr-browser"), headless=headless)
    try:
        yield page
    finally:
        sessions.close()


@pytest.fixture
def page(browser_session) -> Page:
    return browser_session


@pytest.fixture
def step_logger():
    return step_log


@pytest.fixture
def test_data(request, sr_config) -> Dict[str, str]:
    """TestData row of the running test case."""
    name = request.config.getoption("--sr-test-name")
    if not name and request.cls is not None:
        name = request.cls.__name__
    return TestDataHandler(sr_config).read(name)


def pytest_runtest_setup(item):
    if not _is_ui_test(item):
        return
    description = item.config.getoption("--sr-description") or (
        inspect.getdoc(item.cls) or ""
    )
    step_log.start_test(
        _test_name(item),
        description=description,
        suite=item.config.getoption("--sr-suite"),
        browser=item.config.getoption("--sr-browser"),
        node_id=item.nodeid,
        attempt=item.config.getoption("--sr-attempt"),
    )


def _failure_text(report) -> str:
    crash = getattr(report.longrepr, "reprcrash", None)
    if crash is not None:
        return crash.message
    return str(report.longrepr).strip().splitlines()[-1] if report.longrepr else ""


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if not _is_ui_test(item) or step_log.current() is None:
        return

    name = _test_name(item)
    if report.when == "teardown":
        entry = step_log.current()
        if entry.status is None:
            step_log.record_outcome(TestStatus.PASSED, f"Test Passed: {name}")
        step_log.end_test()
        return

    if report.skipped:
        logger.warning(f"SKIPPED - {name}")
        step_log.record_outcome(TestStatus.SKIPPED, f"Test Skipped: {name}")
    elif report.failed:
        error = _failure_text(report)
        logger.error(f"FAIL - {name} : {error}")
        step_log.take_screenshot(sessions.page(), "FAIL", "Test Failed")
        status = TestStatus.FAILED if report.when == "call" else TestStatus.ERROR
        if call.excinfo is not None and call.excinfo.errisinstance(StepFailure):
            status = TestStatus.FAILED
        step_log.record_outcome(status, f"Test Failed: {name}", error=error)
    elif report.when == "call":
        logger.info(f"PASS - {name}")
        step_log.record_outcome(TestStatus.PASSED, f"Test Passed: {name}")


def write_results(path: Optional[str]) -> Optional[Path]:
    """Write finished report entries as a JSON list."""
    if not path:
        return None
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    entries = [entry.model_dump(mode="json") for entry in step_log.finished()]
    with open(target, "w", encoding="utf-8") as f:
        json.dump(entries, f, indent=2)
    logger.info(f"Wrote {len(entries)} report entr(ies) to {target}")
    return target


def pytest_sessionfinish(session, exitstatus):
    write_results(session.config.getoption("--sr-result-file"))
