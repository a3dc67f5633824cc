"""
Pytest configuration and shared fixtures for SheetRunner tests.

Provides a scratch project with the Run Manager and test data workbooks,
a workbook writer and mock Playwright objects.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from openpyxl import Workbook

from sheetrunner.core.config import Config, EmailSettings
from sheetrunner.reporting.step_log import step_log


pytest_plugins = ["pytester"]


ENV_VARS = [
    "CI",
    "SHEETRUNNER_HEADLESS",
    "SHEETRUNNER_LOG_LEVEL",
    "SHEETRUNNER_APPLICATION_URL",
    "SHEETRUNNER_RETRY_COUNT",
    "SMTP_USERNAME",
    "SMTP_PASSWORD",
    "OPENAI_API_KEY",
]

RUN_HEADER = ["Testcase ID", "Description", "Suite Name", "Browser", "ExecutionStatus"]
PARALLEL_HEADER = ["SuiteName", "ThreadCount", "FolderLoc", "SuiteTestName"]

UI_TEST_MODULE = '''
from sheetrunner.plugin import UITest


class LoginTest(UITest):
    """Logs in."""

    def test_login(self):
        pass


class CartTest(UITest):
    def test_cart(self):
        pass
'''


def write_workbook(path: Path, sheets) -> Path:
    """Write a workbook from a mapping of sheet name to rows."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        sheet = workbook.create_sheet(title=title)
        for row in rows:
            sheet.append(row)
    workbook.save(path)
    return path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host environment variables out of Config."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_step_log():
    step_log.reset()
    yield
    step_log.reset()


@pytest.fixture
def workbook_writer():
    return write_workbook


@pytest.fixture
def project_dir(tmp_path):
    """Scratch project with workbooks, a tests folder and a config file."""
    write_workbook(
        tmp_path / "RunManager.xlsx",
        {
            "Regression": [
                RUN_HEADER,
                ["LoginTest", "Logs in", "Smoke", "chrome", "Yes"],
                ["CartTest", "Adds to cart", "Smoke", "", "yes"],
                ["LoginTest", "Not scheduled", "Smoke", "firefox", "No"],
                ["suites.test_login.LoginTest", "Firefox login", "Cross", "firefox", "Yes"],
            ],
            "ParallelExecution": [
                PARALLEL_HEADER,
                ["Smoke", 2, "smoke", "Smoke Tests"],
                ["Cross", "abc", "", ""],
            ],
        },
    )
    write_workbook(
        tmp_path / "TestData.xlsx",
        {
            "TestData": [
                ["TestCaseId", "Username", "Password"],
                ["LoginTest", "standard_user", "secret_sauce"],
                ["CartTest", "problem_user", 1234],
            ]
        },
    )

    suites = tmp_path / "ui_tests" / "suites"
    suites.mkdir(parents=True)
    (tmp_path / "ui_tests" / "__init__.py").write_text("")
    (suites / "__init__.py").write_text("")
    (suites / "test_login.py").write_text(UI_TEST_MODULE)

    (tmp_path / "sheetrunner.yaml").write_text(
        "application_url: https://qa.example.com/\n"
        "test_data_source: excel\n"
        "external_sheet_path: TestData.xlsx\n"
        "report_path: reports\n"
        "email:\n"
        "  enabled: false\n"
    )
    return tmp_path


@pytest.fixture
def project_config(project_dir):
    """Config pointing at the scratch project."""
    return Config(
        application_url="https://qa.example.com/",
        external_sheet_path=project_dir / "TestData.xlsx",
        config_path=project_dir / "sheetrunner.yaml",
        project_root=project_dir,
        run_manager_path=project_dir / "RunManager.xlsx",
        tests_root=project_dir / "ui_tests",
        report_path=project_dir / "reports",
        logs_dir=project_dir / "logs",
        email=EmailSettings(enabled=False),
    )


@pytest.fixture
def email_settings():
    return EmailSettings(
        enabled=True,
        smtp_host="smtp.example.com",
        smtp_port=587,
        username="bot@example.com",
        password="secret",
        sender="bot@example.com",
        recipients=["qa@example.com", "lead@example.com"],
    )


@pytest.fixture
def mock_page():
    """Mock Playwright page."""
    page = MagicMock()
    page.screenshot.return_value = b"png-bytes"
    page.context.pages = [page]
    return page


@pytest.fixture
def mock_locator():
    return MagicMock()
