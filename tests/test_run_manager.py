"""Unit tests for the Run Manager reader and its row models."""

import logging

import pytest
from pydantic import ValidationError as PydanticValidationError

from sheetrunner.core.exceptions import DataSheetError
from sheetrunner.data.models import RunRow, SuiteSettings
from sheetrunner.data.run_manager import RunManager


class TestRunRow:
    """Test cases for RunRow."""

    def test_from_sheet(self):
        row = RunRow.from_sheet(
            {
                "Testcase ID": "LoginTest",
                "Description": "Logs in",
                "Suite Name": "Smoke",
                "Browser": "",
                "ExecutionStatus": "Yes",
                "__row__": 3,
            }
        )

        assert row.testcase_id == "LoginTest"
        assert row.browser == "chrome"
        assert row.row_number == 3
        assert row.is_complete is True

    def test_incomplete_row(self):
        assert RunRow(testcase_id="LoginTest").is_complete is False
        assert RunRow(suite_name="Smoke").is_complete is False

    def test_extra_fields_rejected(self):
        with pytest.raises(PydanticValidationError):
            RunRow(testcase_id="x", unknown="y")


class TestSuiteSettings:
    def test_thread_count_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            SuiteSettings(suite_name="Smoke", thread_count=0)


class TestRunManager:
    """Test cases for RunManager."""

    def test_missing_workbook(self, tmp_path):
        with pytest.raises(DataSheetError, match="RunManager.xlsx not found"):
            RunManager(tmp_path / "RunManager.xlsx")

    def test_scheduled_rows_only_yes(self, project_dir):
        rows = RunManager(project_dir / "RunManager.xlsx").scheduled_rows("Regression")

        assert [r.testcase_id for r in rows] == [
            "LoginTest",
            "CartTest",
            "suites.test_login.LoginTest",
        ]
        assert rows[1].browser == "chrome"
        assert [r.row_number for r in rows] == [2, 3, 5]

    def test_scheduled_rows_default_sheet(self, project_dir):
        rows = RunManager(project_dir / "RunManager.xlsx").scheduled_rows()

        assert len(rows) == 3

    def test_suite_settings(self, project_dir):
        settings = RunManager(project_dir / "RunManager.xlsx").suite_settings()

        assert set(settings) == {"Smoke", "Cross"}
        assert settings["Smoke"].thread_count == 2
        assert settings["Smoke"].folder_loc == "smoke"
        assert settings["Smoke"].suite_test_name == "Smoke Tests"
        assert settings["Cross"].thread_count == 1

    def test_suite_settings_defaults(self, tmp_path, workbook_writer):
        path = workbook_writer(
            tmp_path / "RunManager.xlsx",
            {
                "ParallelExecution": [
                    ["SuiteName", "ThreadCount", "FolderLoc", "SuiteTestName"],
                    ["Blank", None, None, None],
                    [None, 4, "orphan", None],
                    ["Negative", -3, None, None],
                ]
            },
        )

        settings = RunManager(path).suite_settings()

        assert set(settings) == {"Blank", "Negative"}
        assert settings["Blank"].thread_count == 1
        assert settings["Negative"].thread_count == 1

    def test_non_integer_thread_count_defaults_to_one(self, tmp_path, workbook_writer, caplog):
        path = workbook_writer(
            tmp_path / "RunManager.xlsx",
            {
                "ParallelExecution": [
                    ["SuiteName", "ThreadCount", "FolderLoc", "SuiteTestName"],
                    ["Nightly", "abc", "nightly", "Nightly Tests"],
                ]
            },
        )

        with caplog.at_level(logging.WARNING):
            settings = RunManager(path).suite_settings()

        assert settings["Nightly"].thread_count == 1
        assert settings["Nightly"].folder_loc == "nightly"
        assert "Invalid ThreadCount 'abc' for suite Nightly, using 1" in caplog.text

    def test_missing_parallel_sheet(self, tmp_path, workbook_writer):
        path = workbook_writer(tmp_path / "RunManager.xlsx", {"Regression": [["Testcase ID"]]})

        with pytest.raises(DataSheetError):
            RunManager(path).suite_settings()
