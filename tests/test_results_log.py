"""Unit tests for the CSV results log."""

import csv
from datetime import datetime

import pytest

from sheetrunner.core.exceptions import ConfigurationError
from sheetrunner.reporting.results_log import append_result


class TestAppendResult:
    def test_appends_rows(self, tmp_path):
        path = tmp_path / "logs" / "results.csv"

        append_result(path, "https://qa.example.com", "PASS", datetime(2024, 5, 1, 9, 0, 0, 123456))
        append_result(path, "https://qa.example.com", "FAIL", datetime(2024, 5, 2, 9, 0, 0))

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows == [
            ["Nuclear IT", "PASS", "2024-05-01 09:00:00.123", "https://qa.example.com"],
            ["Nuclear IT", "FAIL", "2024-05-02 09:00:00.000", "https://qa.example.com"],
        ]

    @pytest.mark.parametrize("path", [None, "", "  "])
    def test_path_required(self, path):
        with pytest.raises(ConfigurationError, match="CSV log path is not configured"):
            append_result(path, "app", "PASS")
