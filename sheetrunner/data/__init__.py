"""Spreadsheet-backed run configuration and test data."""

from .models import RunRow, SuiteSettings
from .run_manager import RunManager
from .test_data import TestDataHandler
from .workbook import WorkbookReader

__all__ = [
    "RunRow",
    "SuiteSettings",
    "RunManager",
    "TestDataHandler",
    "WorkbookReader",
]
