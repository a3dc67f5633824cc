"""Reader for the Run Manager workbook."""

from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.exceptions import DataSheetError
from ..core.logging_config import get_logger
from .models import RunRow, SuiteSettings
from .workbook import WorkbookReader


PARALLEL_SHEET = "ParallelExecution"


class RunManager:
    """
    Access to the Run Manager workbook.

    The workbook holds one run sheet per configuration (for example
    ``Regression``) listing the test cases to execute, and a
    ``ParallelExecution`` sheet with per-suite settings.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = get_logger(__name__)
        if not self.path.is_file():
            raise DataSheetError(
                f"RunManager.xlsx not found at {self.path}", workbook=str(self.path)
            )
        self.reader = WorkbookReader(self.path)

    def suite_settings(self) -> Dict[str, SuiteSettings]:
        """Load ParallelExecution settings keyed by suite name."""
        settings: Dict[str, SuiteSettings] = {}
        for row in self.reader.rows(PARALLEL_SHEET):
            name = row.get("SuiteName", "").strip()
            if not name:
                continue

            raw_count = row.get("ThreadCount", "").strip() or "1"
            try:
                thread_count = max(1, int(raw_count))
            except ValueError:
                self.logger.warning(
                    f"Invalid ThreadCount '{raw_count}' for suite {name}, using 1"
                )
                thread_count = 1

            settings[name] = SuiteSettings(
                suite_name=name,
                thread_count=thread_count,
                folder_loc=row.get("FolderLoc", ""),
                suite_test_name=row.get("SuiteTestName", ""),
            )

        self.logger.info(
            f"Loaded settings for {len(settings)} suite(s)",
            extra={"metadata": {"suites": list(settings)}},
        )
        return settings

    def scheduled_rows(self, sheet: Optional[str] = None) -> List[RunRow]:
        """Rows of the run sheet whose ExecutionStatus is Yes."""
        sheet = sheet or "Regression"
        rows = [
            RunRow.from_sheet(row)
            for row in self.reader.rows(sheet, ExecutionStatus="Yes")
        ]
        self.logger.info(f"Found {len(rows)} scheduled row(s) in sheet '{sheet}'")
        return rows
