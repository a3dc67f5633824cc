"""Per-test-case data lookup from the external test data workbook."""

from typing import Dict

from ..core.config import Config
from ..core.exceptions import ConfigurationError, DataSheetError
from ..core.logging_config import get_logger
from .workbook import ROW_NUMBER_KEY, WorkbookReader


TEST_DATA_SHEET = "TestData"
KEY_COLUMN = "TestCaseId"


class TestDataHandler:
    """Looks up the TestData row of a test case."""

    __test__ = False

    def __init__(self, config: Config):
        if not config.external_sheet_path:
            raise ConfigurationError(
                "external_sheet_path is not configured", key="external_sheet_path"
            )
        self.reader = WorkbookReader(config.external_sheet_path)
        self.logger = get_logger(__name__)

    def read(self, test_case_id: str) -> Dict[str, str]:
        """
        Return the test data of a test case as an ordered column/value dict.

        An unknown test case yields an empty dict.

        Raises:
            DataSheetError: If the workbook cannot be read
        """
        try:
            rows = self.reader.rows(TEST_DATA_SHEET, **{KEY_COLUMN: test_case_id})
        except (OSError, KeyError, ValueError) as e:
            raise DataSheetError(
                f"Failed to read test data for {test_case_id}: {e}",
                workbook=str(self.reader.path),
                sheet=TEST_DATA_SHEET,
            )

        if not rows:
            self.logger.warning(f"No test data found for test case: {test_case_id}")
            return {}

        data = {k: v for k, v in rows[0].items() if k != ROW_NUMBER_KEY}
        self.logger.debug(f"Loaded {len(data)} test data field(s) for {test_case_id}")
        return data
