"""
Spreadsheet access for run workbooks.

Reads ``.xlsx`` sheets as lists of header-keyed rows with openpyxl and
supports the simple equality filters the run workbooks need.
"""

from datetime import date, datetime
from zipfile import BadZipFile
from pathlib import Path
from typing import Any, Dict, List, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..core.exceptions import DataSheetError
from ..core.logging_config import get_logger


ROW_NUMBER_KEY = "__row__"


def cell_text(value: Any) -> str:
    """Render a cell value the way it reads in the sheet."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


class WorkbookReader:
    """Read-only view over an Excel workbook."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = get_logger(__name__)

    def _open(self):
        if not self.path.is_file():
            raise DataSheetError(
                f"Workbook not found: {self.path}", workbook=str(self.path)
            )
        try:
            return load_workbook(self.path, read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile, OSError, KeyError, ValueError) as e:
            raise DataSheetError(
                f"Failed to open workbook {self.path}: {e}", workbook=str(self.path)
            )

    def sheet_names(self) -> List[str]:
        workbook = self._open()
        try:
            return list(workbook.sheetnames)
        finally:
            workbook.close()

    def rows(self, sheet: str, **filters: str) -> List[Dict[str, Any]]:
        """
        Return the rows of a sheet keyed by its header row.

        Keyword filters select rows whose column equals the given value,
        ignoring case and surrounding whitespace. Column names with spaces
        can be passed through a dict, e.g. ``rows("Run", **{"Suite Name": "A"})``.

        Args:
            sheet: Sheet name
            **filters: Column/value pairs that every returned row must match

        Returns:
            Matching rows in sheet order, each with its Excel row number
            stored under ``__row__``

        Raises:
            DataSheetError: If the workbook or sheet is missing, or a filter
                names an unknown column
        """
        workbook = self._open()
        try:
            if sheet not in workbook.sheetnames:
                raise DataSheetError(
                    f"Sheet '{sheet}' not found in {self.path.name}",
                    workbook=str(self.path),
                    sheet=sheet,
                )
            values = workbook[sheet].iter_rows(values_only=True)
            try:
                header = [cell_text(v) for v in next(values)]
            except StopIteration:
                self.logger.warning(f"Sheet '{sheet}' in {self.path.name} is empty")
                return []

            unknown = [name for name in filters if name not in header]
            if unknown:
                raise DataSheetError(
                    f"Unknown column(s) {unknown} in sheet '{sheet}'",
                    workbook=str(self.path),
                    sheet=sheet,
                )

            wanted = {k: str(v).strip().lower() for k, v in filters.items()}
            result = []
            for row_number, raw in enumerate(values, start=2):
                cells = [cell_text(v) for v in raw]
                if not any(cells):
                    continue
                row = {
                    name: cells[i] if i < len(cells) else ""
                    for i, name in enumerate(header)
                    if name
                }
                if all(row.get(k, "").lower() == v for k, v in wanted.items()):
                    row[ROW_NUMBER_KEY] = row_number
                    result.append(row)

            self.logger.debug(
                f"Read {len(result)} row(s) from {self.path.name}:{sheet}",
                extra={"metadata": {"sheet": sheet, "filters": filters}},
            )
            return result
        finally:
            workbook.close()
