"""
Data models for Run Manager rows.

Defines Pydantic models for the rows of the run sheet and the
ParallelExecution sheet.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field, ConfigDict, validator


class RunRow(BaseModel):
    """A scheduled row from the run sheet."""

    model_config = ConfigDict(extra="forbid")

    testcase_id: str = Field("", description="Test class name or dotted suffix")
    description: str = Field("", description="Free-text test description")
    suite_name: str = Field("", description="Suite the test belongs to")
    browser: str = Field("chrome", description="Browser to run the test on")
    execution_status: str = Field("", description="Yes when the row is scheduled")
    row_number: int = Field(0, ge=0, description="Excel row number, header is 1")

    @validator("browser")
    def default_browser(cls, v):
        """Blank browser cells run on chrome."""
        return v.strip() or "chrome"

    @property
    def is_complete(self) -> bool:
        return bool(self.testcase_id.strip() and self.suite_name.strip())

    @classmethod
    def from_sheet(cls, row: Dict[str, Any]) -> "RunRow":
        return cls(
            testcase_id=row.get("Testcase ID", ""),
            description=row.get("Description", ""),
            suite_name=row.get("Suite Name", ""),
            browser=row.get("Browser", ""),
            execution_status=row.get("ExecutionStatus", ""),
            row_number=row.get("__row__", 0),
        )


class SuiteSettings(BaseModel):
    """Per-suite settings from the ParallelExecution sheet."""

    model_config = ConfigDict(extra="forbid")

    suite_name: str = Field(..., min_length=1)
    thread_count: int = Field(1, ge=1, description="Parallel tests within the suite")
    folder_loc: str = Field("", description="Folder location parameter")
    suite_test_name: str = Field("", description="Suite test name parameter")
