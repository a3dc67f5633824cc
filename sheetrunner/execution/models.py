"""
Data models for suite assembly and execution.

Defines Pydantic models for the suites built from the Run Manager and the
outcomes collected while running them.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, validator

from ..reporting.models import TestReportEntry, TestStatus


class TestDefinition(BaseModel):
    """A test scheduled inside a suite."""

    __test__ = False

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Testcase ID from the run sheet")
    target: str = Field(..., description="pytest node id of the test class")
    class_name: str = Field(..., description="Fully qualified class name")
    parameters: Dict[str, str] = Field(default_factory=dict)
    row_number: int = Field(0, ge=0)

    @property
    def browser(self) -> str:
        return self.parameters.get("browser", "chrome")

    @property
    def description(self) -> str:
        return self.parameters.get("Description", "")


class SuiteDefinition(BaseModel):
    """A suite whose tests run in parallel."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    parallel: str = Field("tests")
    thread_count: int = Field(1, ge=1)
    parameters: Dict[str, str] = Field(default_factory=dict)
    tests: List[TestDefinition] = Field(default_factory=list)

    @validator("parallel")
    def validate_parallel(cls, v):
        if v != "tests":
            raise ValueError("Suites only run tests in parallel")
        return v


class TestOutcome(BaseModel):
    """Final outcome of a test after retries."""

    __test__ = False

    name: str
    suite: str
    status: TestStatus
    attempts: int = Field(1, ge=1)
    duration: float = Field(0.0, ge=0)
    error_message: Optional[str] = None
    reports: List[TestReportEntry] = Field(
        default_factory=list, description="One entry per attempt"
    )

    @property
    def passed(self) -> bool:
        return self.status == TestStatus.PASSED


class SuiteResult(BaseModel):
    suite: SuiteDefinition
    outcomes: List[TestOutcome] = Field(default_factory=list)


class RunResult(BaseModel):
    """Result of executing every suite of a run."""

    run_id: str
    name: str = "Regression"
    started_at: datetime
    completed_at: Optional[datetime] = None
    suites: List[SuiteResult] = Field(default_factory=list)

    @property
    def outcomes(self) -> List[TestOutcome]:
        return [o for suite in self.suites for o in suite.outcomes]

    @property
    def success(self) -> bool:
        outcomes = self.outcomes
        return bool(outcomes) and all(o.passed for o in outcomes)
