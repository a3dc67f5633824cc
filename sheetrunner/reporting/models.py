"""
Data models for test reports.

Defines Pydantic models for the per-test step log written by the pytest
plugin and the run-level report rendered to HTML and JSON.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TestStatus(Enum):
    """Final status of a test."""

    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    ERROR = "error"


class StepStatus(Enum):
    """Status of a single logged step."""

    PASS = "PASS"
    FAIL = "FAIL"
    INFO = "INFO"
    WARN = "WARN"
    SKIP = "SKIP"


class ReportStep(BaseModel):
    """One logged step, optionally with a base64 PNG screenshot."""

    model_config = ConfigDict(extra="forbid")

    status: StepStatus
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    screenshot: Optional[str] = Field(None, description="Base64 encoded PNG")


class TestReportEntry(BaseModel):
    """Everything recorded for one attempt of one test."""

    __test__ = False

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Testcase ID from the run sheet")
    description: str = Field("")
    suite: str = Field("")
    browser: str = Field("")
    node_id: str = Field("", description="pytest node id of the test method")
    attempt: int = Field(1, ge=1)
    status: Optional[TestStatus] = Field(None)
    error_message: Optional[str] = Field(None)
    steps: List[ReportStep] = Field(default_factory=list)
    step_count: int = Field(0, ge=0, description="Number of logged results")
    started_at: datetime = Field(default_factory=datetime.now)
    ended_at: Optional[datetime] = Field(None)

    @property
    def duration(self) -> float:
        if self.ended_at is None:
            return 0.0
        return (self.ended_at - self.started_at).total_seconds()

    @property
    def screenshots(self) -> List[ReportStep]:
        return [step for step in self.steps if step.screenshot]


class RunSummary(BaseModel):
    """Aggregate counts for a run."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    errors: int = 0

    @property
    def pass_rate(self) -> float:
        """Percentage of passed tests, 0.0 for an empty run."""
        if self.total == 0:
            return 0.0
        return self.passed * 100.0 / self.total

    @classmethod
    def from_statuses(cls, statuses: List[TestStatus]) -> "RunSummary":
        return cls(
            total=len(statuses),
            passed=statuses.count(TestStatus.PASSED),
            failed=statuses.count(TestStatus.FAILED),
            skipped=statuses.count(TestStatus.SKIPPED),
            errors=statuses.count(TestStatus.ERROR),
        )


class SuiteReport(BaseModel):
    """Report section for one suite."""

    name: str
    thread_count: int = 1
    parameters: Dict[str, str] = Field(default_factory=dict)
    tests: List[TestReportEntry] = Field(default_factory=list)
    summary: RunSummary = Field(default_factory=RunSummary)


class RunReport(BaseModel):
    """Complete execution report."""

    run_id: str
    name: str = Field("Regression", description="Run configuration sheet")
    started_at: datetime
    completed_at: datetime
    suites: List[SuiteReport] = Field(default_factory=list)
    summary: RunSummary = Field(default_factory=RunSummary)
    environment: Dict[str, Any] = Field(default_factory=dict)
    insights: Optional[str] = Field(None)

    @property
    def duration(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()
