"""
Suite assembly and execution.

Builds suites from the Run Manager workbook, resolves test classes and runs
them through pytest with bounded parallelism and retries.
"""

from .builder import SuiteBuilder
from .discovery import DiscoveredClass, TestDiscovery
from .models import (
    RunResult,
    SuiteDefinition,
    SuiteResult,
    TestDefinition,
    TestOutcome,
)
from .runner import SuiteRunner

__all__ = [
    "SuiteBuilder",
    "DiscoveredClass",
    "TestDiscovery",
    "RunResult",
    "SuiteDefinition",
    "SuiteResult",
    "TestDefinition",
    "TestOutcome",
    "SuiteRunner",
]
