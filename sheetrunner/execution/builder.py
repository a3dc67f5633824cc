"""Builds suite definitions from the Run Manager workbook."""

from typing import Dict, List, Optional

from ..core.logging_config import get_logger
from ..data.run_manager import RunManager
from .discovery import TestDiscovery
from .models import SuiteDefinition, TestDefinition


class SuiteBuilder:
    """
    Assembles suites from the scheduled rows of a run sheet.

    Rows are grouped by Suite Name in the order suites first appear. Each
    suite takes its thread count and parameters from the ParallelExecution
    sheet; rows whose test class cannot be found are skipped.
    """

    def __init__(self, run_manager: RunManager, discovery: TestDiscovery):
        self.run_manager = run_manager
        self.discovery = discovery
        self.logger = get_logger(__name__)

    def build(self, sheet: Optional[str] = None) -> List[SuiteDefinition]:
        settings = self.run_manager.suite_settings()
        rows = self.run_manager.scheduled_rows(sheet)
        if not rows:
            self.logger.warning(f"No scheduled test cases found in sheet '{sheet}'")
            return []

        suites: Dict[str, SuiteDefinition] = {}
        for row in rows:
            if not row.is_complete:
                self.logger.warning(
                    f"Skipping row {row.row_number}: Testcase ID and Suite Name are required"
                )
                continue

            suite_name = row.suite_name.strip()
            suite = suites.get(suite_name)
            if suite is None:
                suite_settings = settings.get(suite_name)
                suite = SuiteDefinition(
                    name=suite_name,
                    thread_count=suite_settings.thread_count if suite_settings else 1,
                    parameters={
                        "folderpath": suite_settings.folder_loc if suite_settings else "",
                        "suiteTestName": (
                            suite_settings.suite_test_name if suite_settings else ""
                        ),
                    },
                )
                suites[suite_name] = suite
                self.logger.info(
                    f"Created suite {suite_name} with {suite.thread_count} thread(s)"
                )

            found = self.discovery.resolve(row.testcase_id)
            if found is None:
                self.logger.error(
                    f"Test class not found for Testcase ID '{row.testcase_id}' "
                    f"(row {row.row_number}), skipping"
                )
                continue

            suite.tests.append(
                TestDefinition(
                    name=row.testcase_id.strip(),
                    target=found.node_id,
                    class_name=found.qualified_name,
                    parameters={
                        "browser": row.browser,
                        "Description": row.description,
                    },
                    row_number=row.row_number,
                )
            )
            self.logger.debug(
                f"Added {found.qualified_name} to suite {suite_name}",
                extra={"test_name": row.testcase_id, "suite": suite_name},
            )

        built = [suite for suite in suites.values() if suite.tests]
        if not built:
            self.logger.warning("No executable suites were built")
        else:
            self.logger.info(
                f"Built {len(built)} suite(s) with "
                f"{sum(len(s.tests) for s in built)} test(s)"
            )
        return built
