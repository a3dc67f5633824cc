"""
Suite execution with bounded parallelism and retries.

Every test runs in its own pytest subprocess with the SheetRunner plugin
loaded. Tests of a suite run concurrently up to the suite's thread count;
suites run one after another.
"""

import asyncio
import json
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError as ModelValidationError

from ..core.config import Config
from ..core.exceptions import TestExecutionError
from ..core.logging_config import get_logger, log_performance
from ..reporting.models import TestReportEntry, TestStatus
from .models import RunResult, SuiteDefinition, SuiteResult, TestDefinition, TestOutcome


# pytest exit codes
EXIT_OK = 0
EXIT_TESTS_FAILED = 1


def status_from_entries(entries: List[TestReportEntry]) -> Optional[TestStatus]:
    """Combine the statuses of the test methods of one attempt."""
    statuses = [e.status for e in entries if e.status is not None]
    if not statuses:
        return None
    for status in (TestStatus.ERROR, TestStatus.FAILED):
        if status in statuses:
            return status
    if all(s == TestStatus.SKIPPED for s in statuses):
        return TestStatus.SKIPPED
    return TestStatus.PASSED


class SuiteRunner:
    """
    Runs suites of UI tests through pytest.

    A failed test is re-run up to ``retry_count`` more times; the report
    entries of every attempt are kept so failure screenshots of earlier
    attempts still reach the report.
    """

    def __init__(
        self,
        config: Config,
        run_id: str,
        results_dir: Optional[Path] = None,
    ):
        self.config = config
        self.run_id = run_id
        self.results_dir = Path(results_dir or config.report_path / "results")
        self.logger = get_logger(__name__, run_id=run_id)

    def build_command(
        self, suite: SuiteDefinition, test: TestDefinition, attempt: int, result_file: Path
    ) -> List[str]:
        command = [
            sys.executable,
            "-m",
            "pytest",
            test.target,
            "-p",
            "sheetrunner.plugin",
            "-p",
            "no:cacheprovider",
            "-q",
            "--sr-browser",
            test.browser,
            "--sr-description",
            test.description,
            "--sr-suite",
            suite.name,
            "--sr-test-name",
            test.name,
            "--sr-attempt",
            str(attempt),
            "--sr-result-file",
            str(result_file),
        ]
        if self.config.config_path:
            command.extend(["--sr-config", str(self.config.config_path)])
        if self.config.headless_mode is not None:
            command.extend(
                ["--sr-headless", "true" if self.config.headless_mode else "false"]
            )
        return command

    def _result_file(self, suite: SuiteDefinition, test: TestDefinition, attempt: int) -> Path:
        safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in f"{suite.name}-{test.name}")
        return self.results_dir / f"{safe}-attempt{attempt}.json"

    def _read_results(self, result_file: Path) -> List[TestReportEntry]:
        if not result_file.is_file():
            return []
        try:
            with open(result_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [TestReportEntry.model_validate(item) for item in data]
        except (OSError, ValueError, ModelValidationError) as e:
            self.logger.warning(f"Unreadable result file {result_file}: {e}")
            return []

    async def _run_process(self, command: List[str], test_name: str) -> Tuple[int, str]:
        process = await asyncio.create_subprocess_exec(
            *command,
            cwd=str(self.config.project_root),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        try:
            output, _ = await asyncio.wait_for(
                process.communicate(), timeout=self.config.test_timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise TestExecutionError(
                f"Test timed out after {self.config.test_timeout}s",
                test_name=test_name,
                exit_code=-1,
            )
        return process.returncode, output.decode("utf-8", errors="replace")

    async def run_attempt(
        self, suite: SuiteDefinition, test: TestDefinition, attempt: int
    ) -> Tuple[TestStatus, List[TestReportEntry], Optional[str]]:
        """Run one attempt of a test and classify its result."""
        result_file = self._result_file(suite, test, attempt)
        result_file.parent.mkdir(parents=True, exist_ok=True)
        if result_file.exists():
            result_file.unlink()

        command = self.build_command(suite, test, attempt, result_file)
        self.logger.debug(f"Executing: {' '.join(command)}", extra={"test_name": test.name})

        try:
            exit_code, output = await self._run_process(command, test.name)
        except TestExecutionError as e:
            return TestStatus.ERROR, self._read_results(result_file), e.message
        except OSError as e:
            return TestStatus.ERROR, [], f"Failed to start pytest: {e}"

        entries = self._read_results(result_file)
        status = status_from_entries(entries)
        error = None
        if status is None:
            status = (
                TestStatus.FAILED if exit_code == EXIT_TESTS_FAILED else TestStatus.ERROR
            )
            if exit_code == EXIT_OK:
                status = TestStatus.PASSED
        if status != TestStatus.PASSED:
            errors = [e.error_message for e in entries if e.error_message]
            tail = "\n".join(output.strip().splitlines()[-20:])
            error = errors[-1] if errors else (tail or f"pytest exited with {exit_code}")
        return status, entries, error

    async def run_test(
        self, suite: SuiteDefinition, test: TestDefinition, semaphore: asyncio.Semaphore
    ) -> TestOutcome:
        async with semaphore:
            start = time.time()
            reports: List[TestReportEntry] = []
            max_attempts = self.config.retry_count + 1
            attempt = 0
            status, error = TestStatus.ERROR, None

            while attempt < max_attempts:
                attempt += 1
                self.logger.info(
                    f"Running {test.name} on {test.browser} (attempt {attempt}/{max_attempts})",
                    extra={"test_name": test.name, "suite": suite.name, "attempt": attempt},
                )
                status, entries, error = await self.run_attempt(suite, test, attempt)
                reports.extend(entries)
                if status in (TestStatus.PASSED, TestStatus.SKIPPED):
                    break
                if attempt < max_attempts:
                    self.logger.warning(
                        f"{test.name} {status.value}, retrying: {error}",
                        extra={"test_name": test.name, "status": status.value},
                    )

            duration = time.time() - start
            log_performance(
                self.logger,
                f"test_{test.name}",
                duration,
                status=status.value,
                attempts=attempt,
            )
            return TestOutcome(
                name=test.name,
                suite=suite.name,
                status=status,
                attempts=attempt,
                duration=duration,
                error_message=error if status != TestStatus.PASSED else None,
                reports=reports,
            )

    async def run_suite(self, suite: SuiteDefinition) -> SuiteResult:
        self.logger.info(
            f"Starting suite {suite.name}: {len(suite.tests)} test(s), "
            f"{suite.thread_count} thread(s)",
            extra={"suite": suite.name},
        )
        semaphore = asyncio.Semaphore(suite.thread_count)
        outcomes = await asyncio.gather(
            *(self.run_test(suite, test, semaphore) for test in suite.tests)
        )
        return SuiteResult(suite=suite, outcomes=list(outcomes))

    async def run(self, suites: List[SuiteDefinition], name: str = "Regression") -> RunResult:
        """Run every suite in order and collect the outcomes."""
        result = RunResult(run_id=self.run_id, name=name, started_at=datetime.now())
        for suite in suites:
            result.suites.append(await self.run_suite(suite))
        result.completed_at = datetime.now()

        outcomes = result.outcomes
        passed = sum(1 for o in outcomes if o.passed)
        self.logger.info(
            f"Run completed: {passed}/{len(outcomes)} passed",
            extra={"metadata": {"run_id": self.run_id, "total": len(outcomes), "passed": passed}},
        )
        return result
