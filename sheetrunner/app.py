"""
SheetRunner run orchestration.

Ties the pieces together for one run: clean the report directory, build the
suites from the Run Manager, execute them, write the report, log the result
and mail the report.
"""

import asyncio
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .core.config import Config
from .core.exceptions import ConfigurationError, NotificationError
from .core.logging_config import get_logger
from .data.run_manager import RunManager
from .execution.builder import SuiteBuilder
from .execution.discovery import TestDiscovery
from .execution.models import RunResult, SuiteDefinition
from .execution.runner import SuiteRunner
from .reporting.generator import (
    ReportGenerator,
    build_run_report,
    environment_info,
    prepare_report_dir,
    report_file_path,
)
from .reporting.insights import ResultAnalyzer
from .reporting.models import RunReport
from .reporting.notifier import EmailNotifier, build_summary, resolve_attachment
from .reporting.results_log import append_result


class SheetRunnerApp:
    """Runs the suites scheduled in the Run Manager workbook."""

    def __init__(self, config: Config, run_id: Optional[str] = None):
        self.config = config
        self.run_id = run_id or str(uuid.uuid4())
        self.logger = get_logger("sheetrunner.app", run_id=self.run_id)
        self.report: Optional[RunReport] = None
        self.report_file: Optional[Path] = None

    def discovery(self) -> TestDiscovery:
        return TestDiscovery(self.config.tests_root, self.config.project_root)

    def plan(self, sheet: Optional[str] = None) -> List[SuiteDefinition]:
        """Build the suites a run would execute."""
        run_manager = RunManager(self.config.run_manager_path)
        builder = SuiteBuilder(run_manager, self.discovery())
        return builder.build(sheet or self.config.run_configuration)

    def run(self, sheet: Optional[str] = None, send_email: bool = True) -> RunResult:
        sheet = sheet or self.config.run_configuration
        started = datetime.now()
        self.report_file = report_file_path(self.config, started)
        prepare_report_dir(self.config.report_path)

        suites = self.plan(sheet)
        if not suites:
            self.logger.warning("Nothing to run")
            return RunResult(
                run_id=self.run_id, name=sheet, started_at=started, completed_at=datetime.now()
            )

        runner = SuiteRunner(self.config, self.run_id)
        result = asyncio.run(runner.run(suites, name=sheet))

        self.report = build_run_report(result, environment_info(self.config))
        log_file = None if self.config.is_ci_mode else self.config.get_log_file_path()
        self.report.insights = ResultAnalyzer(self.config).analyze(self.report, log_file)
        ReportGenerator(self.report_file, logger=self.logger).generate(self.report)

        if self.config.csv_log_path:
            append_result(
                self.config.csv_log_path,
                self.config.application_url or sheet,
                "PASS" if result.success else "FAIL",
            )

        if send_email and self.config.email.enabled:
            self.send_report_email()

        return result

    def send_report_email(self) -> bool:
        """Mail the summary with the report attached; failures are logged."""
        if self.report is None:
            self.logger.warning("No report to send")
            return False

        subject, body = build_summary(self.report, self.report.insights)
        attachment = resolve_attachment(
            self.report_file,
            self.config.report_path,
            self.config.report_file_name,
            self.config.project_root,
        )
        if attachment is None:
            self.logger.warning("No report found to attach. Sending email without attachment.")

        try:
            EmailNotifier(self.config.email, logger=self.logger).send_report(
                subject, body, attachment
            )
        except (NotificationError, ConfigurationError) as e:
            self.logger.error(f"Failed to send test report email: {e.message}")
            return False
        return True
