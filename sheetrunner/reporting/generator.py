"""
HTML report generator.

Renders the run report with jinja2, embedding the base64 screenshots of each
test's steps, and writes a JSON copy of the same data next to it.
"""

import json
import logging
import os
import platform
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader, Template, TemplateNotFound

from ..core.config import Config
from ..core.exceptions import ReportError
from .models import RunReport, RunSummary, SuiteReport

if TYPE_CHECKING:
    from ..execution.models import RunResult


logger = logging.getLogger(__name__)


def report_file_path(config: Config, now: Optional[datetime] = None) -> Path:
    """``<report_path>/<YYYY-MM-DD>/<HHMMSS>_<report_file_name>`` for a run."""
    now = now or datetime.now()
    return (
        config.report_path
        / now.strftime("%Y-%m-%d")
        / f"{now.strftime('%H%M%S')}_{config.report_file_name}"
    )


def prepare_report_dir(path: Path) -> Path:
    """Empty an existing report directory, or create it."""
    path = Path(path)
    if not path.exists():
        path.mkdir(parents=True)
        logger.info(f"Directory created: {path}")
        return path
    if not path.is_dir():
        raise ReportError(f"Report path is not a directory: {path}", report_path=str(path))

    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
    logger.info(f"Directory cleaned: {path}")
    return path


def environment_info(config: Config) -> Dict[str, Any]:
    return {
        "application_url": config.application_url,
        "run_configuration": config.run_configuration,
        "headless": config.is_headless,
        "ci_mode": config.is_ci_mode,
        "python_version": sys.version.split()[0],
        "platform": platform.platform(),
        "user": os.getenv("USER") or os.getenv("USERNAME") or "",
    }


def build_run_report(result: "RunResult", environment: Optional[Dict[str, Any]] = None) -> RunReport:
    """Turn a run result into the report model."""
    suites = []
    for suite_result in result.suites:
        entries = [entry for outcome in suite_result.outcomes for entry in outcome.reports]
        suites.append(
            SuiteReport(
                name=suite_result.suite.name,
                thread_count=suite_result.suite.thread_count,
                parameters=suite_result.suite.parameters,
                tests=entries,
                summary=RunSummary.from_statuses(
                    [o.status for o in suite_result.outcomes]
                ),
            )
        )

    return RunReport(
        run_id=result.run_id,
        name=result.name,
        started_at=result.started_at,
        completed_at=result.completed_at or datetime.now(),
        suites=suites,
        summary=RunSummary.from_statuses([o.status for o in result.outcomes]),
        environment=environment or {},
    )


class ReportGenerator:
    """Writes the HTML and JSON reports of a run."""

    def __init__(
        self,
        output_file: Path,
        template_dir: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the report generator.

        Args:
            output_file: HTML report path; the JSON report uses the same stem
            template_dir: Directory containing ``report.html``
            logger: Optional logger instance
        """
        self.output_file = Path(output_file)
        self.template_dir = template_dir or (Path(__file__).parent / "templates")
        self.logger = logger or logging.getLogger(__name__)
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=True,
        )

    @property
    def json_file(self) -> Path:
        return self.output_file.with_suffix(".json")

    def _template(self) -> Template:
        try:
            return self.jinja_env.get_template("report.html")
        except TemplateNotFound:
            self.logger.warning(
                f"report.html not found in {self.template_dir}, using default template"
            )
            return self.jinja_env.from_string(DEFAULT_HTML_TEMPLATE)

    def generate(self, report: RunReport) -> Path:
        """
        Render the report and write both files.

        Returns:
            Path of the HTML report

        Raises:
            ReportError: If a report file cannot be written
        """
        self.logger.info(f"Generating report for run: {report.run_id}")
        html_content = self._template().render(
            report=report, generated_at=datetime.now()
        )

        try:
            self.output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_file, "w", encoding="utf-8") as f:
                f.write(html_content)
            with open(self.json_file, "w", encoding="utf-8") as f:
                json.dump(report.model_dump(mode="json"), f, indent=2)
        except OSError as e:
            raise ReportError(
                f"Failed to save report: {e}", report_path=str(self.output_file)
            )

        self.logger.info(
            f"Report written to {self.output_file}: "
            f"{report.summary.passed}/{report.summary.total} tests passed"
        )
        return self.output_file


DEFAULT_HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Automation Report - {{ report.name }}</title>
</head>
<body>
    <h1>Automation Report - {{ report.name }}</h1>
    <p>Run {{ report.run_id }}, completed {{ report.completed_at }}</p>
    <p>Total: {{ report.summary.total }}, Passed: {{ report.summary.passed }},
       Failed: {{ report.summary.failed }}, Skipped: {{ report.summary.skipped }}</p>
    {% for suite in report.suites %}
    <h2>{{ suite.name }}</h2>
    {% for test in suite.tests %}
    <h3>{{ test.name }} ({{ test.status.value if test.status else "unknown" }})</h3>
    <ul>
        {% for step in test.steps %}
        <li>{{ step.status.value }}: {{ step.message }}</li>
        {% endfor %}
    </ul>
    {% endfor %}
    {% endfor %}
</body>
</html>
"""
