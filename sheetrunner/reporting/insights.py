"""
Result insights from an OpenAI chat model.

Summarizes the run and the error lines of the execution log, and asks the
model for failure patterns and recommendations.
"""

import re
from pathlib import Path
from typing import List, Optional

from openai import OpenAI, OpenAIError

from ..core.config import Config
from ..core.logging_config import get_logger
from .models import RunReport


ERROR_PATTERN = re.compile(r"ERROR|FAIL|Exception|Timeout")
MAX_ERROR_LINES = 200
MAX_TOKENS = 1000
TEMPERATURE = 0.7

PROMPT = """Analyze the following test execution results and provide insights:

Test Data:
{context}

Focus on:
1. Test execution patterns
2. Common failure points
3. Performance observations
4. Recommendations for improvement"""


def format_analysis(text: str) -> str:
    """Strip code fences and collapse runs of blank lines."""
    text = text.replace("```", "")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


class ResultAnalyzer:
    """Produces AI insights for a finished run."""

    def __init__(self, config: Config, client: Optional[OpenAI] = None):
        self.config = config
        self.logger = get_logger(__name__)
        self.client = client
        if self.client is None and config.insights_enabled and config.openai_api_key:
            self.client = OpenAI(api_key=config.openai_api_key)

    @property
    def available(self) -> bool:
        return self.config.insights_enabled and self.client is not None

    def extract_error_lines(self, log_path: Optional[Path]) -> List[str]:
        """Lines of the log mentioning errors, failures or timeouts."""
        if log_path is None or not Path(log_path).is_file():
            return []
        lines = []
        with open(log_path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                if ERROR_PATTERN.search(line):
                    lines.append(line.strip())
        return lines[-MAX_ERROR_LINES:]

    def build_context(self, report: RunReport, log_path: Optional[Path] = None) -> str:
        summary = report.summary
        lines = [
            f"Run: {report.name} ({report.run_id})",
            f"Duration: {report.duration:.1f}s",
            f"Total: {summary.total}, Passed: {summary.passed}, "
            f"Failed: {summary.failed}, Errors: {summary.errors}, "
            f"Skipped: {summary.skipped}",
        ]
        for suite in report.suites:
            for test in suite.tests:
                status = test.status.value if test.status else "unknown"
                line = (
                    f"- {suite.name}/{test.name} attempt {test.attempt} on "
                    f"{test.browser}: {status} in {test.duration:.1f}s"
                )
                if test.error_message:
                    line += f" ({test.error_message})"
                lines.append(line)

        errors = self.extract_error_lines(log_path)
        if errors:
            lines.append("")
            lines.append("Log errors:")
            lines.extend(errors)
        return "\n".join(lines)

    def analyze(self, report: RunReport, log_path: Optional[Path] = None) -> Optional[str]:
        """
        Ask the model for insights.

        Returns:
            Formatted insights, None when insights are disabled, or an
            "AI analysis failed" message when the API call fails
        """
        if not self.available:
            self.logger.debug("Insights disabled or no OpenAI API key configured")
            return None

        try:
            context = self.build_context(report, log_path)
            response = self.client.chat.completions.create(
                model=self.config.insights_model,
                messages=[
                    {
                        "role": "system",
                        "content": "You are a QA engineer reviewing UI test results.",
                    },
                    {"role": "user", "content": PROMPT.format(context=context)},
                ],
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
            )
        except (OpenAIError, OSError) as e:
            self.logger.error(f"Failed to analyze test results: {e}")
            return f"AI analysis failed: {e}"

        if not response.choices:
            return "No insights generated"
        return format_analysis(response.choices[0].message.content or "")
