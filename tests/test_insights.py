"""Unit tests for AI result insights."""

from datetime import datetime
from unittest.mock import MagicMock, patch

from openai import OpenAIError

from sheetrunner.core.config import Config
from sheetrunner.reporting.insights import ResultAnalyzer, format_analysis
from sheetrunner.reporting.models import (
    RunReport,
    RunSummary,
    SuiteReport,
    TestReportEntry,
    TestStatus,
)


def make_report():
    entry = TestReportEntry(
        name="LoginTest",
        browser="chrome",
        status=TestStatus.FAILED,
        error_message="button missing",
    )
    return RunReport(
        run_id="run-1",
        started_at=datetime(2024, 5, 1, 9, 0),
        completed_at=datetime(2024, 5, 1, 9, 1),
        suites=[SuiteReport(name="Smoke", tests=[entry])],
        summary=RunSummary(total=1, failed=1),
    )


def make_client(content="Insight"):
    client = MagicMock()
    choice = MagicMock()
    choice.message.content = content
    client.chat.completions.create.return_value = MagicMock(choices=[choice])
    return client


class TestFormatAnalysis:
    def test_strips_fences_and_blank_runs(self):
        assert format_analysis("```\nA\n\n\n\nB\n```") == "A\n\nB"


class TestResultAnalyzer:
    """Test cases for ResultAnalyzer."""

    def test_disabled_returns_none(self):
        analyzer = ResultAnalyzer(Config(), client=make_client())

        assert analyzer.available is False
        assert analyzer.analyze(make_report()) is None

    def test_no_client_without_api_key(self):
        with patch("sheetrunner.reporting.insights.OpenAI") as openai_class:
            analyzer = ResultAnalyzer(Config(insights_enabled=True))

        openai_class.assert_not_called()
        assert analyzer.available is False

    def test_client_created_with_api_key(self):
        with patch("sheetrunner.reporting.insights.OpenAI") as openai_class:
            analyzer = ResultAnalyzer(Config(insights_enabled=True, openai_api_key="sk-test"))

        openai_class.assert_called_once_with(api_key="sk-test")
        assert analyzer.available is True

    def test_extract_error_lines(self, tmp_path):
        log = tmp_path / "sheetrunner.log"
        log.write_text("INFO ok\nERROR broke\nTEST FAIL: x\nTimeout waiting\nINFO fine\n")
        analyzer = ResultAnalyzer(Config())

        assert analyzer.extract_error_lines(log) == ["ERROR broke", "TEST FAIL: x", "Timeout waiting"]
        assert analyzer.extract_error_lines(tmp_path / "absent.log") == []
        assert analyzer.extract_error_lines(None) == []

    def test_build_context(self, tmp_path):
        log = tmp_path / "sheetrunner.log"
        log.write_text("Exception in thread\n")
        analyzer = ResultAnalyzer(Config())

        context = analyzer.build_context(make_report(), log)

        assert "Total: 1, Passed: 0, Failed: 1" in context
        assert "Smoke/LoginTest attempt 1 on chrome: failed" in context
        assert "(button missing)" in context
        assert context.endswith("Log errors:\nException in thread")

    def test_analyze(self):
        client = make_client("```Flaky login```")
        analyzer = ResultAnalyzer(
            Config(insights_enabled=True, insights_model="gpt-4o"), client=client
        )

        assert analyzer.analyze(make_report()) == "Flaky login"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert "LoginTest" in kwargs["messages"][1]["content"]

    def test_api_failure(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = OpenAIError("rate limited")
        analyzer = ResultAnalyzer(Config(insights_enabled=True), client=client)

        assert analyzer.analyze(make_report()) == "AI analysis failed: rate limited"

    def test_no_choices(self):
        client = MagicMock()
        client.chat.completions.create.return_value = MagicMock(choices=[])
        analyzer = ResultAnalyzer(Config(insights_enabled=True), client=client)

        assert analyzer.analyze(make_report()) == "No insights generated"
