"""
Unit tests for logging configuration.

Tests structured JSON logging, the text format, file rotation and the
context adapter.
"""

import json
import logging
import logging.handlers

import pytest

from sheetrunner.core.config import Config
from sheetrunner.core.logging_config import (
    ContextAdapter,
    StructuredFormatter,
    TextFormatter,
    get_logger,
    log_performance,
    setup_logging,
)


def make_record(msg="Test message", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="test.component",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestStructuredFormatter:
    """Test cases for StructuredFormatter."""

    def test_format_basic_log_record(self):
        formatter = StructuredFormatter("run-123")

        log_data = json.loads(formatter.format(make_record()))

        assert log_data["level"] == "INFO"
        assert log_data["component"] == "test.component"
        assert log_data["run_id"] == "run-123"
        assert log_data["message"] == "Test message"
        assert "timestamp" in log_data

    def test_format_with_context_fields(self):
        formatter = StructuredFormatter("run-123")
        record = make_record(
            test_name="LoginTest",
            suite="Smoke",
            browser="chrome",
            metadata={"attempt": 2},
        )

        log_data = json.loads(formatter.format(record))

        assert log_data["test_name"] == "LoginTest"
        assert log_data["suite"] == "Smoke"
        assert log_data["browser"] == "chrome"
        assert log_data["metadata"] == {"attempt": 2}

    def test_record_run_id_wins(self):
        formatter = StructuredFormatter("run-123")

        log_data = json.loads(formatter.format(make_record(run_id="run-456")))

        assert log_data["run_id"] == "run-456"


class TestTextFormatter:
    """Test cases for TextFormatter."""

    def test_format_includes_run_and_metadata(self):
        formatter = TextFormatter("abcdef123456")
        record = make_record(metadata={"suite": "Smoke"})

        text = formatter.format(record)

        assert "INFO" in text
        assert "Test message" in text
        assert "(run: abcdef12)" in text
        assert "suite=Smoke" in text

    def test_format_tags_test_context(self):
        formatter = TextFormatter("abcdef123456")
        record = make_record(test_name="LoginTest", suite="Smoke", attempt=2)

        text = formatter.format(record)

        assert "| [Smoke/LoginTest #2] Test message (run: abcdef12)" in text

    def test_format_without_test_has_no_tag(self):
        text = TextFormatter("abcdef123456").format(make_record(suite="Smoke"))

        assert "| Test message" in text


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_local_run_adds_rotating_file_handler(self, tmp_path, restore_root_logger):
        config = Config(logs_dir=tmp_path / "logs")

        root = setup_logging(config, "run-1")

        file_handlers = [
            h for h in root.handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert (tmp_path / "logs" / "sheetrunner.log").exists()
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_ci_run_logs_json_to_console_only(self, tmp_path, restore_root_logger):
        config = Config(ci_mode=True, logs_dir=tmp_path / "logs")

        root = setup_logging(config, "run-1")

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        assert not (tmp_path / "logs").exists()

    def test_debug_level_adds_debug_handler(self, tmp_path, restore_root_logger):
        config = Config(log_level="DEBUG", logs_dir=tmp_path / "logs")

        root = setup_logging(config, "run-12345678")

        assert len(root.handlers) == 3
        assert (tmp_path / "logs" / "debug" / "debug-run-1234.log").exists()


class TestLoggerHelpers:
    """Test cases for get_logger and log_performance."""

    def test_get_logger_without_context(self):
        assert isinstance(get_logger("plain"), logging.Logger)

    def test_get_logger_with_context_merges_extra(self):
        adapter = get_logger("ctx", suite="Smoke")

        assert isinstance(adapter, ContextAdapter)
        msg, kwargs = adapter.process("hello", {"extra": {"browser": "chrome"}})
        assert kwargs["extra"] == {"browser": "chrome", "suite": "Smoke"}

    def test_explicit_extra_overrides_adapter_context(self):
        adapter = get_logger("ctx", suite="Smoke")

        _, kwargs = adapter.process("hello", {"extra": {"suite": "Cross"}})

        assert kwargs["extra"] == {"suite": "Cross"}

    def test_process_without_extra(self):
        adapter = get_logger("ctx", run_id="run-1")

        _, kwargs = adapter.process("hello", {})

        assert kwargs["extra"] == {"run_id": "run-1"}

    def test_log_performance(self, caplog):
        logger = logging.getLogger("perf")

        with caplog.at_level(logging.INFO, logger="perf"):
            log_performance(logger, "run_test", 1.5, test_name="LoginTest")

        record = caplog.records[-1]
        assert "run_test completed in 1.50s" in record.getMessage()
        assert record.metadata["test_name"] == "LoginTest"
