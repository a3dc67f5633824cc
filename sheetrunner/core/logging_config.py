"""
Logging configuration for SheetRunner.

Provides structured JSON logging with file rotation and a human-readable
format for local runs. Every record carries the run id so that lines written
by parallel test subprocesses can be correlated afterwards, and records
logged for a test carry its suite, name and attempt.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from .config import Config


CONTEXT_FIELDS = ["test_name", "suite", "browser", "duration", "status", "attempt"]

MAIN_LOG_BYTES = 10 * 1024 * 1024
MAIN_LOG_BACKUPS = 5
DEBUG_LOG_BYTES = 50 * 1024 * 1024
DEBUG_LOG_BACKUPS = 3


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Test context fields set on a record through ``extra``."""
    return {
        attr: getattr(record, attr)
        for attr in CONTEXT_FIELDS
        if getattr(record, attr, None) is not None
    }


def context_tag(context: Dict[str, Any]) -> str:
    """Short ``[suite/test #attempt]`` label, empty without a test name."""
    name = context.get("test_name")
    if not name:
        return ""
    if context.get("suite"):
        name = f"{context['suite']}/{name}"
    if context.get("attempt"):
        name = f"{name} #{context['attempt']}"
    return f"[{name}] "


class StructuredFormatter(logging.Formatter):
    """JSON lines for CI and log shipping."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "run_id": getattr(record, "run_id", None) or self.run_id,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        log_entry.update(record_context(record))

        if getattr(record, "metadata", None):
            log_entry["metadata"] = record.metadata
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter for local runs."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        run_id = getattr(record, "run_id", None) or self.run_id

        message = (
            f"[{timestamp}] {record.levelname:8} [{record.threadName}] "
            f"{record.name:28} | {context_tag(record_context(record))}"
            f"{record.getMessage()} (run: {run_id[:8]})"
        )

        metadata = getattr(record, "metadata", None)
        if metadata:
            message += " | " + " | ".join(f"{k}={v}" for k, v in metadata.items())
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def _rotating_handler(path, max_bytes: int, backups: int) -> logging.Handler:
    return logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
    )


def setup_logging(config: Config, run_id: str) -> logging.Logger:
    """
    Install the SheetRunner handlers on the root logger.

    Console output always goes to stdout. Outside CI the run is also written
    to ``<logs_dir>/sheetrunner.log``, and a DEBUG level adds a per-run debug
    file under ``<logs_dir>/debug``.

    Args:
        config: Configuration object with logging settings
        run_id: Unique run identifier for log correlation

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, config.log_level)
    root_logger.setLevel(log_level)

    if config.log_format == "json":
        formatter = StructuredFormatter(run_id)
    else:
        formatter = TextFormatter(run_id)

    handlers = [(logging.StreamHandler(sys.stdout), log_level)]
    if not config.is_ci_mode:
        handlers.append(
            (
                _rotating_handler(
                    config.get_log_file_path(), MAIN_LOG_BYTES, MAIN_LOG_BACKUPS
                ),
                log_level,
            )
        )
        if config.debug_enabled:
            handlers.append(
                (
                    _rotating_handler(
                        config.get_debug_log_dir() / f"debug-{run_id[:8]}.log",
                        DEBUG_LOG_BYTES,
                        DEBUG_LOG_BACKUPS,
                    ),
                    logging.DEBUG,
                )
            )

    for handler, level in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        root_logger.addHandler(handler)

    logging.getLogger("sheetrunner.logging").info(
        "Logging configured",
        extra={
            "metadata": {
                "log_level": config.log_level,
                "log_format": config.log_format,
                "ci_mode": config.is_ci_mode,
            }
        },
    )
    return root_logger


class ContextAdapter(logging.LoggerAdapter):
    """Merges the adapter context into every record's extra fields."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str, **context) -> logging.Logger:
    """Logger for ``name``, wrapped in a ContextAdapter when context is given."""
    logger = logging.getLogger(name)
    if context:
        return ContextAdapter(logger, context)
    return logger


def log_performance(
    logger: logging.Logger, operation: str, duration: float, **metadata
):
    """Log how long an operation took, with its metadata."""
    logger.info(
        f"Performance: {operation} completed in {duration:.2f}s",
        extra={"metadata": {"operation": operation, "duration": duration, **metadata}},
    )
