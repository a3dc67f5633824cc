"""Core configuration, logging and error types."""

from .config import Config, EmailSettings, load_config, find_config_file
from .exceptions import (
    SheetRunnerError,
    ConfigurationError,
    DataSheetError,
    BrowserSessionError,
    TestExecutionError,
    ReportError,
    NotificationError,
    ValidationError,
)
from .logging_config import setup_logging, get_logger, log_performance

__all__ = [
    "Config",
    "EmailSettings",
    "load_config",
    "find_config_file",
    "SheetRunnerError",
    "ConfigurationError",
    "DataSheetError",
    "BrowserSessionError",
    "TestExecutionError",
    "ReportError",
    "NotificationError",
    "ValidationError",
    "setup_logging",
    "get_logger",
    "log_performance",
]
