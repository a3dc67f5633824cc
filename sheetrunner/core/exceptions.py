"""
Base exception classes for SheetRunner.

Provides a hierarchy of exceptions for the failures that can occur while
reading the run workbooks, driving the browser, executing suites and
publishing results.
"""

from typing import Optional, Dict, Any


class SheetRunnerError(Exception):
    """Base exception class for all SheetRunner errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class ConfigurationError(SheetRunnerError):
    """Raised when the environment configuration is missing or unusable."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        config_path: Optional[str] = None,
    ):
        super().__init__(message, "CONFIGURATION_ERROR")
        self.key = key
        self.config_path = config_path
        self.context.update(
            {
                "key": key,
                "config_path": config_path,
            }
        )


class DataSheetError(SheetRunnerError):
    """Raised when a workbook or one of its sheets cannot be read."""

    def __init__(
        self,
        message: str,
        workbook: Optional[str] = None,
        sheet: Optional[str] = None,
    ):
        super().__init__(message, "DATA_SHEET_ERROR")
        self.workbook = workbook
        self.sheet = sheet
        self.context.update(
            {
                "workbook": workbook,
                "sheet": sheet,
            }
        )


class BrowserSessionError(SheetRunnerError):
    """Raised when a browser session cannot be started."""

    def __init__(self, message: str, browser: Optional[str] = None):
        super().__init__(message, "BROWSER_SESSION_FAILED")
        self.browser = browser
        self.context.update({"browser": browser})


class TestExecutionError(SheetRunnerError):
    """Raised when a test subprocess cannot be executed."""

    __test__ = False

    def __init__(
        self,
        message: str,
        test_name: Optional[str] = None,
        exit_code: Optional[int] = None,
    ):
        super().__init__(message, "TEST_EXECUTION_FAILED")
        self.test_name = test_name
        self.exit_code = exit_code
        self.context.update(
            {
                "test_name": test_name,
                "exit_code": exit_code,
            }
        )


class ReportError(SheetRunnerError):
    """Raised when a report cannot be rendered or written."""

    def __init__(self, message: str, report_path: Optional[str] = None):
        super().__init__(message, "REPORT_FAILED")
        self.report_path = report_path
        self.context.update({"report_path": report_path})


class NotificationError(SheetRunnerError):
    """Raised when the report email cannot be sent."""

    def __init__(
        self,
        message: str,
        recipient: Optional[str] = None,
        smtp_host: Optional[str] = None,
    ):
        super().__init__(message, "NOTIFICATION_FAILED")
        self.recipient = recipient
        self.smtp_host = smtp_host
        self.context.update(
            {
                "recipient": recipient,
                "smtp_host": smtp_host,
            }
        )


class ValidationError(SheetRunnerError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str,
        validation_type: Optional[str] = None,
        violations: Optional[list] = None,
    ):
        super().__init__(message, "VALIDATION_FAILED")
        self.validation_type = validation_type
        self.violations = violations or []
        self.context.update(
            {
                "validation_type": validation_type,
                "violations": violations,
            }
        )
