"""
Configuration management for SheetRunner.

Handles the YAML environment file, environment variable overrides, defaults
and configuration validation for all SheetRunner components.
"""

import base64
import binascii
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List, Union

import yaml

from .exceptions import ConfigurationError, NotificationError


CONFIG_FILE_NAME = "sheetrunner.yaml"
SUPPORTED_DATA_SOURCES = ["excel"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARN", "WARNING", "ERROR"]


def _int_setting(
    data: Dict[str, Any],
    key: str,
    default: int,
    config_path: Optional[str] = None,
    section: str = "",
) -> int:
    """Read an integer setting, raising ConfigurationError for other values."""
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        name = f"{section}.{key}" if section else key
        raise ConfigurationError(
            f"Invalid integer for {name}: {value!r}",
            key=name,
            config_path=config_path,
        )


@dataclass
class EmailSettings:
    """SMTP settings used to mail the execution report."""

    enabled: bool = field(default=True)
    smtp_host: str = field(default="smtp.gmail.com")
    smtp_port: int = field(default=587)
    use_tls: bool = field(default=True)
    username: Optional[str] = field(default=None)
    password: Optional[str] = field(default=None)
    password_b64: bool = field(default=False)
    sender: Optional[str] = field(default=None)
    recipients: List[str] = field(default_factory=list)

    @property
    def effective_password(self) -> Optional[str]:
        """Password in clear text, decoding it when stored as base64."""
        if not self.password or not self.password_b64:
            return self.password
        try:
            return base64.b64decode(self.password, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise NotificationError(
                "SMTP password is not valid base64", smtp_host=self.smtp_host
            )

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], config_path: Optional[str] = None
    ) -> "EmailSettings":
        recipients = data.get("recipients") or data.get("to") or []
        if isinstance(recipients, str):
            recipients = [r.strip() for r in recipients.split(",") if r.strip()]
        return cls(
            enabled=bool(data.get("enabled", True)),
            smtp_host=str(data.get("smtp_host", "smtp.gmail.com")),
            smtp_port=_int_setting(data, "smtp_port", 587, config_path, "email"),
            use_tls=bool(data.get("use_tls", True)),
            username=data.get("username"),
            password=data.get("password"),
            password_b64=bool(data.get("password_b64", False)),
            sender=data.get("sender") or data.get("from"),
            recipients=list(recipients),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "smtp_host": self.smtp_host,
            "smtp_port": self.smtp_port,
            "use_tls": self.use_tls,
            "username": self.username,
            "sender": self.sender,
            "recipients": self.recipients,
            "password_configured": bool(self.password),
        }


@dataclass
class Config:
    """Configuration class for SheetRunner with environment variable support."""

    # Environment detection
    ci_mode: bool = field(default=False)

    # Execution settings
    headless_mode: Optional[bool] = field(default=None)
    retry_count: int = field(default=1)
    test_timeout: int = field(default=900)

    # Logging configuration
    log_level: str = field(default="INFO")
    log_format: str = field(default="text")

    # Application under test
    application_url: Optional[str] = field(default=None)

    # Test data
    test_data_source: str = field(default="excel")
    external_sheet_path: Optional[Path] = field(default=None)
    run_configuration: str = field(default="Regression")

    # Directory paths
    config_path: Optional[Path] = field(default=None)
    project_root: Path = field(default_factory=lambda: Path.cwd())
    run_manager_path: Path = field(
        default_factory=lambda: Path.cwd() / "RunManager.xlsx"
    )
    tests_root: Path = field(default_factory=lambda: Path.cwd() / "ui_tests")
    report_path: Path = field(default_factory=lambda: Path.cwd() / "reports")
    report_file_name: str = field(default="summaryReport.html")
    logs_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")
    csv_log_path: Optional[Path] = field(default=None)

    # Notifications
    email: EmailSettings = field(default_factory=EmailSettings)

    # Result insights
    insights_enabled: bool = field(default=False)
    insights_model: str = field(default="gpt-4o-mini")
    openai_api_key: Optional[str] = field(default=None)

    def __post_init__(self):
        """Post-initialization validation and environment overrides."""
        if os.getenv("CI", "").lower() == "true" and self.ci_mode is False:
            self.ci_mode = True

        headless_env = os.getenv("SHEETRUNNER_HEADLESS")
        if headless_env is not None:
            self.headless_mode = headless_env.lower() == "true"

        log_env = os.getenv("SHEETRUNNER_LOG_LEVEL")
        if log_env:
            self.log_level = log_env
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            self.log_level = "INFO"
        else:
            self.log_level = self.log_level.upper()
        if self.log_level == "WARN":
            self.log_level = "WARNING"

        if self.ci_mode and self.log_format == "text":
            self.log_format = "json"

        url_env = os.getenv("SHEETRUNNER_APPLICATION_URL")
        if url_env:
            self.application_url = url_env

        retry_env = os.getenv("SHEETRUNNER_RETRY_COUNT")
        if retry_env is not None:
            try:
                self.retry_count = int(retry_env)
            except ValueError:
                pass
        if self.retry_count < 0:
            self.retry_count = 0

        if os.getenv("SMTP_USERNAME"):
            self.email.username = os.getenv("SMTP_USERNAME")
        if os.getenv("SMTP_PASSWORD"):
            self.email.password = os.getenv("SMTP_PASSWORD")
            self.email.password_b64 = False

        api_key_env = os.getenv("OPENAI_API_KEY")
        if api_key_env and not self.openai_api_key:
            self.openai_api_key = api_key_env

    @property
    def is_headless(self) -> bool:
        """Get effective headless mode setting."""
        return self.get_effective_headless_mode()

    @property
    def is_ci_mode(self) -> bool:
        """Check if running in CI environment."""
        return self.ci_mode

    @property
    def debug_enabled(self) -> bool:
        """Check if debug logging is enabled."""
        return self.log_level == "DEBUG"

    def get_effective_headless_mode(self) -> bool:
        """Get effective headless mode based on CI and override settings."""
        if self.headless_mode is not None:
            return self.headless_mode
        return self.ci_mode

    def get_log_file_path(self) -> Path:
        """Get the main log file path."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        return self.logs_dir / "sheetrunner.log"

    def get_debug_log_dir(self) -> Path:
        """Get the debug log directory path."""
        debug_dir = self.logs_dir / "debug"
        debug_dir.mkdir(parents=True, exist_ok=True)
        return debug_dir

    def require(self, key: str) -> Any:
        """Return a configured value, raising when it is missing or empty."""
        value = getattr(self, key, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ConfigurationError(f"Missing property: {key}", key=key)
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for logging."""
        return {
            "ci_mode": self.ci_mode,
            "headless_mode": self.headless_mode,
            "retry_count": self.retry_count,
            "test_timeout": self.test_timeout,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "application_url": self.application_url,
            "test_data_source": self.test_data_source,
            "external_sheet_path": (
                str(self.external_sheet_path) if self.external_sheet_path else None
            ),
            "run_configuration": self.run_configuration,
            "project_root": str(self.project_root),
            "run_manager_path": str(self.run_manager_path),
            "tests_root": str(self.tests_root),
            "report_path": str(self.report_path),
            "report_file_name": self.report_file_name,
            "logs_dir": str(self.logs_dir),
            "csv_log_path": str(self.csv_log_path) if self.csv_log_path else None,
            "email": self.email.to_dict(),
            "insights_enabled": self.insights_enabled,
            "insights_model": self.insights_model,
        }

    def validate(self) -> None:
        """Validate configuration and raise ValidationError if invalid."""
        from .exceptions import ValidationError

        errors = []

        if self.test_data_source not in SUPPORTED_DATA_SOURCES:
            errors.append(
                f"Unsupported test_data_source: {self.test_data_source}. "
                f"Must be one of {SUPPORTED_DATA_SOURCES}"
            )

        if self.external_sheet_path is None:
            errors.append("external_sheet_path is required for the excel data source")
        elif not self.external_sheet_path.exists():
            errors.append(f"Test data workbook not found: {self.external_sheet_path}")

        if not self.run_manager_path.exists():
            errors.append(f"RunManager.xlsx not found at {self.run_manager_path}")

        if not self.tests_root.is_dir():
            errors.append(f"Tests directory does not exist: {self.tests_root}")

        if not self.application_url:
            errors.append("application_url is not configured")

        if self.email.enabled:
            for name in ("username", "password", "sender"):
                if not getattr(self.email, name):
                    errors.append(f"Email {name} is not configured")
            if not self.email.recipients:
                errors.append("Email recipients are not configured")
            try:
                self.email.effective_password
            except NotificationError as e:
                errors.append(e.message)

        if self.insights_enabled and not self.openai_api_key:
            errors.append("OpenAI API key is required when insights are enabled")

        if errors:
            message = "Configuration validation failed: " + "; ".join(errors)
            raise ValidationError(
                message,
                validation_type="config",
                violations=errors,
            )


def _resolve(root: Path, value: Optional[Union[str, Path]]) -> Optional[Path]:
    if value is None or str(value).strip() == "":
        return None
    path = Path(str(value)).expanduser()
    return path if path.is_absolute() else root / path


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Look for sheetrunner.yaml in the start directory and its parents."""
    current = (start or Path.cwd()).resolve()
    for directory in [current, *current.parents]:
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load the environment configuration from a YAML file.

    Relative paths in the file are resolved against the directory holding
    the file, which is treated as the project root.

    Args:
        path: Configuration file; searched upwards from the cwd when omitted

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If the file is missing, malformed or lacks a
            critical key
    """
    config_path = Path(path) if path else find_config_file()
    if config_path is None or not config_path.is_file():
        raise ConfigurationError(
            f"Configuration file not found: {config_path or CONFIG_FILE_NAME}",
            config_path=str(config_path) if config_path else None,
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid configuration file {config_path}: {e}",
            config_path=str(config_path),
        )

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping: {config_path}",
            config_path=str(config_path),
        )

    for key in ("test_data_source", "report_path"):
        if not data.get(key):
            raise ConfigurationError(
                f"Critical property missing from configuration: {key}",
                key=key,
                config_path=str(config_path),
            )

    source = str(data["test_data_source"]).lower()
    if source not in SUPPORTED_DATA_SOURCES:
        raise ConfigurationError(
            f"Unsupported test data source: {data['test_data_source']}",
            key="test_data_source",
            config_path=str(config_path),
        )
    if not data.get("external_sheet_path"):
        raise ConfigurationError(
            "Critical property missing from configuration: external_sheet_path",
            key="external_sheet_path",
            config_path=str(config_path),
        )

    for section in ("email", "insights"):
        if not isinstance(data.get(section) or {}, dict):
            raise ConfigurationError(
                f"Configuration section '{section}' must be a mapping",
                key=section,
                config_path=str(config_path),
            )

    root = config_path.resolve().parent
    insights = data.get("insights") or {}

    return Config(
        headless_mode=data.get("headless"),
        retry_count=_int_setting(data, "retry_count", 1, str(config_path)),
        test_timeout=_int_setting(data, "test_timeout", 900, str(config_path)),
        log_level=str(data.get("log_level", "INFO")),
        log_format=str(data.get("log_format", "text")),
        application_url=data.get("application_url"),
        test_data_source=source,
        external_sheet_path=_resolve(root, data["external_sheet_path"]),
        run_configuration=str(data.get("run_configuration", "Regression")),
        config_path=config_path.resolve(),
        project_root=root,
        run_manager_path=_resolve(
            root, data.get("run_manager_path", "RunManager.xlsx")
        ),
        tests_root=_resolve(root, data.get("tests_root", "ui_tests")),
        report_path=_resolve(root, data["report_path"]),
        report_file_name=str(data.get("report_file_name", "summaryReport.html")),
        logs_dir=_resolve(root, data.get("logs_dir", "logs")),
        csv_log_path=_resolve(root, data.get("csv_log_path")),
        email=EmailSettings.from_dict(data.get("email") or {}, str(config_path)),
        insights_enabled=bool(insights.get("enabled", False)),
        insights_model=str(insights.get("model", "gpt-4o-mini")),
        openai_api_key=insights.get("api_key"),
    )
