"""
Email delivery of the execution report.

Sends a plain-text summary with the HTML report attached over SMTP with
STARTTLS.
"""

import logging
import smtplib
from datetime import date
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from ..core.config import EmailSettings
from ..core.exceptions import NotificationError
from .models import RunReport


SUMMARY_SUFFIX = "_summaryreport.html"


def build_summary(report: RunReport, insights: Optional[str] = None) -> Tuple[str, str]:
    """Subject and body of the report email."""
    summary = report.summary
    subject = f"Automation Execution Report - {report.name} [{date.today().isoformat()}]"
    lines = [
        "Hello QA Team,",
        "",
        "The automated test suite has completed execution.",
        "",
        "Summary:",
        f"Total: {summary.total}",
        f"Passed: {summary.passed}",
        f"Failed: {summary.failed + summary.errors}",
        f"Skipped: {summary.skipped}",
        "",
        "Attached is the latest summary report (if found).",
        "",
        f"Overall pass rate: {summary.pass_rate:.2f}%",
    ]
    if insights:
        lines.extend(["", "Insights:", insights])
    return subject, "\n".join(lines)


def _newest(paths: Iterable[Path]) -> Optional[Path]:
    files = [p for p in paths if p.is_file()]
    return max(files, key=lambda p: p.stat().st_mtime) if files else None


def latest_report_in(directory: Path) -> Optional[Path]:
    """Newest ``*_summaryReport.html`` under a directory, else its newest HTML file."""
    html_files = [p for p in directory.rglob("*") if p.suffix.lower() == ".html"]
    summary = _newest(p for p in html_files if p.name.lower().endswith(SUMMARY_SUFFIX))
    return summary or _newest(html_files)


def resolve_attachment(
    path: Optional[Union[str, Path]],
    report_root: Optional[Path] = None,
    report_file_name: str = "summaryReport.html",
    project_root: Optional[Path] = None,
) -> Optional[Path]:
    """
    Find the report file to attach.

    An explicit file wins; an explicit directory yields its latest report.
    Relative paths are also tried against the project root. Without a usable
    explicit path the configured report directory is searched, preferring an
    exact ``report_file_name`` match.
    """
    logger = logging.getLogger(__name__)

    if path:
        candidate = Path(path)
        if not candidate.exists() and project_root and not candidate.is_absolute():
            candidate = project_root / candidate
        if candidate.is_file():
            return candidate
        if candidate.is_dir():
            return latest_report_in(candidate)
        logger.warning(f"Explicit attachment path not found: {path}")

    if report_root is None or not report_root.is_dir():
        logger.warning(f"Report directory not found at {report_root}")
        return None

    exact = report_root / report_file_name
    if exact.is_file():
        return exact
    return latest_report_in(report_root)


class EmailNotifier:
    """Sends report emails with the configured SMTP account."""

    def __init__(self, settings: EmailSettings, logger: Optional[logging.Logger] = None):
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)

    def send_report(
        self,
        subject: Optional[str],
        body: Optional[str],
        attachment: Optional[Path] = None,
        recipient: Optional[str] = None,
    ) -> None:
        """
        Send the report email.

        Args:
            subject: Email subject
            body: Plain-text body
            attachment: Report file to attach; skipped when missing
            recipient: Overrides the configured recipients

        Raises:
            NotificationError: If settings are incomplete or sending fails
        """
        settings = self.settings
        recipients = (
            [recipient.strip()] if recipient and recipient.strip() else settings.recipients
        )
        password = settings.effective_password
        if not all([settings.username, password, settings.sender, recipients]):
            message = (
                "Missing required email configuration "
                "(username/password/sender/recipients)"
            )
            self.logger.error(message)
            raise NotificationError(message, smtp_host=settings.smtp_host)

        msg = MIMEMultipart()
        msg["From"] = settings.sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject or "Automation Test Report"
        msg.attach(MIMEText((body or "") + "\n\n", "plain"))

        if attachment is not None and Path(attachment).is_file():
            attachment = Path(attachment)
            part = MIMEApplication(attachment.read_bytes(), Name=attachment.name)
            part["Content-Disposition"] = f'attachment; filename="{attachment.name}"'
            msg.attach(part)
            self.logger.info(f"Attached report: {attachment}")
        else:
            self.logger.warning(f"No report attached (file not found): {attachment}")

        to = ", ".join(recipients)
        try:
            self.logger.info(f"Sending test report email to {to}")
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                if settings.use_tls:
                    server.starttls()
                server.login(settings.username, password)
                server.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            self.logger.error(f"Authentication failed: {e}. Use an app password.")
            raise NotificationError(
                "SMTP authentication failed. Ensure you are using an app password.",
                recipient=to,
                smtp_host=settings.smtp_host,
            )
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(f"Failed to send test report email: {e}")
            raise NotificationError(
                f"Failed to send test report email: {e}",
                recipient=to,
                smtp_host=settings.smtp_host,
            )
        self.logger.info(f"Test report email sent to {to}")
