"""Email notifications for workflow events."""

import asyncio
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from enum import Enum
from html import escape
from typing import Any, Dict, Optional

import structlog

from app.config import settings

logger = structlog.get_logger(__name__)


class NotificationKind(str, Enum):
    WELCOME = "welcome"
    VERIFY_EMAIL = "verify_email"
    EMPLOYER_APPROVED = "employer_approved"
    EMPLOYER_REJECTED = "employer_rejected"
    JOB_APPROVED = "job_approved"
    APPLICATION_RECEIVED = "application_received"
    APPLICATION_STATUS_CHANGED = "application_status_changed"


_LAYOUT = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
    "{body}"
    "<p>Best regards,<br>The Faculty Jobs Team</p>"
    "</div>"
)

_BUTTON = (
    '<p><a href="{url}" style="background-color: #2563eb; color: white; '
    'padding: 10px 20px; text-decoration: none; border-radius: 5px;">{label}</a></p>'
)

# kind -> (subject, body template). Placeholders are filled with escaped values.
TEMPLATES = {
    NotificationKind.WELCOME: (
        "Welcome to Faculty Jobs!",
        '<h1 style="color: #2563eb;">Welcome to Faculty Jobs, {name}!</h1>'
        "<p>Thank you for joining our academic job marketplace.</p>"
        "<p>To get started, please verify your email address.</p>",
    ),
    NotificationKind.VERIFY_EMAIL: (
        "Verify your email address",
        '<h1 style="color: #2563eb;">Verify your email</h1>'
        "<p>Hi {name}, please confirm your email address to unlock posting and applying.</p>",
    ),
    NotificationKind.EMPLOYER_APPROVED: (
        "Your Employer Account Has Been Approved!",
        '<h1 style="color: #16a34a;">Congratulations!</h1>'
        "<p>Your employer account for <strong>{company_name}</strong> has been approved.</p>"
        "<p>You can now start posting faculty positions.</p>"
        + _BUTTON.format(url="{app_url}/employer", label="Go to Dashboard"),
    ),
    NotificationKind.EMPLOYER_REJECTED: (
        "Update on Your Employer Registration",
        '<h1 style="color: #dc2626;">Registration not approved</h1>'
        "<p>We could not approve <strong>{company_name}</strong> at this time.</p>"
        "<p>{reason}</p>",
    ),
    NotificationKind.JOB_APPROVED: (
        "Your Job Posting Has Been Approved!",
        '<h1 style="color: #16a34a;">Job Approved!</h1>'
        '<p>Your job posting "<strong>{job_title}</strong>" is now live.</p>'
        + _BUTTON.format(url="{app_url}/employer/jobs", label="View Applications"),
    ),
    NotificationKind.APPLICATION_RECEIVED: (
        "New Application Received",
        '<h1 style="color: #2563eb;">New Application Received</h1>'
        '<p>You have received a new application for "<strong>{job_title}</strong>" '
        "from {applicant_name}.</p>"
        + _BUTTON.format(url="{app_url}/employer/jobs", label="Review Application"),
    ),
    NotificationKind.APPLICATION_STATUS_CHANGED: (
        "Application Status Update",
        '<h1 style="color: #2563eb;">Application Status Update</h1>'
        '<p>Your application for "<strong>{job_title}</strong>" is now: '
        "<strong>{status}</strong>.</p>"
        "<p>{notes}</p>"
        + _BUTTON.format(url="{app_url}/profile", label="View Application"),
    ),
}


class _Defaulting(dict):
    def __missing__(self, key):
        return ""


def render(kind: NotificationKind, data: Dict[str, Any]) -> tuple:
    """Return (subject, html) for a notification."""
    subject, body = TEMPLATES[kind]
    values = _Defaulting({key: escape(str(value)) for key, value in data.items() if value is not None})
    values.setdefault("app_url", settings.APP_URL.rstrip("/"))
    return subject, _LAYOUT.format(body=body.format_map(values))


class Notifier(ABC):
    """Outbound notification port. ``send`` returns False instead of raising."""

    @abstractmethod
    async def send(self, to_address: str, kind: NotificationKind, data: Dict[str, Any]) -> bool:
        ...


class EmailNotifier(Notifier):
    """Send notifications via SMTP. The blocking client runs in a worker thread."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        use_tls: Optional[bool] = None,
    ):
        self.smtp_host = smtp_host or settings.SMTP_HOST
        self.smtp_port = smtp_port or settings.SMTP_PORT
        self.smtp_user = smtp_user or settings.SMTP_USER
        self.smtp_password = smtp_password or settings.SMTP_PASSWORD
        self.from_email = from_email or settings.EMAIL_FROM
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls

    def _deliver(self, to_address: str, subject: str, html: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["From"] = self.from_email
        msg["To"] = to_address
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html"))

        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=settings.NOTIFY_TIMEOUT_SECONDS) as server:
            if self.use_tls:
                server.starttls()
            if self.smtp_user and self.smtp_password:
                server.login(self.smtp_user, self.smtp_password)
            server.send_message(msg)

    async def send(self, to_address: str, kind: NotificationKind, data: Dict[str, Any]) -> bool:
        subject, html = render(kind, data)
        try:
            await asyncio.to_thread(self._deliver, to_address, subject, html)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("email_send_failed", to=to_address, kind=kind.value, error=str(e))
            return False
        logger.info("email_sent", to=to_address, kind=kind.value)
        return True


class LogNotifier(Notifier):
    """Logs notifications instead of sending them (SMTP not configured)."""

    async def send(self, to_address: str, kind: NotificationKind, data: Dict[str, Any]) -> bool:
        subject, _ = render(kind, data)
        logger.info("email_skipped_smtp_not_configured", to=to_address, kind=kind.value, subject=subject)
        return True


def get_notifier() -> Notifier:
    if settings.smtp_configured:
        return EmailNotifier()
    return LogNotifier()


async def notify_safely(
    notifier: Notifier,
    to_address: Optional[str],
    kind: NotificationKind,
    data: Dict[str, Any],
    timeout: Optional[float] = None,
) -> bool:
    """
    Deliver a notification at most once, bounded by a timeout.

    Never raises: a failed or slow notification must not undo the state
    change that triggered it.
    """
    if not to_address:
        logger.warning("notification_skipped_no_recipient", kind=kind.value)
        return False

    timeout = settings.NOTIFY_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        return await asyncio.wait_for(notifier.send(to_address, kind, data), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("notification_timed_out", to=to_address, kind=kind.value, timeout=timeout)
    except Exception as e:
        logger.error("notification_failed", to=to_address, kind=kind.value, error=str(e), exc_info=True)
    return False
