"""Tests for notification delivery."""

import asyncio
import smtplib

from app.services.notifier import (
    EmailNotifier,
    LogNotifier,
    NotificationKind,
    Notifier,
    notify_safely,
    render,
)
from tests.conftest import FailingNotifier, RecordingNotifier


class SlowNotifier(Notifier):
    async def send(self, to_address, kind, data):
        await asyncio.sleep(5)
        return True


async def test_delivers_through_notifier():
    notifier = RecordingNotifier()
    sent = await notify_safely(notifier, "hr@college.edu", NotificationKind.JOB_APPROVED, {"job_title": "Lecturer"})

    assert sent is True
    assert notifier.sent == [
        {"to": "hr@college.edu", "kind": NotificationKind.JOB_APPROVED, "data": {"job_title": "Lecturer"}}
    ]


async def test_exceptions_are_swallowed():
    assert await notify_safely(FailingNotifier(), "a@b.com", NotificationKind.WELCOME, {}) is False


async def test_slow_notifier_times_out():
    sent = await notify_safely(SlowNotifier(), "a@b.com", NotificationKind.WELCOME, {}, timeout=0.05)
    assert sent is False


async def test_missing_recipient_is_skipped():
    notifier = RecordingNotifier()
    assert await notify_safely(notifier, None, NotificationKind.WELCOME, {}) is False
    assert notifier.sent == []


async def test_log_notifier_reports_success():
    assert await LogNotifier().send("a@b.com", NotificationKind.WELCOME, {"name": "Asha"}) is True


async def test_email_notifier_returns_false_on_smtp_error(monkeypatch):
    notifier = EmailNotifier(smtp_host="smtp.invalid", smtp_port=2525)

    def refuse(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "Service not available")

    monkeypatch.setattr(notifier, "_deliver", refuse)
    assert await notifier.send("a@b.com", NotificationKind.WELCOME, {"name": "Asha"}) is False


def test_templates_escape_user_content():
    subject, html = render(
        NotificationKind.APPLICATION_RECEIVED,
        {"job_title": "<script>alert(1)</script>", "applicant_name": "Asha"},
    )
    assert subject == "New Application Received"
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_missing_template_values_render_empty():
    _, html = render(NotificationKind.EMPLOYER_REJECTED, {"company_name": "Test College"})
    assert "Test College" in html
    assert "{reason}" not in html
