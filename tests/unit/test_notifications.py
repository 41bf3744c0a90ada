"""
Unit tests for notification dispatch and email rendering.
"""

from types import SimpleNamespace

import pytest

from notesaas.features.notifications import mailer
from notesaas.features.notifications.dispatch import enqueue as real_enqueue
from notesaas.features.notifications.mailer import EmailSender, templates


class FakeTask:
    name = "notesaas.features.notifications.tasks.fake"

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = []

    def delay(self, **kwargs):
        if self.error:
            raise self.error
        self.calls.append(kwargs)


@pytest.mark.unit
class TestEnqueue:

    def test_success(self):
        task = FakeTask()

        assert real_enqueue(task, email="a@acme.com") is True
        assert task.calls == [{"email": "a@acme.com"}]

    def test_broker_failure_is_swallowed(self):
        task = FakeTask(error=ConnectionError("broker down"))

        assert real_enqueue(task, email="a@acme.com") is False


@pytest.mark.unit
class TestEmailSender:

    async def test_without_smtp_host_nothing_is_sent(self, monkeypatch):
        sent = []

        async def fake_send(message, **kwargs):
            sent.append(message)

        monkeypatch.setattr(mailer.aiosmtplib, "send", fake_send)
        sender = EmailSender()
        sender.smtp_host = None

        await sender.send_invitation("new@acme.com", "http://app/signup?token=t", "Acme")

        assert sent == []

    async def test_with_smtp_host_delivers(self, monkeypatch):
        sent = []

        async def fake_send(message, **kwargs):
            sent.append(SimpleNamespace(message=message, kwargs=kwargs))

        monkeypatch.setattr(mailer.aiosmtplib, "send", fake_send)
        sender = EmailSender()
        sender.smtp_host = "smtp.acme.com"

        await sender.send_invitation("new@acme.com", "http://app/signup?token=t", "Acme")

        assert len(sent) == 1
        assert sent[0].message["To"] == "new@acme.com"
        assert sent[0].message["Subject"] == "You're invited to join Acme"
        assert sent[0].kwargs["hostname"] == "smtp.acme.com"

    async def test_upgrade_request_without_admins(self, monkeypatch):
        sent = []

        async def fake_send(message, **kwargs):
            sent.append(message)

        monkeypatch.setattr(mailer.aiosmtplib, "send", fake_send)
        sender = EmailSender()
        sender.smtp_host = "smtp.acme.com"

        await sender.send_upgrade_request([], "Acme", "user@acme.com")

        assert sent == []


@pytest.mark.unit
def test_templates_escape_html():
    html = templates.get_template("invitation.html").render(
        tenant_name="<script>alert(1)</script>",
        role="Member",
        invite_link="http://app/signup?token=t",
        ttl_hours=168,
    )

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "168 hours" in html
