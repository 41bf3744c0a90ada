"""
Outbound email.

``EmailSender.send`` delivers one HTML message over SMTP (aiosmtplib).
Without ``SMTP_HOST`` it logs the message instead, which is what local
development and tests rely on. Delivery errors propagate so the calling
Celery task can retry.
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib
from jinja2 import DictLoader, Environment, select_autoescape

from notesaas.config import settings

logger = logging.getLogger(__name__)


INVITATION_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">You're invited!</h2>
  <p>You've been invited to join <strong>{{ tenant_name }}</strong> as a <strong>{{ role }}</strong>.</p>
  <p>Click the button below to accept your invitation and create your account:</p>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{{ invite_link }}"
       style="background-color: #3B82F6; color: white; padding: 12px 24px;
              text-decoration: none; border-radius: 6px; font-weight: bold;">
      Accept invitation
    </a>
  </div>
  <p style="color: #666; font-size: 14px;">
    If the button doesn't work, copy and paste this link into your browser:
    <br><a href="{{ invite_link }}">{{ invite_link }}</a>
  </p>
  <p style="color: #666; font-size: 12px; margin-top: 30px;">
    This invitation expires in {{ ttl_hours }} hours.
  </p>
</div>
"""

UPGRADE_REQUEST_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">Upgrade request received</h2>
  <p>User <strong>{{ requesting_user_email }}</strong> from <strong>{{ tenant_name }}</strong>
     has requested an upgrade to the Pro plan.</p>
  <p>Log in to the admin dashboard to review the request.</p>
  <p style="color: #666; font-size: 12px; margin-top: 30px;">
    This is an automated notification.
  </p>
</div>
"""

templates = Environment(
    loader=DictLoader({
        "invitation.html": INVITATION_TEMPLATE,
        "upgrade_request.html": UPGRADE_REQUEST_TEMPLATE,
    }),
    autoescape=select_autoescape(["html"]),
)


class EmailSender:
    """SMTP email sender."""

    def __init__(self) -> None:
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.start_tls = settings.smtp_start_tls
        self.from_email = settings.email_from

    def build_message(self, to: list[str], subject: str, html: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.from_email
        message["To"] = ", ".join(to)
        message.attach(MIMEText(html, "html"))
        return message

    async def send(self, to: list[str], subject: str, html: str) -> None:
        """Send an email, or log it when SMTP is not configured."""
        if not self.smtp_host:
            logger.info(f"SMTP not configured, email not sent: to={to} subject={subject!r}")
            return

        message = self.build_message(to, subject, html)
        await aiosmtplib.send(
            message,
            hostname=self.smtp_host,
            port=self.smtp_port,
            username=self.smtp_user,
            password=self.smtp_password,
            start_tls=self.start_tls,
        )
        logger.info(f"Email sent to {to}: {subject}")

    async def send_invitation(
        self,
        email: str,
        invite_link: str,
        tenant_name: str,
        role: str = "Member",
    ) -> None:
        html = templates.get_template("invitation.html").render(
            tenant_name=tenant_name,
            role=role,
            invite_link=invite_link,
            ttl_hours=settings.invite_ttl_hours,
        )
        await self.send([email], f"You're invited to join {tenant_name}", html)

    async def send_upgrade_request(
        self,
        admin_emails: list[str],
        tenant_name: str,
        requesting_user_email: str,
    ) -> None:
        if not admin_emails:
            logger.warning(f"No admins to notify about upgrade request in {tenant_name}")
            return

        html = templates.get_template("upgrade_request.html").render(
            tenant_name=tenant_name,
            requesting_user_email=requesting_user_email,
        )
        await self.send(admin_emails, f"Upgrade request for {tenant_name}", html)


email_sender = EmailSender()
