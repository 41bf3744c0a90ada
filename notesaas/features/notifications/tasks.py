"""
Background tasks for notification delivery.

Tasks run in Celery workers, separate from the API server.
"""

import asyncio
import logging

import aiosmtplib

from notesaas.core.celery_app import celery_app
from notesaas.features.notifications.mailer import email_sender

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (aiosmtplib.SMTPException, OSError)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def send_invitation_email(
    self,
    email: str,
    invite_link: str,
    tenant_name: str,
    role: str = "Member",
) -> None:
    """Deliver an invitation email, retrying transient SMTP failures."""
    logger.info(f"Sending invitation email to {email} for tenant {tenant_name}")

    try:
        asyncio.run(
            email_sender.send_invitation(email, invite_link, tenant_name, role)
        )
    except RETRYABLE_ERRORS as exc:
        logger.warning(
            f"Invitation email to {email} failed "
            f"(attempt {self.request.retries + 1}): {exc}"
        )
        raise self.retry(exc=exc)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def send_upgrade_request_email(
    self,
    admin_emails: list[str],
    tenant_name: str,
    requesting_user_email: str,
) -> None:
    """Notify a tenant's admins that a member asked for Pro."""
    logger.info(f"Sending upgrade request email for tenant {tenant_name}")

    try:
        asyncio.run(
            email_sender.send_upgrade_request(admin_emails, tenant_name, requesting_user_email)
        )
    except RETRYABLE_ERRORS as exc:
        logger.warning(f"Upgrade request email for {tenant_name} failed: {exc}")
        raise self.retry(exc=exc)
