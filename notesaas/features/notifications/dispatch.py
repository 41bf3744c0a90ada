"""
Fire-and-forget notification dispatch.

Enqueue failures never roll back the operation that triggered them; they
are logged, counted and reported to the error tracker.
"""

from typing import Any

import structlog
from celery import Task

from notesaas.core.error_tracking import error_tracker
from notesaas.core.metrics import notifications_dispatch_failures_total
from notesaas.features.notifications.tasks import (
    send_invitation_email,
    send_upgrade_request_email,
)

logger = structlog.get_logger(__name__)


def enqueue(task: Task, **kwargs: Any) -> bool:
    """Queue ``task`` with keyword arguments. Returns False if the broker refused it."""
    try:
        task.delay(**kwargs)
    except Exception as exc:
        notifications_dispatch_failures_total.labels(task_name=task.name).inc()
        error_tracker.capture_exception(exc, context={"task_name": task.name})
        logger.warning("notification_enqueue_failed", task_name=task.name, error=str(exc))
        return False

    logger.info("notification_enqueued", task_name=task.name)
    return True


def notify_invitation(email: str, invite_link: str, tenant_name: str, role: str = "Member") -> bool:
    return enqueue(
        send_invitation_email,
        email=email,
        invite_link=invite_link,
        tenant_name=tenant_name,
        role=role,
    )


def notify_upgrade_request(
    admin_emails: list[str],
    tenant_name: str,
    requesting_user_email: str,
) -> bool:
    return enqueue(
        send_upgrade_request_email,
        admin_emails=admin_emails,
        tenant_name=tenant_name,
        requesting_user_email=requesting_user_email,
    )
