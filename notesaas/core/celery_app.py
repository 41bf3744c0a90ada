"""
Celery application configuration.

Celery delivers notifications (invitation and upgrade-request emails)
outside the request cycle, with retries.
"""

import logging

from celery import Celery
from celery.signals import task_failure, task_success

from notesaas.config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "notesaas",
    broker=str(settings.redis_url),
    backend=str(settings.redis_url),
    include=[
        "notesaas.features.notifications.tasks",
    ]
)

celery_app.conf.update(
    # Task execution
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task routing
    task_routes={
        "notesaas.features.notifications.tasks.*": {"queue": "notifications"},
    },

    # Results are not consumed; keep them short-lived
    result_expires=3600,
    task_ignore_result=True,

    # Task execution settings
    task_acks_late=True,  # Acknowledge after task completes
    task_reject_on_worker_lost=True,  # Requeue if worker dies
    task_time_limit=120,
    task_soft_time_limit=90,

    # Don't hang the API when the broker is unreachable
    task_publish_retry=True,
    task_publish_retry_policy={
        "max_retries": 2,
        "interval_start": 0,
        "interval_step": 0.5,
        "interval_max": 1,
    },

    # Worker settings
    worker_prefetch_multiplier=4,
    worker_max_tasks_per_child=1000,

    # Retry settings
    task_default_max_retries=3,
    task_default_retry_delay=60,
)


@task_success.connect
def task_success_handler(sender=None, result=None, **kwargs):
    """Log successful task completion."""
    logger.info(f"Task succeeded: {sender.name}")


@task_failure.connect
def task_failure_handler(sender=None, exception=None, **kwargs):
    """Log task failures."""
    logger.error(f"Task failed: {sender.name} - {exception}")
