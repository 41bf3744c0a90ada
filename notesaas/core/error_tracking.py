"""
Error tracking and reporting.

Thin facade over sentry-sdk so call sites don't care whether
Sentry is configured. When disabled, events are only logged.
"""

from typing import Any

import sentry_sdk
import structlog
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from notesaas.config import settings

logger = structlog.get_logger(__name__)


class ErrorTracker:
    """Reports unexpected failures to Sentry, or to the log when Sentry is off."""

    def __init__(self, enabled: bool = False, dsn: str | None = None):
        self.enabled = bool(enabled and dsn)
        self.dsn = dsn

    def init(self) -> None:
        """Initialize Sentry SDK (no-op when disabled)."""
        if not self.enabled:
            return

        sentry_sdk.init(
            dsn=self.dsn,
            environment=settings.environment,
            release=settings.app_version,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            integrations=[
                FastApiIntegration(),
                SqlalchemyIntegration(),
                AsyncioIntegration(),
            ],
        )
        logger.info("sentry_initialized")

    def capture_exception(
        self,
        exception: BaseException,
        context: dict[str, Any] | None = None,
    ) -> str | None:
        """
        Capture and report an exception.

        Returns:
            Event ID from Sentry (or None when disabled)
        """
        if not self.enabled:
            logger.error(
                "exception_captured",
                exception=str(exception),
                exception_type=type(exception).__name__,
                context=context,
                exc_info=exception,
            )
            return None

        with sentry_sdk.new_scope() as scope:
            for key, value in (context or {}).items():
                scope.set_extra(key, value)
            return sentry_sdk.capture_exception(exception)


error_tracker = ErrorTracker(
    enabled=settings.sentry_enabled,
    dsn=settings.sentry_dsn,
)
