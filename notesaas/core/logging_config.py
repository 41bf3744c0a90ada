"""
Structured logging (structlog).

Every entry carries the service identity and, inside a request, the
request/trace IDs and the authenticated user and tenant. Secrets are
scrubbed before rendering: whole values under sensitive keys, and bearer
tokens or invitation tokens embedded in free text such as signup links.

JSON output for aggregation in production, console output in development.
"""

import logging
import re
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from notesaas.config import settings
from notesaas.core.context import get_request_context

REDACTED = "***REDACTED***"

SENSITIVE_KEYS = ("password", "secret", "token", "authorization", "invite_link")

_EMBEDDED_SECRETS = (
    re.compile(r"(token=)[^&\s]+"),
    re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+"),
)

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "aiosmtplib": logging.WARNING,
    "passlib": logging.ERROR,
    "celery": logging.INFO,
}


def add_service_info(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["service"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def add_request_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Merge the current request context; explicit fields win."""
    for key, value in get_request_context().items():
        event_dict.setdefault(key, value)
    return event_dict


def _scrub(value: str) -> str:
    for pattern in _EMBEDDED_SECRETS:
        value = pattern.sub(rf"\g<1>{REDACTED}", value)
    return value


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    for key, value in event_dict.items():
        if any(marker in key.lower() for marker in SENSITIVE_KEYS):
            event_dict[key] = REDACTED
        elif isinstance(value, str):
            event_dict[key] = _scrub(value)
    return event_dict


def _renderer() -> Processor:
    if settings.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging() -> None:
    """Configure structlog and route stdlib logging through the same stream."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_service_info,
            add_request_context,
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(quiet_level, level))

    structlog.get_logger(__name__).debug(
        "logging_configured",
        log_level=settings.log_level,
        log_format=settings.log_format,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
