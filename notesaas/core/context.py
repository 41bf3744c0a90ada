"""
Per-request context carried in a contextvar.

The middleware opens the context with request and trace IDs; the identity
dependency adds who is calling. Log processors read it back.
"""

import contextvars
from dataclasses import asdict, dataclass, replace
from typing import Any


@dataclass(frozen=True)
class RequestContext:
    request_id: str | None = None
    trace_id: str | None = None
    user_id: str | None = None
    tenant_id: str | None = None
    tenant_slug: str | None = None
    role: str | None = None


_EMPTY = RequestContext()

_context_var: contextvars.ContextVar[RequestContext] = contextvars.ContextVar(
    "request_context", default=_EMPTY
)


def start_request_context(request_id: str, trace_id: str) -> contextvars.Token:
    """Begin a fresh context for an incoming request."""
    return _context_var.set(RequestContext(request_id=request_id, trace_id=trace_id))


def bind_identity(
    user_id: str,
    tenant_id: str,
    tenant_slug: str | None = None,
    role: str | None = None,
) -> None:
    """Attach the authenticated caller to the current context."""
    _context_var.set(
        replace(
            _context_var.get(),
            user_id=user_id,
            tenant_id=tenant_id,
            tenant_slug=tenant_slug,
            role=role,
        )
    )


def get_request_context() -> dict[str, Any]:
    """Non-empty fields of the current context."""
    return {key: value for key, value in asdict(_context_var.get()).items() if value is not None}


def reset_request_context(token: contextvars.Token | None = None) -> None:
    if token is not None:
        _context_var.reset(token)
    else:
        _context_var.set(_EMPTY)
