"""
Request context middleware.
"""

import re
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from notesaas.core.context import reset_request_context, start_request_context

logger = structlog.get_logger(__name__)

# Inbound IDs are echoed back and logged; keep them short and printable
_INBOUND_ID = re.compile(r"^[A-Za-z0-9._-]{8,64}$")

# Health-check and scrape traffic is logged at debug level only
QUIET_PATHS = ("/health", "/metrics")


def _inbound_or_new(value: str | None) -> str:
    if value and _INBOUND_ID.match(value):
        return value
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Opens the request context and logs one line per request.

    Accepts ``X-Request-ID`` / ``X-Trace-ID`` from a proxy when well formed,
    otherwise generates them. Both are returned as response headers. The
    completion line carries the caller's user and tenant, read from request
    state because the downstream app runs in a child context.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        request_id = _inbound_or_new(request.headers.get("X-Request-ID"))
        trace_id = _inbound_or_new(request.headers.get("X-Trace-ID"))

        request.state.request_id = request_id
        request.state.trace_id = trace_id
        request.state.tenant_id = None
        request.state.user_id = None

        token = start_request_context(request_id, trace_id)
        log = logger.debug if request.url.path.startswith(QUIET_PATHS) else logger.info
        started = time.perf_counter()

        log("request_started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                error=str(e),
                exc_info=True,
            )
            raise
        else:
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Trace-ID"] = trace_id
            response.headers["X-Process-Time"] = str(duration_ms)

            log(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
                user_id=request.state.user_id,
                tenant_id=request.state.tenant_id,
            )
            return response
        finally:
            reset_request_context(token)
