"""
Timing for service operations and HTTP requests.

Service code wraps its critical sections in ``PerformanceMonitor`` so that
note creation and listing show up in ``operation_duration_seconds`` split by
outcome. ``track_http_metrics`` feeds the request-level series.
"""

import time
from typing import Any, Callable

import structlog
from fastapi import Request

from notesaas.core.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
    operation_duration_seconds,
)

logger = structlog.get_logger(__name__)

# Operations slower than this are logged at warning level
SLOW_OPERATION_MS = 500.0


class PerformanceMonitor:
    """
    Async context manager timing one named operation.

        async with PerformanceMonitor("create_note", tenant_id=tenant_id):
            ...

    Domain rejections (quota, permissions) leave the block with an
    exception; they are recorded with outcome ``aborted`` and logged by
    whoever raised them, so nothing is logged at error level here.
    """

    def __init__(self, operation_name: str, **tags: Any):
        self.operation_name = operation_name
        self.tags = tags
        self._started: float | None = None
        self.duration_ms: float | None = None

    async def __aenter__(self) -> "PerformanceMonitor":
        self._started = time.perf_counter()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        elapsed = time.perf_counter() - self._started
        self.duration_ms = round(elapsed * 1000, 2)
        outcome = "ok" if exc_type is None else "aborted"

        operation_duration_seconds.labels(
            operation=self.operation_name,
            outcome=outcome,
        ).observe(elapsed)

        if self.duration_ms >= SLOW_OPERATION_MS:
            logger.warning(
                "slow_operation",
                operation=self.operation_name,
                duration_ms=self.duration_ms,
                outcome=outcome,
                **self.tags,
            )
        elif exc_type is not None:
            logger.debug(
                "operation_aborted",
                operation=self.operation_name,
                duration_ms=self.duration_ms,
                error_type=exc_type.__name__,
                **self.tags,
            )
        return False


def _endpoint_label(request: Request) -> str:
    """Route template (``/notes/{note_id}``) rather than the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


async def track_http_metrics(request: Request, call_next: Callable):
    method = request.method
    in_progress = http_requests_in_progress.labels(method=method)
    in_progress.inc()
    started = time.perf_counter()

    try:
        response = await call_next(request)
    finally:
        in_progress.dec()

    endpoint = _endpoint_label(request)
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        time.perf_counter() - started
    )
    http_requests_total.labels(
        method=method,
        endpoint=endpoint,
        status_code=response.status_code,
    ).inc()
    return response
