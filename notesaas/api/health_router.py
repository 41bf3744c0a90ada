"""
Health checks.

``/health/live`` answers as long as the process serves requests.
``/health/ready`` gates traffic on the database only: Redis backs rate
limiting, which fails open, so it is reported without blocking readiness.
``/health`` reports every dependency for dashboards.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from notesaas.config import settings
from notesaas.core.cache import cache_manager
from notesaas.core.database import db_manager

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Health"])

HEALTHY = "healthy"


async def _timed(dependency: str, check: Callable[[], Awaitable[Any]]) -> dict[str, Any]:
    started = time.perf_counter()
    try:
        await check()
    except Exception as e:
        logger.warning("health_check_failed", dependency=dependency, error=str(e))
        return {"status": "unhealthy", "error": str(e)}
    return {"status": HEALTHY, "response_time_ms": round((time.perf_counter() - started) * 1000, 2)}


async def _ping_database() -> None:
    async with db_manager.engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def _check_database() -> dict[str, Any]:
    return await _timed("database", _ping_database)


async def _check_redis() -> dict[str, Any]:
    return await _timed("redis", lambda: cache_manager.client.ping())


async def _run_checks() -> dict[str, dict[str, Any]]:
    database, redis = await asyncio.gather(_check_database(), _check_redis())
    return {"database": database, "redis": redis}


@router.get("/health/live")
async def liveness() -> dict:
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness() -> JSONResponse:
    checks = await _run_checks()
    is_ready = checks["database"]["status"] == HEALTHY

    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if is_ready else "not_ready", "checks": checks},
    )


@router.get("/health")
async def health() -> dict:
    checks = await _run_checks()
    degraded = any(check["status"] != HEALTHY for check in checks.values())

    return {
        "status": "degraded" if degraded else HEALTHY,
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks,
    }
