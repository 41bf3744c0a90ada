"""
FastAPI application factory.

Every error leaves the API in the same envelope::

    {"success": false, "error": "<message>", "code": "<machine code>", "details": ...}
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notesaas.config import settings
from notesaas.core.cache import cache_manager
from notesaas.core.database import db_manager
from notesaas.core.error_tracking import error_tracker
from notesaas.core.exceptions import AuthenticationError, NoteSaaSException
from notesaas.core.logging_config import get_logger, setup_logging
from notesaas.core.metrics import app_info
from notesaas.core.middleware import RequestContextMiddleware
from notesaas.core.performance import track_http_metrics

setup_logging()
logger = get_logger(__name__)

# Codes for errors raised by the framework itself (routing, rate limiting)
HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "unauthenticated",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_429_TOO_MANY_REQUESTS: "rate_limited",
}


INTERNAL_ERROR_MESSAGE = "An internal error occurred."


def error_body(message: str, code: str, details: Any = None) -> dict:
    body = {"success": False, "error": message, "code": code}
    if details:
        body["details"] = details
    return body


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    logger.info(
        "application_starting",
        version=settings.app_version,
        environment=settings.environment,
        identity_verifier=settings.identity_verifier,
    )

    error_tracker.init()
    db_manager.init()
    if settings.db_create_tables:
        await db_manager.create_tables()
    await cache_manager.init()
    app_info.info({"version": settings.app_version, "environment": settings.environment})

    logger.info("application_ready")
    try:
        yield
    finally:
        await db_manager.close()
        await cache_manager.close()
        logger.info("application_shutdown_complete")


def _register_middleware(app: FastAPI) -> None:
    # Last added runs first: metrics wrap CORS, which wraps the request context
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Trace-ID", "Retry-After"],
    )
    app.middleware("http")(track_http_metrics)


def _register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(NoteSaaSException)
    async def domain_error_handler(request: Request, exc: NoteSaaSException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("application_error", path=request.url.path, error=exc.message)
            error_tracker.capture_exception(exc, context={"path": request.url.path})
        else:
            logger.info(
                "request_rejected",
                path=request.url.path,
                code=exc.error_code,
                status_code=exc.status_code,
            )

        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.error_code, exc.details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        logger.info("validation_error", path=request.url.path, error_count=len(errors))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("Invalid request", "validation_error", errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        error_tracker.capture_exception(
            exc,
            context={"request_id": request_id, "path": request.url.path, "method": request.method},
        )

        # Exception text stays in the log and Sentry; it may carry SQL and row values
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={**error_body(INTERNAL_ERROR_MESSAGE, "internal"), "request_id": request_id},
        )


def _register_routers(app: FastAPI) -> None:
    from notesaas.api.health_router import router as health_router
    from notesaas.api.metrics_router import router as metrics_router
    from notesaas.api.v1.router import v1_router

    app.include_router(health_router)
    if settings.metrics_enabled:
        app.include_router(metrics_router)
    app.include_router(v1_router, prefix="/api")

    @app.get("/", tags=["Root"])
    async def root() -> dict:
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs" if settings.is_development else None,
            "health": "/health",
            "api": "/api/v1",
        }


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Multi-tenant notes API with plan quotas, roles and invitations",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    _register_middleware(app)
    _register_exception_handlers(app)
    _register_routers(app)
    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "notesaas.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload and settings.is_development,
        log_level=settings.log_level.lower(),
        access_log=False,  # RequestContextMiddleware logs every request
    )
