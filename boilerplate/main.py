from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from boilerplate.core.config import settings
from boilerplate.core.csrf import csrf_protect
from boilerplate.core.exceptions import AppException, DatabaseUnavailableError
from boilerplate.core.logging import setup_logging
from boilerplate.core.rate_limit import SlidingWindowLimiter
from boilerplate.core.security_headers import install_security_headers_middleware
from boilerplate.db.session import Database
from boilerplate.routers import admin, auth, health
from boilerplate.services.backup import create_backup
from boilerplate.services.cleanup import cleanup_expired_tokens
from boilerplate.services.scheduler import DailyJob

logger = logging.getLogger(__name__)


def create_app(database: Database | None = None) -> FastAPI:
    setup_logging(settings.LOG_LEVEL)
    db_handle = database or Database(settings.DATABASE_URL)

    cleanup_job = DailyJob(
        "token-cleanup",
        settings.TOKEN_CLEANUP_HOUR,
        lambda: cleanup_expired_tokens(db_handle),
    )
    backup_job = DailyJob("database-backup", settings.BACKUP_HOUR, create_backup)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if settings.TOKEN_CLEANUP_ENABLED:
            await cleanup_job.start()
        if settings.BACKUP_ENABLED and not settings.is_development:
            await backup_job.start()
        try:
            yield
        finally:
            await cleanup_job.stop()
            await backup_job.stop()
            db_handle.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan, dependencies=[Depends(csrf_protect)])
    app.state.db = db_handle
    app.state.rate_limiter = SlidingWindowLimiter()
    app.state.cleanup_job = cleanup_job
    app.state.backup_job = backup_job

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", settings.CSRF_HEADER_NAME],
    )
    install_security_headers_middleware(app, settings)

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

    @app.exception_handler(AppException)
    async def handle_app_exception(_: Request, exc: AppException) -> JSONResponse:
        headers = exc.headers if getattr(exc, "headers", None) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = {} if settings.is_production else {"errors": jsonable_errors(exc)}
        return JSONResponse(
            status_code=400,
            content={
                "error": "ValidationError",
                "message": "Validation error",
                "error_code": "VALIDATION_ERROR",
                "details": details,
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        error = DatabaseUnavailableError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, object]]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


app = create_app()
