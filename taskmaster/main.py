"""
Taskmaster API Server

Entry point for the FastAPI application.
"""

from __future__ import annotations

import argparse
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from taskmaster import __version__
from taskmaster.api.auth import router as auth_router
from taskmaster.api.v1 import router as api_v1_router
from taskmaster.assistant.gemini import GeminiClient
from taskmaster.core.config import Settings, get_settings
from taskmaster.core.database import Database, init_db, session_scope
from taskmaster.core.errors import install_exception_handlers
from taskmaster.core.logging import configure_logging
from taskmaster.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware
from taskmaster.core.timeutils import set_display_timezone
from taskmaster.services.trash import find_trash_conflicts

log = structlog.get_logger()


def _build_model_client(settings: Settings):
    if not settings.gemini_api_key:
        log.warning("assistant.disabled", reason="no TM_GEMINI_API_KEY")
        return None
    return GeminiClient(settings.gemini_api_key, settings.gemini_model)


def warn_on_insecure_defaults(settings: Settings) -> None:
    insecure = settings.insecure_defaults()
    if insecure:
        log.warning(
            "auth.insecure_defaults",
            settings=insecure,
            hint="set TM_AUTH_PASSWORD and TM_SECRET_KEY before exposing the server",
        )


def create_app(settings: Optional[Settings] = None, *, model_client=None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)
    app = FastAPI(
        title="Taskmaster",
        description="Tasks, notes and momento tracking with a tool-calling assistant.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.settings = settings
    app.state.db = Database(settings.database_url, echo=settings.debug)
    app.state.model_client = model_client if model_client is not None else _build_model_client(settings)
    set_display_timezone(settings.display_timezone)

    # Middleware (last added runs first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
    )

    install_exception_handlers(app)

    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check: the database answers a trivial query."""
        try:
            async with app.state.db.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            log.error("db.unavailable", error=str(exc))
            return {"status": "unavailable"}
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("taskmaster.starting", database=settings.database_url.split("://")[0])
        warn_on_insecure_defaults(settings)
        if settings.auto_create_tables:
            await init_db(app.state.db)
        async with session_scope(app.state.db) as session:
            conflicts = await find_trash_conflicts(session)
        if conflicts:
            # Left for the operator to reconcile; never repaired automatically.
            log.warning("trash.conflicts", task_ids=conflicts)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("taskmaster.shutting_down")
        await app.state.db.dispose()

    return app


def run() -> None:
    """Console entry point: ``taskmaster [--host H] [--port P]``."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Taskmaster API server")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    args = parser.parse_args()

    uvicorn.run(create_app(settings), host=args.host, port=args.port)


if __name__ == "__main__":
    run()
