"""
Report Desk - FastAPI Main Application
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reportdesk.api.router import api_router
from reportdesk.core.config import Settings, settings as default_settings
from reportdesk.core.errors import PersistenceFailure, ReportDeskError, ValidationFailure
from reportdesk.core.logging import configure_logging
from reportdesk.models.database import ReportStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the report store for the lifetime of the process."""
        configure_logging(settings.log_level)
        logger.info("%s v%s starting...", settings.app_name, settings.version)
        store = ReportStore(settings.sqlite_path, password_iterations=settings.password_iterations)
        await store.connect()
        app.state.store = store
        try:
            yield
        finally:
            logger.info("Shutting down...")
            await store.close()

    app = FastAPI(
        title=settings.app_name,
        description="Submit, browse, close and comment on incident reports",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ReportDeskError)
    async def report_desk_error_handler(request: Request, exc: ReportDeskError):
        level = logging.ERROR if isinstance(exc, PersistenceFailure) else logging.WARNING
        logger.log(level, "[API] %s %s -> %s: %s", request.method, request.url.path, exc.code.value, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
        error = ValidationFailure(
            "Request body is malformed",
            details={"fields": [f for f in fields if f] or ["body"]},
        )
        logger.warning("[API] %s %s -> %s: %s", request.method, request.url.path, error.code.value, fields)
        return JSONResponse(status_code=error.http_status, content=error.to_dict())

    # Routes
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": settings.version}

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.version,
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()
