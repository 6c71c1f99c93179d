"""FastAPI server for the business admin suite.

Main entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bizadmin import __version__
from bizadmin.api.routes import health, records, reports
from bizadmin.app import BizAdmin
from bizadmin.domain.errors import (
    DomainError,
    ExportError,
    RecordNotFoundError,
    RecordValidationError,
    ScheduleError,
)
from bizadmin.stores import STORES

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Start the report scheduler with the server and stop it on shutdown."""
    biz: BizAdmin = app.state.biz
    if biz.scheduler is not None:
        biz.scheduler.restore_schedules()
        biz.scheduler.start()
    logger.info("Business admin API starting up...")

    yield

    if biz.scheduler is not None:
        biz.scheduler.stop(wait=False)
    logger.info("Business admin API shutting down...")


def _error_handler(status_code: int):
    async def handler(request: Request, exc: DomainError) -> JSONResponse:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
        body = {"detail": str(exc)}
        field = getattr(exc, "field", None)
        if field:
            body["field"] = field
        return JSONResponse(status_code=status_code, content=body)
    return handler


def create_app(biz: Optional[BizAdmin] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if biz is None:
        biz = BizAdmin()
        biz.initialize()

    app = FastAPI(
        title="Business Admin API",
        description="Records, reporting, exports and scheduled report delivery",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.biz = biz

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[biz.report_config.frontend_base_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RecordNotFoundError, _error_handler(404))
    for exc_type in (RecordValidationError, ScheduleError, ExportError):
        app.add_exception_handler(exc_type, _error_handler(422))

    app.include_router(health.router, tags=["Health"])
    for name, store_cls in STORES.items():
        app.include_router(
            records.build_router(store_cls()),
            prefix="/" + name,
            tags=[name.title()],
        )
    app.include_router(reports.router, prefix="/reports", tags=["Reports"])

    return app
