"""
Main FastAPI application.

WHY: This is the entry point for the application. It configures logging,
middleware, routes, exception handlers and the background scheduler.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from receiptdesk.api import (
    admin,
    analytics,
    clients,
    config,
    currencies,
    email,
    export,
    invoices,
    receipts,
    tax_settings,
    templates,
)
from receiptdesk.core.config import settings
from receiptdesk.core.exception_handlers import (
    app_exception_handler,
    database_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from receiptdesk.core.exceptions import AppException
from receiptdesk.db.session import dispose_engine
from receiptdesk.middleware import RequestContextMiddleware, RequestIdLogFilter
from receiptdesk.services.scheduler import get_scheduler_status, shutdown_scheduler, start_scheduler

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s"


def configure_logging() -> None:
    """
    Apply LOG_LEVEL and a format carrying the request id.

    Runs once; repeated app creation (tests) does not stack handlers.
    """
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL.upper())
    if any(getattr(h, "_receiptdesk", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdLogFilter())
    handler._receiptdesk = True
    root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the scheduler (when enabled) and release the engine on shutdown."""
    if settings.SCHEDULER_ENABLED:
        await start_scheduler()
    logger.info(f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
    yield
    await shutdown_scheduler()
    await dispose_engine()


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    WHY: Factory pattern allows easier testing with different configurations.

    Returns:
        Configured FastAPI application instance
    """
    configure_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Encrypted receipts and invoices for freelancers",
        version=settings.VERSION,
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )

    # Exception handlers keep error bodies uniform and free of sensitive data
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """Liveness probe; does not touch the database."""
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "scheduler": get_scheduler_status(),
        }

    @app.get("/", tags=["root"])
    async def root() -> dict:
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": f"{settings.API_PREFIX}/docs",
        }

    for module in (
        receipts,
        invoices,
        clients,
        templates,
        email,
        currencies,
        tax_settings,
        config,
        export,
        analytics,
        admin,
    ):
        app.include_router(module.router, prefix=settings.API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "receiptdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info" if settings.DEBUG else "warning",
    )
