"""Maintenance Desk Backend - Main FastAPI Application

Maintenance ticketing for a multi-branch retail organization.

This module creates and configures the FastAPI application, including:
- The process-wide services (retention engine, request lifecycle,
  notifications, analytics) wired to the document and image stores
- Middleware (request ID correlation, CORS)
- Exception handlers
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from config import Settings, get_settings
from database import build_engine, build_session_factory, init_db
from domain.errors import StoreError
from domain.images.ports import ImageStorePort
from domain.maintenance.ports import RequestStorePort
from domain.notifications.ports import NotificationStorePort
from infrastructure.images import create_image_store
from infrastructure.repositories import SqlNotificationRepository, SqlRequestRepository
from models.base import utcnow

# Observability
from observability.logging_config import configure_logging
from observability.middleware import RequestIDMiddleware
from observability.router import router as observability_router

# Services
from analytics.service import AnalyticsService
from maintenance_requests.service import MaintenanceRequestService
from notifications.service import NotificationService
from retention.service import RetentionService

# Domain Routers
from analytics.router import router as analytics_router
from maintenance_requests.router import router as requests_router
from notifications.router import router as notifications_router
from retention.router import router as retention_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Startup: create missing tables
    - Shutdown: close the image host client, dispose the engine
    """
    settings: Settings = app.state.settings
    logger.info("Maintenance Desk API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    if app.state.engine is not None:
        init_db(app.state.engine)

    yield

    logger.info("Maintenance Desk API shutting down...")
    close = getattr(app.state.image_store, "close", None)
    if close is not None:
        await close()
    if app.state.engine is not None:
        app.state.engine.dispose()


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with field-level details."""
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"error": str(exc.errors())}
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
        },
    )


async def store_exception_handler(
    request: Request,
    exc: StoreError
) -> JSONResponse:
    """Document store unavailable.

    Logs the full error but returns a generic message to prevent
    information leakage.
    """
    logger.error(
        f"Store error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "store_unavailable",
            "message": "The data store is unavailable. Please try again later.",
        },
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Catch-all: full details are logged but not exposed to the client."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    request_store: Optional[RequestStorePort] = None,
    notification_store: Optional[NotificationStorePort] = None,
    image_store: Optional[ImageStorePort] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """Build the application and its single set of services.

    Stores default to SQLAlchemy repositories over DATABASE_URL and the image
    store to IMAGE_STORE_BACKEND. Tests pass their own.
    """
    settings = settings or get_settings()
    clock = clock or utcnow

    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    if request_store is None or notification_store is None:
        engine = engine or build_engine(settings.DATABASE_URL)
        session_factory = build_session_factory(engine)
        request_store = request_store or SqlRequestRepository(session_factory)
        notification_store = notification_store or SqlNotificationRepository(session_factory)

    image_store = image_store or create_image_store(settings)

    is_production = settings.ENVIRONMENT == "production"
    app = FastAPI(
        title="Maintenance Desk API",
        description="Maintenance ticketing for multi-branch retail",
        version="0.1.0",
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.image_store = image_store
    app.state.retention_service = RetentionService(
        request_store=request_store,
        notification_store=notification_store,
        image_store=image_store,
        clock=clock,
    )
    app.state.request_service = MaintenanceRequestService(
        request_store=request_store,
        notification_store=notification_store,
        image_store=image_store,
        clock=clock,
    )
    app.state.notification_service = NotificationService(notification_store)
    app.state.analytics_service = AnalyticsService(request_store)

    # Middleware
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Exception handlers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StoreError, store_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Routers
    app.include_router(observability_router)
    app.include_router(requests_router, prefix="/api/v1")
    app.include_router(notifications_router, prefix="/api/v1")
    app.include_router(analytics_router, prefix="/api/v1")
    app.include_router(retention_router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        return {
            "name": "Maintenance Desk API",
            "version": "0.1.0",
            "status": "running",
        }

    return app


app = create_app()


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=get_settings().ENVIRONMENT == "development",
        log_level=get_settings().LOG_LEVEL.lower(),
    )
