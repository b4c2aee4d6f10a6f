"""Observability API endpoints.

Provides metrics, health checks, and readiness probes for monitoring.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.engine import Engine

from config import get_settings
from dependencies import get_engine, get_image_store
from domain.images.ports import ImageStorePort
from .health import (
    HealthStatus,
    check_database_health,
    check_image_store_health,
    check_redis_health,
    get_overall_health,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Expose Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get("/health", summary="Health check endpoint")
async def health_check(
    engine: Engine = Depends(get_engine),
    image_store: ImageStorePort = Depends(get_image_store),
):
    """Check database, image store and broker.

    Returns 200 OK if all components are healthy, 503 if any are unhealthy.
    """
    components = {
        "database": await run_in_threadpool(check_database_health, engine),
        "image_store": await check_image_store_health(image_store),
        "redis": await run_in_threadpool(check_redis_health, get_settings().REDIS_URL),
    }

    overall_status = get_overall_health(components)

    response_data = {
        "status": overall_status.value,
        "components": {
            name: {
                "status": comp.status.value,
                "message": comp.message,
                "latency_ms": comp.latency_ms,
            }
            for name, comp in components.items()
        }
    }

    status_code = 200 if overall_status != HealthStatus.UNHEALTHY else 503

    return JSONResponse(content=response_data, status_code=status_code)


@router.get("/ready", summary="Readiness check endpoint")
async def readiness_check(engine: Engine = Depends(get_engine)):
    """Ready when the document store answers."""
    db_health = await run_in_threadpool(check_database_health, engine)

    if db_health.status == HealthStatus.HEALTHY:
        return {
            "status": "ready",
            "message": "Application is ready to serve traffic"
        }

    return JSONResponse(
        content={
            "status": "not_ready",
            "message": db_health.message
        },
        status_code=503
    )
