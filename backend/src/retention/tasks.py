"""Celery tasks for data retention cleanup.

This module defines the scheduled and on-demand retention tasks.

Tasks:
- retention.full_sweep: Daily job running at 02:00 UTC (see workers.celery_app)
- retention.sweep_requests: Completed-request sweep with an explicit threshold
- retention.sweep_notifications: Notification sweep with an explicit threshold

Each task builds its own store connections, runs the sweep to completion and
returns the summary as a dict. Tasks never raise; sweeps are idempotent so a
failed run is simply picked up by the next one.
"""

import asyncio
import logging
from typing import Any, Dict

from celery import shared_task

from config import get_settings
from database import build_engine, build_session_factory
from infrastructure.images import create_image_store
from infrastructure.repositories import SqlNotificationRepository, SqlRequestRepository
from .service import (
    DEFAULT_NOTIFICATION_RETENTION_DAYS,
    DEFAULT_REQUEST_RETENTION_DAYS,
    RetentionService,
)

logger = logging.getLogger(__name__)


def _build_service() -> RetentionService:
    """Construct a retention service from environment settings."""
    settings = get_settings()
    session_factory = build_session_factory(build_engine(settings.DATABASE_URL))

    return RetentionService(
        request_store=SqlRequestRepository(session_factory),
        notification_store=SqlNotificationRepository(session_factory),
        image_store=create_image_store(settings),
    )


@shared_task(name="retention.full_sweep", bind=True)
def retention_full_sweep_task(self) -> Dict[str, Any]:
    """Run both sweeps with their default thresholds.

    Scheduled daily at 02:00 UTC via Celery Beat. Running twice in succession
    finds nothing more to delete the second time.

    Returns:
        Dict with the full sweep summary (camelCase keys) and a `status` of
        "completed", "completed_with_errors" or "failed"
    """
    logger.info("Retention full sweep task started")

    try:
        service = _build_service()
        result = asyncio.run(service.run_full_sweep())

    except Exception as e:
        logger.error(
            "Retention full sweep task failed",
            exc_info=True,
            extra={"error": str(e)}
        )
        return {
            'status': 'failed',
            'error': str(e),
            'totalDeleted': 0,
        }

    summary = result.model_dump(by_alias=True)
    summary['status'] = 'completed' if result.success else 'completed_with_errors'

    logger.info(
        "Retention full sweep task completed",
        extra={
            "total_deleted": result.total_deleted,
            "total_images_processed": result.total_images_processed,
            "has_errors": not result.success,
        }
    )
    return summary


@shared_task(name="retention.sweep_requests", bind=True)
def retention_sweep_requests_task(self, days_old: int = DEFAULT_REQUEST_RETENTION_DAYS) -> Dict[str, Any]:
    """Sweep completed requests older than `days_old` days."""
    logger.info(f"Retention request sweep task started ({days_old} days)")

    try:
        service = _build_service()
        result = asyncio.run(service.sweep_completed_requests(days_old))
    except Exception as e:
        logger.error(
            "Retention request sweep task failed",
            exc_info=True,
            extra={"collection": "requests", "error": str(e)}
        )
        return {
            'success': False,
            'deletedCount': 0,
            'message': f"Cleanup failed: {e}",
        }

    return result.model_dump(by_alias=True)


@shared_task(name="retention.sweep_notifications", bind=True)
def retention_sweep_notifications_task(
    self,
    days_old: int = DEFAULT_NOTIFICATION_RETENTION_DAYS,
) -> Dict[str, Any]:
    """Sweep notifications older than `days_old` days."""
    logger.info(f"Retention notification sweep task started ({days_old} days)")

    try:
        service = _build_service()
        result = asyncio.run(service.sweep_old_notifications(days_old))
    except Exception as e:
        logger.error(
            "Retention notification sweep task failed",
            exc_info=True,
            extra={"collection": "notifications", "error": str(e)}
        )
        return {
            'success': False,
            'deletedCount': 0,
            'message': f"Notification cleanup failed: {e}",
        }

    return result.model_dump(by_alias=True)
