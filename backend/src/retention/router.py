"""FastAPI router for retention management endpoints.

Provides manager APIs for:
- Viewing storage statistics and what a 30-day cleanup would remove
- Manually triggering a request sweep or a full sweep

All endpoints require a manager token.
"""

import logging
from typing import Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from auth.dependencies import CurrentUser, require_manager
from dependencies import get_retention_service
from .schemas import (
    CleanupCommand,
    FullSweepResult,
    RequestSweepResult,
    StorageStatistics,
)
from .service import RetentionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cleanup", tags=["retention"])

# Threshold used by POST /cleanup {type: "requests"} when daysOld is omitted.
# Deliberately differs from DEFAULT_REQUEST_RETENTION_DAYS (30) used by the
# engine and the scheduled sweep; existing clients rely on the 7-day value.
DEFAULT_BOUNDARY_FALLBACK_DAYS = 7

CLEANUP_TYPE_REQUESTS = "requests"
CLEANUP_TYPE_FULL = "full"


@router.get("", response_model=StorageStatistics, response_model_by_alias=True)
async def get_storage_statistics(
    current_user: CurrentUser = Depends(require_manager),
    service: RetentionService = Depends(get_retention_service),
) -> Union[StorageStatistics, JSONResponse]:
    """Get collection sizes and cleanup estimates.

    Returns:
        StorageStatistics: Counts computed against the fixed 30-day threshold

    Raises:
        500: If the document store cannot be read
    """
    try:
        stats = await service.get_storage_statistics()
    except Exception as e:
        logger.error(
            "Failed to get storage stats",
            exc_info=True,
            extra={"user_id": current_user.user_id, "error": str(e)}
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to get storage stats", "details": str(e)},
        )

    logger.info(
        "Retrieved storage statistics",
        extra={
            "user_id": current_user.user_id,
            "old_completed_requests": stats.old_completed_requests,
        }
    )
    return stats


@router.post(
    "",
    response_model=Union[FullSweepResult, RequestSweepResult],
    response_model_by_alias=True,
)
async def trigger_cleanup(
    command: CleanupCommand,
    current_user: CurrentUser = Depends(require_manager),
    service: RetentionService = Depends(get_retention_service),
) -> Union[FullSweepResult, RequestSweepResult, JSONResponse]:
    """Run a sweep synchronously and return its summary.

    Body:
        type: "requests" sweeps completed requests older than daysOld
              (default 7); "full" runs both sweeps with their own defaults
              and ignores daysOld
        daysOld: Optional threshold in days

    Returns:
        The sweep result. A sweep that failed internally still answers 200
        with success=false.

    Raises:
        400: Unknown or missing type (the engine is not invoked)
        500: Unexpected failure outside the sweep
    """
    if command.type not in (CLEANUP_TYPE_REQUESTS, CLEANUP_TYPE_FULL):
        logger.warning(
            f"Rejected cleanup with invalid type {command.type!r}",
            extra={"user_id": current_user.user_id}
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid cleanup type"},
        )

    logger.info(
        f"Cleanup triggered: {command.type}",
        extra={
            "user_id": current_user.user_id,
            "cleanup_type": command.type,
            "days_old": command.days_old,
        }
    )

    try:
        if command.type == CLEANUP_TYPE_REQUESTS:
            days_old = (
                command.days_old if command.days_old is not None else DEFAULT_BOUNDARY_FALLBACK_DAYS
            )
            return await service.sweep_completed_requests(days_old)

        return await service.run_full_sweep()

    except Exception as e:
        logger.error(
            "Cleanup failed",
            exc_info=True,
            extra={"user_id": current_user.user_id, "error": str(e)}
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Cleanup failed", "details": str(e)},
        )
