"""Analytics API endpoints (managers only)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from auth.dependencies import CurrentUser, require_manager
from dependencies import get_analytics_service
from .schemas import AnalyticsSummary
from .service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/summary", response_model=AnalyticsSummary)
async def get_summary(
    current_user: Annotated[CurrentUser, Depends(require_manager)],
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
):
    return await service.summary()
