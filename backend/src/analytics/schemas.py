"""Pydantic schemas for the analytics dashboard."""

from typing import Dict, Optional

from pydantic import Field

from schemas.base import CamelModel


class BranchStats(CamelModel):
    total: int = 0
    completed: int = 0
    pending: int = 0


class AnalyticsSummary(CamelModel):
    """Dashboard figures across all branches."""

    total_requests: int = Field(ge=0)
    by_status: Dict[str, int] = Field(description="Request count per status, every status present")
    by_branch: Dict[str, BranchStats]
    average_rating: Optional[float] = Field(default=None, description="Mean over rated requests")
    rated_requests: int = Field(ge=0)
    completion_rate: float = Field(ge=0.0, le=1.0)
