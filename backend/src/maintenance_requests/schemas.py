"""Pydantic schemas for maintenance request endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from domain.maintenance import MAX_RATING, MIN_RATING, RequestStatus
from domain.maintenance.ports import StoredRequest
from schemas.base import CamelModel


class MaintenanceRequestResponse(CamelModel):
    """A maintenance request as returned to clients."""

    id: str
    branch_code: str
    user_id: Optional[str] = None
    problem_type: str
    description: str
    status: RequestStatus
    timestamp: datetime
    image_url: Optional[str] = None
    rating: Optional[int] = None
    feedback: Optional[str] = None
    manager_notes: Optional[str] = None

    @classmethod
    def from_stored(cls, request: StoredRequest) -> "MaintenanceRequestResponse":
        return cls(
            id=request.id,
            branch_code=request.branch_code,
            user_id=request.user_id,
            problem_type=request.problem_type,
            description=request.description,
            status=request.status,
            timestamp=request.timestamp,
            image_url=request.image_url,
            rating=request.rating,
            feedback=request.feedback,
            manager_notes=request.manager_notes,
        )


class StatusUpdate(CamelModel):
    """Body of PATCH /requests/{id}/status."""

    status: RequestStatus
    manager_notes: Optional[str] = Field(default=None, max_length=2000)


class RatingSubmission(CamelModel):
    """Body of POST /requests/{id}/rating."""

    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)
    feedback: Optional[str] = Field(default=None, max_length=2000)
