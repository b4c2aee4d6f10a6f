"""Pydantic schemas for retention sweeps and storage statistics.

This module defines retention-related schemas:
- RequestSweepResult: Outcome of one sweep over completed requests
- NotificationSweepResult: Outcome of one sweep over notifications
- FullSweepResult: Both sweeps plus aggregate counts
- StorageStatistics: Read-only collection sizes and cleanup estimates
- CleanupCommand: Body of POST /cleanup
"""

from typing import Optional

from pydantic import Field

from schemas.base import CamelModel


class RequestSweepResult(CamelModel):
    """Outcome of a sweep over completed maintenance requests.

    `images_processed` counts image removal attempts, including the no-op
    attempts made against hosts without a delete API. `images_deleted` counts
    only images the host actually removed.
    """

    success: bool = Field(description="True only if the query and every delete succeeded")
    deleted_count: int = Field(default=0, ge=0, description="Requests confirmed deleted")
    images_processed: int = Field(default=0, ge=0, description="Image removal attempts")
    images_deleted: int = Field(default=0, ge=0, description="Images actually removed")
    message: str = Field(description="Human-readable summary or error description")


class NotificationSweepResult(CamelModel):
    """Outcome of a sweep over notifications."""

    success: bool = Field(description="True only if the query and every delete succeeded")
    deleted_count: int = Field(default=0, ge=0, description="Notifications confirmed deleted")
    message: str = Field(description="Human-readable summary or error description")


class FullSweepResult(CamelModel):
    """Both sweeps run back to back."""

    requests: RequestSweepResult
    notifications: NotificationSweepResult
    total_deleted: int = Field(ge=0)
    total_images_processed: int = Field(ge=0)

    @property
    def success(self) -> bool:
        return self.requests.success and self.notifications.success


class StorageStatistics(CamelModel):
    """Collection sizes and what a 30-day cleanup would remove.

    "Old" always means older than the fixed statistics threshold, regardless
    of the daysOld a caller later passes to a sweep.
    """

    total_requests: int = Field(default=0, ge=0)
    completed_requests: int = Field(default=0, ge=0)
    old_completed_requests: int = Field(default=0, ge=0)
    total_notifications: int = Field(default=0, ge=0)
    total_images_stored: int = Field(default=0, ge=0)
    old_images_for_cleanup: int = Field(default=0, ge=0)
    estimated_cleanup_savings: int = Field(default=0, ge=0)
    estimated_image_cleanup: int = Field(default=0, ge=0)
    image_deletion_supported: bool = Field(
        default=False,
        description="Whether the image host can actually delete images",
    )


class CleanupCommand(CamelModel):
    """Body of POST /cleanup.

    `type` is validated by the route rather than here so an unknown value is
    answered with 400 and a plain error body.
    """

    type: Optional[str] = Field(default=None, description='"requests" or "full"')
    days_old: Optional[int] = Field(
        default=None,
        ge=1,
        le=3650,
        description="Retention threshold in days for type=requests",
    )
