"""Maintenance request service - lifecycle of a branch's issue report.

Branch users file requests (optionally with a photo), managers move them
through the status state machine, submitters may cancel early and rate
completed work. Each lifecycle event writes one notification; those writes
are best effort and never fail the request operation.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from auth.dependencies import CurrentUser
from domain.images.ports import ImageStorePort
from domain.images.validation import sanitize_filename
from domain.maintenance import (
    MAX_RATING,
    MIN_RATING,
    RequestStatus,
    can_cancel,
    can_rate,
    can_transition,
    get_status_label,
    is_known_problem_type,
)
from domain.maintenance.ports import NewRequest, RequestStorePort, StoredRequest
from domain.notifications import NotificationType
from domain.notifications.ports import NewNotification, NotificationStorePort
from models.base import utcnow
from observability.metrics import (
    notification_write_failures_total,
    request_status_changes_total,
    requests_created_total,
)

logger = logging.getLogger(__name__)


class RequestNotFoundError(Exception):
    """Request does not exist or is not visible to the caller."""
    pass


class PermissionDeniedError(Exception):
    """Caller may see the request but not perform this action."""
    pass


class InvalidTransitionError(Exception):
    """Status change not allowed from the current status."""
    pass


class RatingNotAllowedError(Exception):
    """Rating rejected: not completed, already rated, or out of range."""
    pass


@dataclass
class ImageUpload:
    """Photo attached to a new request, already validated by the caller."""
    content: bytes
    filename: str
    mime_type: str


class MaintenanceRequestService:
    """Service for maintenance request operations."""

    def __init__(
        self,
        request_store: RequestStorePort,
        notification_store: NotificationStorePort,
        image_store: ImageStorePort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.request_store = request_store
        self.notification_store = notification_store
        self.image_store = image_store
        self.clock = clock

    async def create_request(
        self,
        user: CurrentUser,
        problem_type: str,
        description: str,
        image: Optional[ImageUpload] = None,
    ) -> StoredRequest:
        """File a new request for the caller's branch.

        The photo is uploaded first; if the upload fails nothing is written.

        Raises:
            ValueError: Unknown problem type or empty description
            ImageStoreError: If the photo upload fails
            StoreError: If the request cannot be written
        """
        if not is_known_problem_type(problem_type):
            raise ValueError(f"Unknown problem type: {problem_type}")
        description = (description or "").strip()
        if not description:
            raise ValueError("Description must not be empty")

        image_url = None
        if image is not None:
            uploaded = await self.image_store.upload_image(
                image.content,
                sanitize_filename(image.filename),
                image.mime_type,
            )
            image_url = uploaded.url

        request = await self.request_store.add(NewRequest(
            branch_code=user.branch_code,
            user_id=user.user_id,
            problem_type=problem_type,
            description=description,
            status=RequestStatus.UNDER_REVIEW,
            timestamp=self.clock(),
            image_url=image_url,
        ))

        requests_created_total.labels(
            problem_type=problem_type,
            with_image=str(image_url is not None).lower(),
        ).inc()
        logger.info(
            f"Created maintenance request {request.id}",
            extra={"branch_code": user.branch_code, "user_id": user.user_id}
        )

        await self._notify(NewNotification(
            title="New Maintenance Request",
            message=f"New {problem_type} request from {user.branch_code} branch",
            type=NotificationType.NEW_REQUEST,
            timestamp=self.clock(),
            branch_code=user.branch_code,
            is_for_manager=True,
            request_id=request.id,
        ))

        return request

    async def list_requests(
        self,
        user: CurrentUser,
        status: Optional[RequestStatus] = None,
        limit: Optional[int] = None,
    ) -> List[StoredRequest]:
        """Managers see every request; other users only their own. Newest first."""
        if user.is_manager:
            return await self.request_store.find(status=status, limit=limit)
        return await self.request_store.find(status=status, user_id=user.user_id, limit=limit)

    async def get_request(self, user: CurrentUser, request_id: str) -> StoredRequest:
        """Fetch one request visible to the caller.

        Raises:
            RequestNotFoundError: Missing, or owned by another user
        """
        request = await self.request_store.get(request_id)
        if request is None or not self._can_view(user, request):
            raise RequestNotFoundError(request_id)
        return request

    async def update_status(
        self,
        user: CurrentUser,
        request_id: str,
        new_status: RequestStatus,
        manager_notes: Optional[str] = None,
    ) -> StoredRequest:
        """Apply a manager status change and notify the branch.

        Raises:
            PermissionDeniedError: Caller is not a manager
            RequestNotFoundError: Request does not exist
            InvalidTransitionError: Change not allowed from the current status
        """
        if not user.is_manager:
            raise PermissionDeniedError("Only managers can change request status")

        request = await self.request_store.get(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)

        new_status = RequestStatus(new_status)
        if not can_transition(request.status, new_status):
            raise InvalidTransitionError(
                f"Cannot change status from {request.status.value} to {new_status.value}"
            )

        changes = {"status": new_status}
        if manager_notes is not None:
            changes["manager_notes"] = manager_notes.strip() or None

        updated = await self.request_store.update(request_id, **changes)
        if updated is None:
            raise RequestNotFoundError(request_id)

        request_status_changes_total.labels(to_status=new_status.value).inc()
        logger.info(
            f"Request {request_id} status {request.status.value} -> {new_status.value}",
            extra={"branch_code": updated.branch_code, "user_id": user.user_id}
        )

        message = (
            f"Your {updated.problem_type} request status changed to "
            f"{get_status_label(new_status)}"
        )
        if updated.manager_notes:
            message = f"{message}. Notes: {updated.manager_notes}"

        await self._notify(NewNotification(
            title="Request Status Updated",
            message=message,
            type=NotificationType.STATUS_UPDATE,
            timestamp=self.clock(),
            branch_code=updated.branch_code,
            is_for_manager=False,
            request_id=updated.id,
        ))

        return updated

    async def cancel_request(self, user: CurrentUser, request_id: str) -> StoredRequest:
        """Withdraw a request before work starts and tell the managers.

        Raises:
            RequestNotFoundError: Missing or not visible
            PermissionDeniedError: Caller is not the submitter
            InvalidTransitionError: Work already started or request closed
        """
        request = await self.get_request(user, request_id)
        if request.user_id != user.user_id:
            raise PermissionDeniedError("Only the submitter can cancel a request")
        if not can_cancel(request.status):
            raise InvalidTransitionError(
                f"Cannot cancel a request in status {request.status.value}"
            )

        updated = await self.request_store.update(request_id, status=RequestStatus.CANCELLED)
        if updated is None:
            raise RequestNotFoundError(request_id)

        request_status_changes_total.labels(to_status=RequestStatus.CANCELLED.value).inc()
        logger.info(
            f"Request {request_id} cancelled by submitter",
            extra={"branch_code": updated.branch_code, "user_id": user.user_id}
        )

        await self._notify(NewNotification(
            title="Request Cancelled",
            message=f"{updated.branch_code} branch cancelled their {updated.problem_type} request",
            type=NotificationType.STATUS_UPDATE,
            timestamp=self.clock(),
            branch_code=updated.branch_code,
            is_for_manager=True,
            request_id=updated.id,
        ))

        return updated

    async def rate_request(
        self,
        user: CurrentUser,
        request_id: str,
        rating: int,
        feedback: Optional[str] = None,
    ) -> StoredRequest:
        """Record the submitter's rating of completed work. Allowed once.

        Raises:
            RequestNotFoundError: Missing or not visible
            PermissionDeniedError: Caller is not the submitter
            RatingNotAllowedError: Not completed, already rated, or out of range
        """
        if not MIN_RATING <= rating <= MAX_RATING:
            raise RatingNotAllowedError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

        request = await self.get_request(user, request_id)
        if request.user_id != user.user_id:
            raise PermissionDeniedError("Only the submitter can rate a request")
        if not can_rate(request.status):
            raise RatingNotAllowedError("Only completed requests can be rated")
        if request.rating is not None:
            raise RatingNotAllowedError("Request has already been rated")

        feedback = (feedback or "").strip() or None
        if not await self.request_store.set_rating(request_id, rating, feedback):
            # Lost to a concurrent rating, a status change or a delete
            raise RatingNotAllowedError("Request has already been rated")

        updated = await self.request_store.get(request_id)
        if updated is None:
            raise RequestNotFoundError(request_id)

        logger.info(
            f"Request {request_id} rated {rating}",
            extra={"branch_code": updated.branch_code, "user_id": user.user_id}
        )
        return updated

    def _can_view(self, user: CurrentUser, request: StoredRequest) -> bool:
        return user.is_manager or request.user_id == user.user_id

    async def _notify(self, notification: NewNotification) -> None:
        try:
            await self.notification_store.add(notification)
        except Exception as e:
            # Best effort: the request change is already committed
            notification_write_failures_total.labels(type=notification.type.value).inc()
            logger.warning(
                f"Failed to write {notification.type.value} notification",
                exc_info=True,
                extra={"branch_code": notification.branch_code, "error": str(e)}
            )
