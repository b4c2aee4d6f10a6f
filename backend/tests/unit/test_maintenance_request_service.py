"""Unit tests for the maintenance request service.

Tests cover:
- Filing requests with and without photos
- Visibility rules for managers and branch users
- Manager status changes and their notifications
- Cancellation and rating by the submitter
- Best-effort notification writes
"""

import asyncio
from datetime import timedelta

import pytest

from conftest import BRANCH_USER, MANAGER, NOW, OTHER_USER, UnavailableNotificationStore
from domain.maintenance import RequestStatus
from domain.notifications import NotificationType
from maintenance_requests.service import (
    ImageUpload,
    InvalidTransitionError,
    MaintenanceRequestService,
    PermissionDeniedError,
    RatingNotAllowedError,
    RequestNotFoundError,
)


class TestCreateRequest:

    @pytest.mark.asyncio
    async def test_creates_under_review_with_notification(self, request_service, notification_store):
        request = await request_service.create_request(
            BRANCH_USER, "Plumbing", "  Leaking sink  "
        )

        assert request.status == RequestStatus.UNDER_REVIEW
        assert request.branch_code == "IST-01"
        assert request.user_id == "u-1"
        assert request.description == "Leaking sink"
        assert request.timestamp == NOW
        assert request.image_url is None

        notifications = await notification_store.find()
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.NEW_REQUEST
        assert notifications[0].is_for_manager is True
        assert notifications[0].title == "New Maintenance Request"
        assert notifications[0].message == "New Plumbing request from IST-01 branch"
        assert notifications[0].request_id == request.id

    @pytest.mark.asyncio
    async def test_uploads_photo(self, request_service, image_store):
        request = await request_service.create_request(
            BRANCH_USER,
            "Electrical",
            "Sparking socket",
            ImageUpload(content=b"\xff\xd8jpeg", filename="socket photo.jpg", mime_type="image/jpeg"),
        )

        assert request.image_url == image_store.uploads[0]
        assert request.image_url.endswith("socket_photo.jpg")

    @pytest.mark.asyncio
    async def test_unknown_problem_type_rejected(self, request_service):
        with pytest.raises(ValueError):
            await request_service.create_request(BRANCH_USER, "Elevator", "Stuck")

    @pytest.mark.asyncio
    async def test_blank_description_rejected(self, request_service):
        with pytest.raises(ValueError):
            await request_service.create_request(BRANCH_USER, "Plumbing", "   ")

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_request(
        self, request_store, session_factory, image_store, clock
    ):
        service = MaintenanceRequestService(
            request_store, UnavailableNotificationStore(session_factory), image_store, clock=clock
        )

        request = await service.create_request(BRANCH_USER, "Plumbing", "Leak")

        assert await request_store.get(request.id) is not None


class TestVisibility:

    @pytest.mark.asyncio
    async def test_manager_sees_all_user_sees_own(self, request_service, seed):
        own = seed.request(status=RequestStatus.UNDER_REVIEW, age=timedelta(days=1))
        other = seed.request(
            status=RequestStatus.UNDER_REVIEW, user_id="u-2", branch_code="ANK-02"
        )

        all_requests = await request_service.list_requests(MANAGER)
        own_requests = await request_service.list_requests(BRANCH_USER)

        assert [r.id for r in all_requests] == [other, own]
        assert [r.id for r in own_requests] == [own]

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self, request_service, seed):
        seed.request(status=RequestStatus.UNDER_REVIEW)
        done = seed.request(status=RequestStatus.COMPLETED)

        result = await request_service.list_requests(MANAGER, status=RequestStatus.COMPLETED)

        assert [r.id for r in result] == [done]

    @pytest.mark.asyncio
    async def test_other_users_request_is_not_found(self, request_service, seed):
        request_id = seed.request(status=RequestStatus.UNDER_REVIEW)

        with pytest.raises(RequestNotFoundError):
            await request_service.get_request(OTHER_USER, request_id)

    @pytest.mark.asyncio
    async def test_missing_request_is_not_found(self, request_service):
        with pytest.raises(RequestNotFoundError):
            await request_service.get_request(MANAGER, "does-not-exist")


class TestUpdateStatus:

    @pytest.mark.asyncio
    async def test_manager_update_notifies_branch(self, request_service, notification_store, seed):
        request_id = seed.request(status=RequestStatus.UNDER_REVIEW)

        updated = await request_service.update_status(
            MANAGER, request_id, RequestStatus.IN_PROGRESS, "Technician booked"
        )

        assert updated.status == RequestStatus.IN_PROGRESS
        assert updated.manager_notes == "Technician booked"

        notifications = await notification_store.find(branch_code="IST-01", is_for_manager=False)
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.STATUS_UPDATE
        assert notifications[0].message == (
            "Your Plumbing request status changed to In Progress. Notes: Technician booked"
        )

    @pytest.mark.asyncio
    async def test_non_manager_denied(self, request_service, seed):
        request_id = seed.request(status=RequestStatus.UNDER_REVIEW)

        with pytest.raises(PermissionDeniedError):
            await request_service.update_status(BRANCH_USER, request_id, RequestStatus.APPROVED)

    @pytest.mark.asyncio
    async def test_backward_transition_rejected(self, request_service, seed):
        request_id = seed.request(status=RequestStatus.COMPLETED)

        with pytest.raises(InvalidTransitionError):
            await request_service.update_status(MANAGER, request_id, RequestStatus.IN_PROGRESS)

    @pytest.mark.asyncio
    async def test_missing_request(self, request_service):
        with pytest.raises(RequestNotFoundError):
            await request_service.update_status(MANAGER, "nope", RequestStatus.APPROVED)


class TestCancel:

    @pytest.mark.asyncio
    async def test_submitter_cancels_and_managers_notified(
        self, request_service, notification_store, seed
    ):
        request_id = seed.request(status=RequestStatus.APPROVED)

        cancelled = await request_service.cancel_request(BRANCH_USER, request_id)

        assert cancelled.status == RequestStatus.CANCELLED
        notifications = await notification_store.find(is_for_manager=True)
        assert [n.title for n in notifications] == ["Request Cancelled"]

    @pytest.mark.asyncio
    async def test_cannot_cancel_once_work_started(self, request_service, seed):
        request_id = seed.request(status=RequestStatus.IN_PROGRESS)

        with pytest.raises(InvalidTransitionError):
            await request_service.cancel_request(BRANCH_USER, request_id)

    @pytest.mark.asyncio
    async def test_manager_cannot_cancel_for_submitter(self, request_service, seed):
        request_id = seed.request(status=RequestStatus.UNDER_REVIEW)

        with pytest.raises(PermissionDeniedError):
            await request_service.cancel_request(MANAGER, request_id)


class TestRate:

    @pytest.mark.asyncio
    async def test_rates_completed_request_once(self, request_service, seed):
        request_id = seed.request(status=RequestStatus.COMPLETED)

        rated = await request_service.rate_request(BRANCH_USER, request_id, 4, "  Quick fix ")

        assert rated.rating == 4
        assert rated.feedback == "Quick fix"

        with pytest.raises(RatingNotAllowedError):
            await request_service.rate_request(BRANCH_USER, request_id, 5)

    @pytest.mark.asyncio
    async def test_concurrent_ratings_store_exactly_one(self, request_service, request_store, seed):
        request_id = seed.request(status=RequestStatus.COMPLETED)

        outcomes = await asyncio.gather(
            request_service.rate_request(BRANCH_USER, request_id, 4),
            request_service.rate_request(BRANCH_USER, request_id, 2),
            return_exceptions=True,
        )

        rated = [o for o in outcomes if not isinstance(o, BaseException)]
        rejected = [o for o in outcomes if isinstance(o, RatingNotAllowedError)]
        assert len(rated) == 1
        assert len(rejected) == 1
        assert (await request_store.get(request_id)).rating == rated[0].rating

    @pytest.mark.asyncio
    async def test_cannot_rate_open_request(self, request_service, seed):
        request_id = seed.request(status=RequestStatus.IN_PROGRESS)

        with pytest.raises(RatingNotAllowedError):
            await request_service.rate_request(BRANCH_USER, request_id, 5)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 6])
    async def test_rating_out_of_range(self, request_service, seed, rating):
        request_id = seed.request(status=RequestStatus.COMPLETED)

        with pytest.raises(RatingNotAllowedError):
            await request_service.rate_request(BRANCH_USER, request_id, rating)
