"""Integration tests for the retention endpoints

Tests GET /api/v1/cleanup (statistics) and POST /api/v1/cleanup (sweeps):
- Manager-only access
- Request-type fallback threshold (7 days) vs the engine default (30 days)
- Full sweep ignoring daysOld
- 400 on unknown type, 500 on collaborator failure
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from conftest import UnavailableRequestStore
from main import create_app
from retention.router import DEFAULT_BOUNDARY_FALLBACK_DAYS
from retention.service import DEFAULT_REQUEST_RETENTION_DAYS


CLEANUP_URL = "/api/v1/cleanup"


class TestAccess:

    def test_requires_token(self, client):
        assert client.get(CLEANUP_URL).status_code in (401, 403)

    def test_branch_user_forbidden(self, client, user_headers):
        assert client.get(CLEANUP_URL, headers=user_headers).status_code == 403
        response = client.post(CLEANUP_URL, json={"type": "full"}, headers=user_headers)
        assert response.status_code == 403


class TestStatistics:

    def test_fresh_install(self, client, manager_headers):
        response = client.get(CLEANUP_URL, headers=manager_headers)

        assert response.status_code == 200
        assert response.json() == {
            "totalRequests": 0,
            "completedRequests": 0,
            "oldCompletedRequests": 0,
            "totalNotifications": 0,
            "totalImagesStored": 0,
            "oldImagesForCleanup": 0,
            "estimatedCleanupSavings": 0,
            "estimatedImageCleanup": 0,
            "imageDeletionSupported": False,
        }

    def test_counts_old_completed(self, client, manager_headers, seed):
        seed.request(age=timedelta(days=45), image_url="https://i.ibb.co/a.jpg")
        seed.request(age=timedelta(days=5))

        body = client.get(CLEANUP_URL, headers=manager_headers).json()

        assert body["totalRequests"] == 2
        assert body["oldCompletedRequests"] == 1
        assert body["oldImagesForCleanup"] == 1

    def test_store_failure_is_500(self, settings, session_factory, notification_store, image_store, clock, manager_headers):
        app = create_app(
            settings,
            request_store=UnavailableRequestStore(session_factory),
            notification_store=notification_store,
            image_store=image_store,
            clock=clock,
        )
        with TestClient(app) as client:
            response = client.get(CLEANUP_URL, headers=manager_headers)

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to get storage stats",
            "details": "connection refused",
        }


class TestSweep:

    def test_requests_type_falls_back_to_7_days(self, client, manager_headers, seed):
        # Boundary fallback is 7, the engine default is 30
        assert DEFAULT_BOUNDARY_FALLBACK_DAYS == 7
        assert DEFAULT_REQUEST_RETENTION_DAYS == 30

        ten_days = seed.request(age=timedelta(days=10))
        five_days = seed.request(age=timedelta(days=5))

        response = client.post(CLEANUP_URL, json={"type": "requests"}, headers=manager_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["deletedCount"] == 1
        assert body["message"] == "Successfully deleted 1 old completed requests"
        assert seed.request_ids() == {five_days}
        assert ten_days not in seed.request_ids()

    def test_requests_type_honours_days_old(self, client, manager_headers, seed):
        seed.request(age=timedelta(days=10))

        response = client.post(
            CLEANUP_URL, json={"type": "requests", "daysOld": 30}, headers=manager_headers
        )

        assert response.json()["deletedCount"] == 0
        assert len(seed.request_ids()) == 1

    def test_full_type_ignores_days_old(self, client, manager_headers, seed):
        kept = seed.request(age=timedelta(days=10))
        seed.request(age=timedelta(days=40), image_url="https://i.ibb.co/a.jpg")
        seed.notification(age=timedelta(days=8))

        response = client.post(
            CLEANUP_URL, json={"type": "full", "daysOld": 1}, headers=manager_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["totalDeleted"] == 2
        assert body["totalImagesProcessed"] == 1
        assert body["requests"]["deletedCount"] == 1
        assert body["requests"]["imagesDeleted"] == 0
        assert body["notifications"]["deletedCount"] == 1
        assert seed.request_ids() == {kept}

    @pytest.mark.parametrize("payload", [{"type": "notifications"}, {"type": "everything"}, {}])
    def test_invalid_type_is_400(self, client, manager_headers, seed, payload):
        request_id = seed.request(age=timedelta(days=400))

        response = client.post(CLEANUP_URL, json=payload, headers=manager_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid cleanup type"}
        assert seed.request_ids() == {request_id}

    def test_invalid_days_old_is_422(self, client, manager_headers):
        response = client.post(
            CLEANUP_URL, json={"type": "requests", "daysOld": 0}, headers=manager_headers
        )

        assert response.status_code == 422

    def test_sweep_failure_is_reported_in_body(
        self, settings, session_factory, notification_store, image_store, clock, manager_headers
    ):
        app = create_app(
            settings,
            request_store=UnavailableRequestStore(session_factory),
            notification_store=notification_store,
            image_store=image_store,
            clock=clock,
        )
        with TestClient(app) as client:
            response = client.post(CLEANUP_URL, json={"type": "requests"}, headers=manager_headers)

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["message"] == "Cleanup failed: connection refused"

    def test_unexpected_failure_is_500(self, app, manager_headers, monkeypatch):
        async def explode():
            raise RuntimeError("worker crashed")
        monkeypatch.setattr(app.state.retention_service, "run_full_sweep", explode)

        with TestClient(app) as client:
            response = client.post(CLEANUP_URL, json={"type": "full"}, headers=manager_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "Cleanup failed", "details": "worker crashed"}
