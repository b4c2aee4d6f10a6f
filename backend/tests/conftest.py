"""Pytest fixtures for the maintenance desk.

Provides reusable test fixtures for:
- Per-test SQLite file document store with fresh tables
- A frozen clock and a seeder writing requests/notifications at given ages
- Fake image stores (with and without delete support)
- Retention and request services wired to the stores
- FastAPI test clients and manager/branch-user tokens

Usage:
    def test_stats(client, manager_headers):
        response = client.get("/api/v1/cleanup", headers=manager_headers)
        assert response.status_code == 200
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Set

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required")
os.environ.setdefault("IMAGE_STORE_BACKEND", "imgbb")
os.environ.setdefault("IMGBB_API_KEY", "test-imgbb-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_JSON", "false")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest
from fastapi.testclient import TestClient

from auth.dependencies import CurrentUser
from auth.jwt import create_access_token
from config import get_settings
from database import build_engine, build_session_factory, init_db
from domain.errors import ImageStoreError, StoreError
from domain.images.ports import ImageStorePort, UploadedImage
from domain.maintenance import RequestStatus
from domain.notifications import NotificationType
from infrastructure.repositories import SqlNotificationRepository, SqlRequestRepository
from main import create_app
from maintenance_requests.service import MaintenanceRequestService
from models import MaintenanceRequest, Notification
from retention.service import RetentionService


NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

MANAGER = CurrentUser(user_id="mgr-1", branch_code="HQ", is_manager=True, email="manager@desk.test")
BRANCH_USER = CurrentUser(user_id="u-1", branch_code="IST-01")
OTHER_USER = CurrentUser(user_id="u-2", branch_code="ANK-02")


class FakeImageStore(ImageStorePort):
    """In-memory image host.

    `supports_delete` is set per instance; `fail_urls` raise on delete.
    """

    def __init__(self, supports_delete: bool = False, fail_urls: Optional[Set[str]] = None):
        self.supports_delete = supports_delete
        self.fail_urls = fail_urls or set()
        self.stored: Set[str] = set()
        self.uploads: List[str] = []
        self.delete_calls: List[str] = []

    async def upload_image(self, content: bytes, filename: str, mime_type: str) -> UploadedImage:
        url = f"https://img.test/{len(self.uploads)}/{filename}"
        self.uploads.append(url)
        self.stored.add(url)
        return UploadedImage(url=url, size_bytes=len(content))

    async def delete_image(self, url: str) -> bool:
        self.delete_calls.append(url)
        if not self.supports_delete:
            raise NotImplementedError("no delete API")
        if url in self.fail_urls:
            raise ImageStoreError(f"host refused to delete {url}")
        if url in self.stored:
            self.stored.remove(url)
            return True
        return False


class FlakyRequestStore(SqlRequestRepository):
    """Request store whose delete fails for selected ids."""

    def __init__(self, session_factory, fail_ids: Set[str]):
        super().__init__(session_factory)
        self.fail_ids = fail_ids

    async def delete(self, request_id: str) -> None:
        if request_id in self.fail_ids:
            raise StoreError(f"write rejected for {request_id}")
        await super().delete(request_id)


class UnavailableRequestStore(SqlRequestRepository):
    """Request store whose queries always fail."""

    async def find(self, *args, **kwargs):
        raise StoreError("connection refused")

    async def count(self, *args, **kwargs):
        raise StoreError("connection refused")


class UnavailableNotificationStore(SqlNotificationRepository):
    async def find(self, *args, **kwargs):
        raise StoreError("connection refused")

    async def count(self, *args, **kwargs):
        raise StoreError("connection refused")

    async def add(self, notification):
        raise StoreError("connection refused")


class Seeder:
    """Writes documents directly through the ORM at a chosen age."""

    def __init__(self, session_factory, now: datetime):
        self.session_factory = session_factory
        self.now = now

    def request(
        self,
        age: timedelta = timedelta(0),
        status: RequestStatus = RequestStatus.COMPLETED,
        image_url: Optional[str] = None,
        branch_code: str = BRANCH_USER.branch_code,
        user_id: str = BRANCH_USER.user_id,
        problem_type: str = "Plumbing",
        rating: Optional[int] = None,
    ) -> str:
        row = MaintenanceRequest(
            branch_code=branch_code,
            user_id=user_id,
            problem_type=problem_type,
            description="Leaking sink in staff kitchen",
            status=RequestStatus(status).value,
            timestamp=self.now - age,
            image_url=image_url,
            rating=rating,
        )
        with self.session_factory() as session:
            session.add(row)
            session.commit()
            return row.id

    def notification(
        self,
        age: timedelta = timedelta(0),
        read: bool = False,
        is_for_manager: bool = False,
        branch_code: Optional[str] = BRANCH_USER.branch_code,
        type: NotificationType = NotificationType.STATUS_UPDATE,
    ) -> str:
        row = Notification(
            title="Request Status Updated",
            message="Your Plumbing request status changed to Completed",
            type=type.value,
            timestamp=self.now - age,
            read=read,
            branch_code=branch_code,
            is_for_manager=is_for_manager,
        )
        with self.session_factory() as session:
            session.add(row)
            session.commit()
            return row.id

    def request_ids(self) -> Set[str]:
        with self.session_factory() as session:
            return {row.id for row in session.query(MaintenanceRequest).all()}

    def notification_ids(self) -> Set[str]:
        with self.session_factory() as session:
            return {row.id for row in session.query(Notification).all()}


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite file per test; repositories use it from several threads."""
    engine = build_engine(f"sqlite:///{tmp_path / 'maintdesk.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def request_store(session_factory):
    return SqlRequestRepository(session_factory)


@pytest.fixture
def notification_store(session_factory):
    return SqlNotificationRepository(session_factory)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory, NOW)


@pytest.fixture
def image_store():
    """Upload-only host, like ImgBB."""
    return FakeImageStore(supports_delete=False)


@pytest.fixture
def deleting_image_store():
    """Host with a delete API, like S3."""
    return FakeImageStore(supports_delete=True)


@pytest.fixture
def retention_service(request_store, notification_store, image_store, clock):
    return RetentionService(request_store, notification_store, image_store, clock=clock)


@pytest.fixture
def request_service(request_store, notification_store, image_store, clock):
    return MaintenanceRequestService(request_store, notification_store, image_store, clock=clock)


@pytest.fixture
def app(settings, engine, image_store, clock):
    return create_app(settings, engine=engine, image_store=image_store, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _headers(user: CurrentUser) -> Dict[str, str]:
    token = create_access_token(
        user_id=user.user_id,
        branch_code=user.branch_code,
        is_manager=user.is_manager,
        email=user.email,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def manager_headers() -> Dict[str, str]:
    return _headers(MANAGER)


@pytest.fixture
def user_headers() -> Dict[str, str]:
    return _headers(BRANCH_USER)


@pytest.fixture
def other_user_headers() -> Dict[str, str]:
    return _headers(OTHER_USER)
