"""SQLAlchemy adapter for the `requests` collection

Sessions are synchronous; every unit of work runs in the threadpool.
"""

from datetime import datetime
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from domain.errors import StoreError
from domain.maintenance.ports import NewRequest, RequestStorePort, StoredRequest
from domain.maintenance.request_status import RequestStatus
from models.maintenance_request import MaintenanceRequest as MaintenanceRequestModel


MUTABLE_FIELDS = frozenset({"status", "rating", "feedback", "manager_notes"})


class SqlRequestRepository(RequestStorePort):
    """Request store backed by a relational database.

    Every call opens its own session and commits before returning, giving
    single-document atomicity and nothing wider.
    """

    def __init__(self, session_factory: sessionmaker):
        """Initialize repository with a session factory.

        Args:
            session_factory: SQLAlchemy sessionmaker bound to the store engine
        """
        self.session_factory = session_factory

    async def add(self, request: NewRequest) -> StoredRequest:
        return await run_in_threadpool(self._add, request)

    async def get(self, request_id: str) -> Optional[StoredRequest]:
        return await run_in_threadpool(self._get, request_id)

    async def update(self, request_id: str, **changes) -> Optional[StoredRequest]:
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Immutable or unknown request fields: {sorted(unknown)}")
        return await run_in_threadpool(self._update, request_id, changes)

    async def set_rating(self, request_id: str, rating: int, feedback: Optional[str] = None) -> bool:
        return await run_in_threadpool(self._set_rating, request_id, rating, feedback)

    async def delete(self, request_id: str) -> None:
        await run_in_threadpool(self._delete, request_id)

    async def find(
        self,
        status: Optional[RequestStatus] = None,
        created_before: Optional[datetime] = None,
        branch_code: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[StoredRequest]:
        query = _filtered(
            select(MaintenanceRequestModel),
            status=status,
            created_before=created_before,
            branch_code=branch_code,
            user_id=user_id,
        )
        query = query.order_by(MaintenanceRequestModel.timestamp.desc())
        if limit is not None:
            query = query.limit(limit)

        return await run_in_threadpool(self._find, query)

    async def count(
        self,
        status: Optional[RequestStatus] = None,
        created_before: Optional[datetime] = None,
        has_image: Optional[bool] = None,
    ) -> int:
        query = _filtered(
            select(func.count()).select_from(MaintenanceRequestModel),
            status=status,
            created_before=created_before,
            has_image=has_image,
        )
        return await run_in_threadpool(self._count, query)

    def _add(self, request: NewRequest) -> StoredRequest:
        db_request = MaintenanceRequestModel(
            branch_code=request.branch_code,
            user_id=request.user_id,
            problem_type=request.problem_type,
            description=request.description,
            status=request.status.value,
            timestamp=request.timestamp,
            image_url=request.image_url,
        )
        try:
            with self.session_factory() as session:
                session.add(db_request)
                session.commit()
                return _to_domain(db_request)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to create request: {e}") from e

    def _get(self, request_id: str) -> Optional[StoredRequest]:
        try:
            with self.session_factory() as session:
                db_request = session.get(MaintenanceRequestModel, request_id)
                return _to_domain(db_request) if db_request else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load request {request_id}: {e}") from e

    def _update(self, request_id: str, changes: dict) -> Optional[StoredRequest]:
        try:
            with self.session_factory() as session:
                db_request = session.get(MaintenanceRequestModel, request_id)
                if db_request is None:
                    return None
                for field, value in changes.items():
                    if isinstance(value, RequestStatus):
                        value = value.value
                    setattr(db_request, field, value)
                session.commit()
                return _to_domain(db_request)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update request {request_id}: {e}") from e

    def _set_rating(self, request_id: str, rating: int, feedback: Optional[str]) -> bool:
        # Conditional write: only one rating can ever land on a completed request
        statement = (
            update(MaintenanceRequestModel)
            .where(
                MaintenanceRequestModel.id == request_id,
                MaintenanceRequestModel.status == RequestStatus.COMPLETED.value,
                MaintenanceRequestModel.rating.is_(None),
            )
            .values(rating=rating, feedback=feedback)
        )
        try:
            with self.session_factory() as session:
                result = session.execute(statement)
                session.commit()
                return result.rowcount == 1
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to rate request {request_id}: {e}") from e

    def _delete(self, request_id: str) -> None:
        try:
            with self.session_factory() as session:
                session.execute(
                    delete(MaintenanceRequestModel).where(MaintenanceRequestModel.id == request_id)
                )
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete request {request_id}: {e}") from e

    def _find(self, query) -> List[StoredRequest]:
        try:
            with self.session_factory() as session:
                return [_to_domain(row) for row in session.execute(query).scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to query requests: {e}") from e

    def _count(self, query) -> int:
        try:
            with self.session_factory() as session:
                return session.execute(query).scalar_one()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to count requests: {e}") from e


def _filtered(
    query,
    status: Optional[RequestStatus] = None,
    created_before: Optional[datetime] = None,
    branch_code: Optional[str] = None,
    user_id: Optional[str] = None,
    has_image: Optional[bool] = None,
):
    if status is not None:
        query = query.where(MaintenanceRequestModel.status == RequestStatus(status).value)
    if created_before is not None:
        query = query.where(MaintenanceRequestModel.timestamp < created_before)
    if branch_code is not None:
        query = query.where(MaintenanceRequestModel.branch_code == branch_code)
    if user_id is not None:
        query = query.where(MaintenanceRequestModel.user_id == user_id)
    if has_image is True:
        query = query.where(
            MaintenanceRequestModel.image_url.is_not(None),
            MaintenanceRequestModel.image_url != "",
        )
    elif has_image is False:
        query = query.where(
            (MaintenanceRequestModel.image_url.is_(None)) | (MaintenanceRequestModel.image_url == "")
        )
    return query


def _to_domain(db_request: MaintenanceRequestModel) -> StoredRequest:
    return StoredRequest(
        id=db_request.id,
        branch_code=db_request.branch_code,
        problem_type=db_request.problem_type,
        description=db_request.description,
        status=RequestStatus(db_request.status),
        timestamp=db_request.timestamp,
        image_url=db_request.image_url,
        user_id=db_request.user_id,
        rating=db_request.rating,
        feedback=db_request.feedback,
        manager_notes=db_request.manager_notes,
    )
