"""SQLAlchemy adapter for the `notifications` collection"""

from datetime import datetime
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from domain.errors import StoreError
from domain.notifications.notification_type import NotificationType
from domain.notifications.ports import NewNotification, NotificationStorePort, StoredNotification
from models.notification import Notification as NotificationModel


class SqlNotificationRepository(NotificationStorePort):
    """Notification store backed by a relational database.

    Like SqlRequestRepository, each session unit runs in the threadpool.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def add(self, notification: NewNotification) -> StoredNotification:
        return await run_in_threadpool(self._add, notification)

    async def get(self, notification_id: str) -> Optional[StoredNotification]:
        return await run_in_threadpool(self._get, notification_id)

    async def mark_read(self, notification_id: str) -> bool:
        return await run_in_threadpool(self._mark_read, notification_id)

    async def delete(self, notification_id: str) -> None:
        await run_in_threadpool(self._delete, notification_id)

    async def find(
        self,
        created_before: Optional[datetime] = None,
        branch_code: Optional[str] = None,
        is_for_manager: Optional[bool] = None,
        unread_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[StoredNotification]:
        query = select(NotificationModel)

        if created_before is not None:
            query = query.where(NotificationModel.timestamp < created_before)
        if branch_code is not None:
            query = query.where(NotificationModel.branch_code == branch_code)
        if is_for_manager is not None:
            query = query.where(NotificationModel.is_for_manager.is_(is_for_manager))
        if unread_only:
            query = query.where(NotificationModel.read.is_(False))

        query = query.order_by(NotificationModel.timestamp.desc())
        if limit is not None:
            query = query.limit(limit)

        return await run_in_threadpool(self._find, query)

    async def count(self, created_before: Optional[datetime] = None) -> int:
        query = select(func.count()).select_from(NotificationModel)
        if created_before is not None:
            query = query.where(NotificationModel.timestamp < created_before)
        return await run_in_threadpool(self._count, query)

    def _add(self, notification: NewNotification) -> StoredNotification:
        db_notification = NotificationModel(
            title=notification.title,
            message=notification.message,
            type=notification.type.value,
            timestamp=notification.timestamp,
            read=False,
            branch_code=notification.branch_code,
            is_for_manager=notification.is_for_manager,
            request_id=notification.request_id,
        )
        try:
            with self.session_factory() as session:
                session.add(db_notification)
                session.commit()
                return _to_domain(db_notification)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to create notification: {e}") from e

    def _get(self, notification_id: str) -> Optional[StoredNotification]:
        try:
            with self.session_factory() as session:
                db_notification = session.get(NotificationModel, notification_id)
                return _to_domain(db_notification) if db_notification else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load notification {notification_id}: {e}") from e

    def _mark_read(self, notification_id: str) -> bool:
        try:
            with self.session_factory() as session:
                result = session.execute(
                    update(NotificationModel)
                    .where(NotificationModel.id == notification_id)
                    .values(read=True)
                )
                session.commit()
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to mark notification {notification_id} read: {e}") from e

    def _delete(self, notification_id: str) -> None:
        try:
            with self.session_factory() as session:
                session.execute(
                    delete(NotificationModel).where(NotificationModel.id == notification_id)
                )
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete notification {notification_id}: {e}") from e

    def _find(self, query) -> List[StoredNotification]:
        try:
            with self.session_factory() as session:
                return [_to_domain(row) for row in session.execute(query).scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to query notifications: {e}") from e

    def _count(self, query) -> int:
        try:
            with self.session_factory() as session:
                return session.execute(query).scalar_one()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to count notifications: {e}") from e


def _to_domain(db_notification: NotificationModel) -> StoredNotification:
    return StoredNotification(
        id=db_notification.id,
        title=db_notification.title,
        message=db_notification.message,
        type=NotificationType(db_notification.type),
        timestamp=db_notification.timestamp,
        read=bool(db_notification.read),
        branch_code=db_notification.branch_code,
        is_for_manager=bool(db_notification.is_for_manager),
        request_id=db_notification.request_id,
    )
