"""Pydantic schemas for notification endpoints."""

from datetime import datetime
from typing import Optional

from domain.notifications import NotificationType
from domain.notifications.ports import StoredNotification
from schemas.base import CamelModel


class NotificationResponse(CamelModel):
    id: str
    title: str
    message: str
    type: NotificationType
    timestamp: datetime
    read: bool
    branch_code: Optional[str] = None
    is_for_manager: bool
    request_id: Optional[str] = None

    @classmethod
    def from_stored(cls, notification: StoredNotification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            title=notification.title,
            message=notification.message,
            type=notification.type,
            timestamp=notification.timestamp,
            read=notification.read,
            branch_code=notification.branch_code,
            is_for_manager=notification.is_for_manager,
            request_id=notification.request_id,
        )


class UnreadCount(CamelModel):
    unread_count: int


class MarkAllReadResult(CamelModel):
    updated_count: int
