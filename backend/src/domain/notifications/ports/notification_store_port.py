"""Notification Store Port - Domain interface for the `notifications` collection.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..notification_type import NotificationType


@dataclass
class StoredNotification:
    """A notification as held by the document store."""
    id: str
    title: str
    message: str
    type: NotificationType
    timestamp: datetime
    read: bool = False
    branch_code: Optional[str] = None
    is_for_manager: bool = False
    request_id: Optional[str] = None


@dataclass
class NewNotification:
    """Fields supplied when a notification is written; the store assigns the id."""
    title: str
    message: str
    type: NotificationType
    timestamp: datetime
    branch_code: Optional[str] = None
    is_for_manager: bool = False
    request_id: Optional[str] = None


class NotificationStorePort(ABC):
    """Port interface for notification persistence.

    All methods raise domain.errors.StoreError when the store is unavailable
    or rejects the operation.
    """

    @abstractmethod
    async def add(self, notification: NewNotification) -> StoredNotification:
        """Insert a notification (read=False) and return it with its id."""
        pass

    @abstractmethod
    async def get(self, notification_id: str) -> Optional[StoredNotification]:
        pass

    @abstractmethod
    async def mark_read(self, notification_id: str) -> bool:
        """Flip `read` to true. Returns False if the notification does not exist."""
        pass

    @abstractmethod
    async def delete(self, notification_id: str) -> None:
        """Delete one notification. Missing notifications are a no-op."""
        pass

    @abstractmethod
    async def find(
        self,
        created_before: Optional[datetime] = None,
        branch_code: Optional[str] = None,
        is_for_manager: Optional[bool] = None,
        unread_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[StoredNotification]:
        """Query notifications matching every given filter, newest first.

        `created_before` is strict (timestamp < value).
        """
        pass

    @abstractmethod
    async def count(self, created_before: Optional[datetime] = None) -> int:
        """Count notifications, optionally only those strictly older than `created_before`."""
        pass
