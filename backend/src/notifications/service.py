"""Notification service - per-audience inboxes and read state.

Audiences:
- Managers see notifications written for managers (new requests, cancellations)
- Branch users see their branch's status updates
"""

import asyncio
import logging
from typing import List

from auth.dependencies import CurrentUser
from domain.notifications.ports import NotificationStorePort, StoredNotification

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_LIMIT = 50


class NotificationNotFoundError(Exception):
    """Notification does not exist or belongs to another audience."""
    pass


class NotificationService:
    """Service for notification inbox operations."""

    def __init__(self, notification_store: NotificationStorePort):
        self.notification_store = notification_store

    async def list_notifications(
        self,
        user: CurrentUser,
        unread_only: bool = False,
        limit: int = DEFAULT_NOTIFICATION_LIMIT,
    ) -> List[StoredNotification]:
        """Notifications visible to the caller, newest first."""
        if user.is_manager:
            return await self.notification_store.find(
                is_for_manager=True,
                unread_only=unread_only,
                limit=limit,
            )
        return await self.notification_store.find(
            branch_code=user.branch_code,
            is_for_manager=False,
            unread_only=unread_only,
            limit=limit,
        )

    async def unread_count(self, user: CurrentUser) -> int:
        unread = await self.list_notifications(user, unread_only=True, limit=None)
        return len(unread)

    async def mark_read(self, user: CurrentUser, notification_id: str) -> StoredNotification:
        """Flip one visible notification to read. Idempotent.

        Raises:
            NotificationNotFoundError: Missing or not visible to the caller
        """
        notification = await self.notification_store.get(notification_id)
        if notification is None or not self._can_view(user, notification):
            raise NotificationNotFoundError(notification_id)

        if not notification.read:
            if not await self.notification_store.mark_read(notification_id):
                raise NotificationNotFoundError(notification_id)
            notification.read = True

        return notification

    async def mark_all_read(self, user: CurrentUser) -> int:
        """Mark every unread visible notification as read; returns how many flipped."""
        unread = await self.list_notifications(user, unread_only=True, limit=None)
        results = await asyncio.gather(
            *(self.notification_store.mark_read(n.id) for n in unread)
        )
        updated = sum(1 for flipped in results if flipped)

        logger.info(
            f"Marked {updated} notifications as read",
            extra={"branch_code": user.branch_code, "user_id": user.user_id}
        )
        return updated

    def _can_view(self, user: CurrentUser, notification: StoredNotification) -> bool:
        if user.is_manager:
            return notification.is_for_manager
        return not notification.is_for_manager and notification.branch_code == user.branch_code
