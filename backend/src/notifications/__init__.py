"""Notification inbox module.

Use: from notifications.service import NotificationService
Use: from notifications.router import router
"""

from .schemas import MarkAllReadResult, NotificationResponse, UnreadCount

__all__ = ["MarkAllReadResult", "NotificationResponse", "UnreadCount"]
