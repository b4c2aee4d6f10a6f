"""Notification categories."""

from enum import Enum


class NotificationType(str, Enum):
    NEW_REQUEST = "new_request"
    STATUS_UPDATE = "status_update"
    SYSTEM = "system"
