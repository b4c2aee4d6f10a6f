"""SQLAlchemy adapters for the document store ports."""

from .notification_repository import SqlNotificationRepository
from .request_repository import SqlRequestRepository

__all__ = ["SqlNotificationRepository", "SqlRequestRepository"]
