"""SQLAlchemy models for the maintenance desk document store"""

from .base import Base
from .maintenance_request import MaintenanceRequest
from .notification import Notification

__all__ = [
    "Base",
    "MaintenanceRequest",
    "Notification",
]
