"""Notifications domain module - notification categories and the notification store port"""

from .notification_type import NotificationType

__all__ = ["NotificationType"]
