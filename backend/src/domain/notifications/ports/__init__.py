from .notification_store_port import NewNotification, NotificationStorePort, StoredNotification

__all__ = ["NewNotification", "NotificationStorePort", "StoredNotification"]
