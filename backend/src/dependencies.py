"""Global FastAPI dependencies resolving the process-wide services.

Every service is built once in main.create_app and stored on app.state.
Handlers obtain them here through Depends, so tests can build an app with
their own stores without touching module globals.
"""

from fastapi import Request
from sqlalchemy.engine import Engine

from analytics.service import AnalyticsService
from domain.images.ports import ImageStorePort
from maintenance_requests.service import MaintenanceRequestService
from notifications.service import NotificationService
from retention.service import RetentionService


def get_retention_service(request: Request) -> RetentionService:
    return request.app.state.retention_service


def get_request_service(request: Request) -> MaintenanceRequestService:
    return request.app.state.request_service


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service


def get_analytics_service(request: Request) -> AnalyticsService:
    return request.app.state.analytics_service


def get_image_store(request: Request) -> ImageStorePort:
    return request.app.state.image_store


def get_engine(request: Request) -> Engine:
    """SQLAlchemy engine backing the document store, used by health checks."""
    return request.app.state.engine
