"""Observability module for the maintenance desk.

Provides structured logging, metrics, and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    retention_sweeps_total,
    retention_records_deleted_total,
    retention_images_processed_total,
    retention_sweep_duration_seconds,
    requests_created_total,
    request_status_changes_total,
    notification_write_failures_total,
)
from .request_id import request_id_var, get_request_id, set_request_id, generate_request_id
from .health import HealthStatus, ComponentHealth
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "retention_sweeps_total",
    "retention_records_deleted_total",
    "retention_images_processed_total",
    "retention_sweep_duration_seconds",
    "requests_created_total",
    "request_status_changes_total",
    "notification_write_failures_total",
    # Request ID
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestIDMiddleware",
]
