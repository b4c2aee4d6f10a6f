"""Prometheus metrics for the maintenance desk.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# Retention metrics
retention_sweeps_total = Counter(
    "maintdesk_retention_sweeps_total",
    "Total retention sweeps executed",
    ["collection", "status"]  # collection: requests|notifications, status: success|partial|error
)

retention_records_deleted_total = Counter(
    "maintdesk_retention_records_deleted_total",
    "Total documents deleted by retention sweeps",
    ["collection"]
)

retention_images_processed_total = Counter(
    "maintdesk_retention_images_processed_total",
    "Image removal attempts made by retention sweeps",
    ["outcome"]  # outcome: deleted|missing|unsupported|error
)

retention_sweep_duration_seconds = Histogram(
    "maintdesk_retention_sweep_duration_seconds",
    "Time spent on a single retention sweep in seconds",
    ["collection"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

# Request lifecycle metrics
requests_created_total = Counter(
    "maintdesk_requests_created_total",
    "Total maintenance requests filed",
    ["problem_type", "with_image"]  # with_image: true|false
)

request_status_changes_total = Counter(
    "maintdesk_request_status_changes_total",
    "Total maintenance request status changes",
    ["to_status"]
)

notification_write_failures_total = Counter(
    "maintdesk_notification_write_failures_total",
    "Notifications that could not be written (best effort side effects)",
    ["type"]
)
