"""Data retention and cleanup module.

Bounded retention of completed maintenance requests and of notifications:
- Age cutoff computation
- Sweeps deleting completed requests (and their hosted images) and old notifications
- Storage statistics for the cleanup dashboard
- Manager-only HTTP endpoints and scheduled Celery tasks

Use: from retention.service import RetentionService
Use: from retention.tasks import retention_full_sweep_task
"""

from .schemas import (
    RequestSweepResult,
    NotificationSweepResult,
    FullSweepResult,
    StorageStatistics,
    CleanupCommand,
)

__all__ = [
    "RequestSweepResult",
    "NotificationSweepResult",
    "FullSweepResult",
    "StorageStatistics",
    "CleanupCommand",
]
