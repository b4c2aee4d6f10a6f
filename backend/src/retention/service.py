"""Retention service for data cleanup operations.

This service implements the retention policy:
- Completed requests older than a threshold are deleted, together with an
  attempt to remove their hosted image
- Notifications older than a threshold are deleted regardless of `read`
- Storage statistics report what a 30-day cleanup would remove

Sweeps are filter-then-delete passes, so running one twice deletes nothing
the second time. Store errors never escape a sweep: they are logged and
reported in the returned summary.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple

from domain.images.ports import ImageStorePort
from domain.maintenance.ports import RequestStorePort, StoredRequest
from domain.maintenance.request_status import RequestStatus
from domain.notifications.ports import NotificationStorePort
from models.base import utcnow
from observability.metrics import (
    retention_images_processed_total,
    retention_records_deleted_total,
    retention_sweep_duration_seconds,
    retention_sweeps_total,
)
from .schemas import (
    FullSweepResult,
    NotificationSweepResult,
    RequestSweepResult,
    StorageStatistics,
)

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_RETENTION_DAYS = 30
DEFAULT_NOTIFICATION_RETENTION_DAYS = 7

# Statistics always estimate against this threshold, independent of sweeps
STATISTICS_RETENTION_DAYS = 30

# Deletes issued concurrently per join
DELETION_BATCH_SIZE = 100

Clock = Callable[[], datetime]


def compute_cutoff(days_old: int, now: datetime) -> datetime:
    """Return `now` minus `days_old` days.

    Raises:
        ValueError: If days_old is negative
    """
    if days_old < 0:
        raise ValueError(f"days_old must be >= 0, got {days_old}")
    return now - timedelta(days=days_old)


class RetentionService:
    """Service executing retention sweeps against the document store.

    One instance is built per process at application start and injected into
    the HTTP handlers and scheduled tasks. It keeps no state between calls.
    """

    def __init__(
        self,
        request_store: RequestStorePort,
        notification_store: NotificationStorePort,
        image_store: ImageStorePort,
        clock: Clock = utcnow,
    ):
        """Initialize retention service.

        Args:
            request_store: Store holding the `requests` collection
            notification_store: Store holding the `notifications` collection
            image_store: Image host the request photos live on
            clock: Source of "now" (UTC-aware)
        """
        self.request_store = request_store
        self.notification_store = notification_store
        self.image_store = image_store
        self.clock = clock

    def compute_cutoff(self, days_old: int) -> datetime:
        """Cutoff instant for a threshold: records strictly older are expired."""
        return compute_cutoff(days_old, self.clock())

    async def sweep_completed_requests(
        self,
        days_old: int = DEFAULT_REQUEST_RETENTION_DAYS,
    ) -> RequestSweepResult:
        """Delete completed requests older than `days_old` days.

        Image removal is attempted for every matched request carrying an
        image URL before any document is deleted. Image failures are logged
        and do not fail the sweep.

        Counting policy: `deleted_count` reports deletions the store
        confirmed. If any delete fails the sweep reports success=False and
        the failed documents stay in the store for the next run.

        Args:
            days_old: Minimum age in days (strictly older is deleted)

        Returns:
            RequestSweepResult with counts and an overall success flag
        """
        cutoff = self.compute_cutoff(days_old)
        start = time.perf_counter()

        logger.info(
            f"Starting cleanup of completed requests older than {days_old} days",
            extra={"collection": "requests", "cutoff": cutoff.isoformat()}
        )

        try:
            matched = await self.request_store.find(
                status=RequestStatus.COMPLETED,
                created_before=cutoff,
            )

            images_processed, images_deleted = await self._process_images(matched)
            deleted, failures = await self._delete_all(
                self.request_store.delete,
                [request.id for request in matched],
            )

        except Exception as e:
            logger.error(
                "Error during request cleanup",
                exc_info=True,
                extra={"collection": "requests", "error": str(e)}
            )
            retention_sweeps_total.labels(collection="requests", status="error").inc()
            return RequestSweepResult(
                success=False,
                deleted_count=0,
                images_processed=0,
                images_deleted=0,
                message=f"Cleanup failed: {e}",
            )

        finally:
            retention_sweep_duration_seconds.labels(collection="requests").observe(
                time.perf_counter() - start
            )

        retention_records_deleted_total.labels(collection="requests").inc(deleted)

        if failures:
            logger.error(
                f"Request cleanup partially failed: {len(failures)} of {len(matched)} deletes failed",
                extra={"collection": "requests", "deleted": deleted, "error": str(failures[0])}
            )
            retention_sweeps_total.labels(collection="requests", status="partial").inc()
            return RequestSweepResult(
                success=False,
                deleted_count=deleted,
                images_processed=images_processed,
                images_deleted=images_deleted,
                message=(
                    f"Cleanup partially failed: deleted {deleted} of {len(matched)} "
                    f"old completed requests, {len(failures)} failed: {failures[0]}"
                ),
            )

        logger.info(
            f"Cleaned up {deleted} completed requests",
            extra={"collection": "requests", "images_processed": images_processed}
        )
        retention_sweeps_total.labels(collection="requests", status="success").inc()
        return RequestSweepResult(
            success=True,
            deleted_count=deleted,
            images_processed=images_processed,
            images_deleted=images_deleted,
            message=f"Successfully deleted {deleted} old completed requests",
        )

    async def sweep_old_notifications(
        self,
        days_old: int = DEFAULT_NOTIFICATION_RETENTION_DAYS,
    ) -> NotificationSweepResult:
        """Delete notifications older than `days_old` days, read or not."""
        cutoff = self.compute_cutoff(days_old)
        start = time.perf_counter()

        logger.info(
            f"Starting cleanup of notifications older than {days_old} days",
            extra={"collection": "notifications", "cutoff": cutoff.isoformat()}
        )

        try:
            matched = await self.notification_store.find(created_before=cutoff)
            deleted, failures = await self._delete_all(
                self.notification_store.delete,
                [notification.id for notification in matched],
            )

        except Exception as e:
            logger.error(
                "Error during notification cleanup",
                exc_info=True,
                extra={"collection": "notifications", "error": str(e)}
            )
            retention_sweeps_total.labels(collection="notifications", status="error").inc()
            return NotificationSweepResult(
                success=False,
                deleted_count=0,
                message=f"Notification cleanup failed: {e}",
            )

        finally:
            retention_sweep_duration_seconds.labels(collection="notifications").observe(
                time.perf_counter() - start
            )

        retention_records_deleted_total.labels(collection="notifications").inc(deleted)

        if failures:
            logger.error(
                f"Notification cleanup partially failed: {len(failures)} of {len(matched)} deletes failed",
                extra={"collection": "notifications", "deleted": deleted, "error": str(failures[0])}
            )
            retention_sweeps_total.labels(collection="notifications", status="partial").inc()
            return NotificationSweepResult(
                success=False,
                deleted_count=deleted,
                message=(
                    f"Notification cleanup partially failed: deleted {deleted} of "
                    f"{len(matched)} old notifications, {len(failures)} failed: {failures[0]}"
                ),
            )

        logger.info(
            f"Cleaned up {deleted} old notifications",
            extra={"collection": "notifications"}
        )
        retention_sweeps_total.labels(collection="notifications", status="success").inc()
        return NotificationSweepResult(
            success=True,
            deleted_count=deleted,
            message=f"Successfully deleted {deleted} old notifications",
        )

    async def run_full_sweep(self) -> FullSweepResult:
        """Run both sweeps with their default thresholds.

        The notification sweep runs even if the request sweep failed.
        """
        logger.info("Starting full cleanup process")

        requests_result = await self.sweep_completed_requests(DEFAULT_REQUEST_RETENTION_DAYS)
        notifications_result = await self.sweep_old_notifications(DEFAULT_NOTIFICATION_RETENTION_DAYS)

        result = FullSweepResult(
            requests=requests_result,
            notifications=notifications_result,
            total_deleted=requests_result.deleted_count + notifications_result.deleted_count,
            total_images_processed=requests_result.images_processed,
        )

        logger.info(
            "Full cleanup completed",
            extra={
                "total_deleted": result.total_deleted,
                "total_images_processed": result.total_images_processed,
                "has_errors": not result.success,
            }
        )
        return result

    async def get_storage_statistics(self) -> StorageStatistics:
        """Aggregate collection sizes and 30-day cleanup estimates.

        Read-only. Uses STATISTICS_RETENTION_DAYS rather than any sweep
        threshold, with the same strict comparison the sweeps use.

        Raises:
            StoreError: If either collection cannot be read
        """
        cutoff = self.compute_cutoff(STATISTICS_RETENTION_DAYS)
        completed = RequestStatus.COMPLETED

        (
            total_requests,
            completed_requests,
            old_completed,
            total_images,
            old_images,
            total_notifications,
        ) = await asyncio.gather(
            self.request_store.count(),
            self.request_store.count(status=completed),
            self.request_store.count(status=completed, created_before=cutoff),
            self.request_store.count(has_image=True),
            self.request_store.count(status=completed, created_before=cutoff, has_image=True),
            self.notification_store.count(),
        )

        return StorageStatistics(
            total_requests=total_requests,
            completed_requests=completed_requests,
            old_completed_requests=old_completed,
            total_notifications=total_notifications,
            total_images_stored=total_images,
            old_images_for_cleanup=old_images,
            estimated_cleanup_savings=old_completed,
            estimated_image_cleanup=old_images,
            image_deletion_supported=self.image_store.supports_delete,
        )

    async def _process_images(self, requests: Iterable[StoredRequest]) -> Tuple[int, int]:
        """Attempt removal of every hosted image attached to `requests`.

        Returns:
            (attempted, actually_deleted)
        """
        urls = [request.image_url for request in requests if request.image_url]
        if not urls:
            return 0, 0

        if not self.image_store.supports_delete:
            # The host keeps the files; the attempt is recorded, nothing is removed.
            logger.info(
                f"Image host has no delete API, {len(urls)} images left in place",
                extra={"collection": "requests", "images": len(urls)}
            )
            retention_images_processed_total.labels(outcome="unsupported").inc(len(urls))
            return len(urls), 0

        results = await asyncio.gather(
            *(self.image_store.delete_image(url) for url in urls),
            return_exceptions=True,
        )

        deleted = 0
        for url, outcome in zip(urls, results):
            if isinstance(outcome, BaseException):
                logger.warning(
                    f"Failed to delete image {url}",
                    extra={"collection": "requests", "error": str(outcome)}
                )
                retention_images_processed_total.labels(outcome="error").inc()
            elif outcome:
                deleted += 1
                retention_images_processed_total.labels(outcome="deleted").inc()
            else:
                retention_images_processed_total.labels(outcome="missing").inc()

        return len(urls), deleted

    async def _delete_all(
        self,
        delete: Callable[[str], Awaitable[None]],
        ids: List[str],
        batch_size: int = DELETION_BATCH_SIZE,
    ) -> Tuple[int, List[BaseException]]:
        """Delete documents concurrently, one join per batch.

        Returns:
            (confirmed_deletions, failures)
        """
        deleted = 0
        failures: List[BaseException] = []

        for offset in range(0, len(ids), batch_size):
            batch = ids[offset:offset + batch_size]
            results = await asyncio.gather(
                *(delete(doc_id) for doc_id in batch),
                return_exceptions=True,
            )
            for doc_id, outcome in zip(batch, results):
                if isinstance(outcome, BaseException):
                    logger.warning(
                        f"Failed to delete document {doc_id}",
                        extra={"error": str(outcome)}
                    )
                    failures.append(outcome)
                else:
                    deleted += 1

        return deleted, failures


def build_retention_service(
    request_store: RequestStorePort,
    notification_store: NotificationStorePort,
    image_store: ImageStorePort,
    clock: Optional[Clock] = None,
) -> RetentionService:
    """Construct the process-wide retention service."""
    return RetentionService(
        request_store=request_store,
        notification_store=notification_store,
        image_store=image_store,
        clock=clock or utcnow,
    )
