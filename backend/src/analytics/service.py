"""Analytics service - dashboard aggregates over all requests."""

from collections import Counter
from typing import Dict

from domain.maintenance import RequestStatus
from domain.maintenance.ports import RequestStorePort
from .schemas import AnalyticsSummary, BranchStats


class AnalyticsService:
    """Computes the manager dashboard summary."""

    def __init__(self, request_store: RequestStorePort):
        self.request_store = request_store

    async def summary(self) -> AnalyticsSummary:
        """Aggregate totals, per-status and per-branch counts, and ratings.

        "Pending" means still under review. Completion rate is completed over
        total, 0.0 when there are no requests.

        Raises:
            StoreError: If the requests collection cannot be read
        """
        requests = await self.request_store.find()

        by_status = Counter(r.status.value for r in requests)
        by_branch: Dict[str, BranchStats] = {}
        for r in requests:
            stats = by_branch.setdefault(r.branch_code, BranchStats())
            stats.total += 1
            if r.status == RequestStatus.COMPLETED:
                stats.completed += 1
            elif r.status == RequestStatus.UNDER_REVIEW:
                stats.pending += 1

        ratings = [r.rating for r in requests if r.rating is not None]
        total = len(requests)
        completed = by_status.get(RequestStatus.COMPLETED.value, 0)

        return AnalyticsSummary(
            total_requests=total,
            by_status={s.value: by_status.get(s.value, 0) for s in RequestStatus},
            by_branch=dict(sorted(by_branch.items())),
            average_rating=round(sum(ratings) / len(ratings), 2) if ratings else None,
            rated_requests=len(ratings),
            completion_rate=round(completed / total, 4) if total else 0.0,
        )
