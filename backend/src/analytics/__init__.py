"""Manager dashboard analytics."""

from .schemas import AnalyticsSummary, BranchStats

__all__ = ["AnalyticsSummary", "BranchStats"]
