"""Maintenance domain module - request lifecycle rules and the request store port"""

from .request_status import (
    RequestStatus,
    MANAGER_TRANSITIONS,
    CANCELLABLE_STATUSES,
    TERMINAL_STATUSES,
    can_transition,
    can_cancel,
    can_rate,
    get_status_label,
)
from .problem_types import PROBLEM_TYPES, MIN_RATING, MAX_RATING, is_known_problem_type

__all__ = [
    "RequestStatus",
    "MANAGER_TRANSITIONS",
    "CANCELLABLE_STATUSES",
    "TERMINAL_STATUSES",
    "can_transition",
    "can_cancel",
    "can_rate",
    "get_status_label",
    "PROBLEM_TYPES",
    "MIN_RATING",
    "MAX_RATING",
    "is_known_problem_type",
]
