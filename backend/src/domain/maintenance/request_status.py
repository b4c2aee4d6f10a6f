"""RequestStatus state machine for the maintenance request lifecycle

State flow:
UNDER_REVIEW → APPROVED → IN_PROGRESS → COMPLETED
Managers may skip forward stages and may REJECT any open request.
Only the submitting user may CANCEL, and only before work starts.
"""

from enum import Enum
from typing import Dict, List, Optional


class RequestStatus(str, Enum):
    """Maintenance request status enum"""
    UNDER_REVIEW = "UNDER_REVIEW"  # Filed, waiting for a manager
    APPROVED = "APPROVED"          # Accepted by a manager
    IN_PROGRESS = "IN_PROGRESS"    # Work under way
    COMPLETED = "COMPLETED"        # Terminal success, eligible for rating and retention
    REJECTED = "REJECTED"          # Terminal, manager declined
    CANCELLED = "CANCELLED"        # Terminal, withdrawn by the submitter


STATUS_LABELS: Dict[RequestStatus, str] = {
    RequestStatus.UNDER_REVIEW: "Under Review",
    RequestStatus.APPROVED: "Approved",
    RequestStatus.IN_PROGRESS: "In Progress",
    RequestStatus.COMPLETED: "Completed",
    RequestStatus.REJECTED: "Rejected",
    RequestStatus.CANCELLED: "Cancelled",
}

# Transitions a manager may apply
MANAGER_TRANSITIONS: Dict[Optional[RequestStatus], List[RequestStatus]] = {
    None: [RequestStatus.UNDER_REVIEW],
    RequestStatus.UNDER_REVIEW: [
        RequestStatus.APPROVED,
        RequestStatus.IN_PROGRESS,
        RequestStatus.COMPLETED,
        RequestStatus.REJECTED,
    ],
    RequestStatus.APPROVED: [
        RequestStatus.IN_PROGRESS,
        RequestStatus.COMPLETED,
        RequestStatus.REJECTED,
    ],
    RequestStatus.IN_PROGRESS: [
        RequestStatus.COMPLETED,
        RequestStatus.REJECTED,
    ],
    RequestStatus.COMPLETED: [],
    RequestStatus.REJECTED: [],
    RequestStatus.CANCELLED: [],
}

CANCELLABLE_STATUSES = frozenset({RequestStatus.UNDER_REVIEW, RequestStatus.APPROVED})

TERMINAL_STATUSES = frozenset({
    RequestStatus.COMPLETED,
    RequestStatus.REJECTED,
    RequestStatus.CANCELLED,
})


def can_transition(from_status: Optional[RequestStatus], to_status: RequestStatus) -> bool:
    """Validate if a manager status change is allowed

    Example:
        >>> can_transition(RequestStatus.APPROVED, RequestStatus.IN_PROGRESS)
        True
        >>> can_transition(RequestStatus.COMPLETED, RequestStatus.IN_PROGRESS)
        False
    """
    return to_status in MANAGER_TRANSITIONS.get(from_status, [])


def can_cancel(status: RequestStatus) -> bool:
    """Whether the submitter may still withdraw a request in this status."""
    return status in CANCELLABLE_STATUSES


def can_rate(status: RequestStatus) -> bool:
    """Ratings are only accepted once the work is completed."""
    return status == RequestStatus.COMPLETED


def get_status_label(status: RequestStatus) -> str:
    """Human-readable label used in notification messages."""
    return STATUS_LABELS.get(status, str(status))
