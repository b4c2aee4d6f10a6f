"""Request Store Port - Domain interface for the `requests` collection.

Adapters provide a document store holding maintenance requests. Each
operation is an independent single-document (or single-query) call; the
port makes no multi-document transaction guarantees.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..request_status import RequestStatus


@dataclass
class StoredRequest:
    """A maintenance request as held by the document store.

    Attributes:
        id: Opaque identifier assigned by the store
        branch_code: Submitting branch (immutable)
        problem_type: One of PROBLEM_TYPES
        description: Free-text problem description
        status: Current lifecycle status
        timestamp: Creation time, UTC (immutable)
        image_url: Hosted photo URL, if one was attached
        user_id: Identity of the submitter
        rating: 1-5, only once status is COMPLETED
        feedback: Optional text accompanying the rating
        manager_notes: Notes left by the last manager status change
    """
    id: str
    branch_code: str
    problem_type: str
    description: str
    status: RequestStatus
    timestamp: datetime
    image_url: Optional[str] = None
    user_id: Optional[str] = None
    rating: Optional[int] = None
    feedback: Optional[str] = None
    manager_notes: Optional[str] = None


@dataclass
class NewRequest:
    """Fields supplied when a request is filed; the store assigns the id."""
    branch_code: str
    problem_type: str
    description: str
    status: RequestStatus
    timestamp: datetime
    image_url: Optional[str] = None
    user_id: Optional[str] = None


class RequestStorePort(ABC):
    """Port interface for maintenance request persistence.

    All methods raise domain.errors.StoreError when the store is unavailable
    or rejects the operation.
    """

    @abstractmethod
    async def add(self, request: NewRequest) -> StoredRequest:
        """Insert a new request and return it with its assigned id."""
        pass

    @abstractmethod
    async def get(self, request_id: str) -> Optional[StoredRequest]:
        """Fetch one request, or None if it does not exist."""
        pass

    @abstractmethod
    async def update(self, request_id: str, **changes) -> Optional[StoredRequest]:
        """Apply field changes atomically to one request.

        Only mutable fields (status, rating, feedback, manager_notes) may be
        passed. Returns the updated request, or None if it does not exist.
        """
        pass

    @abstractmethod
    async def set_rating(self, request_id: str, rating: int, feedback: Optional[str] = None) -> bool:
        """Record a rating if the request is COMPLETED and not yet rated.

        The check and the write are one conditional operation, so concurrent
        callers cannot both succeed.

        Returns:
            True if this call stored the rating, False otherwise
        """
        pass

    @abstractmethod
    async def delete(self, request_id: str) -> None:
        """Delete one request.

        Deleting a request that does not exist is a successful no-op.
        """
        pass

    @abstractmethod
    async def find(
        self,
        status: Optional[RequestStatus] = None,
        created_before: Optional[datetime] = None,
        branch_code: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[StoredRequest]:
        """Query requests matching every given filter, newest first.

        Args:
            status: Exact status match
            created_before: Strictly older than this instant (timestamp < value)
            branch_code: Exact branch match
            user_id: Exact submitter match
            limit: Maximum number of results

        Returns:
            Matching requests ordered by timestamp descending
        """
        pass

    @abstractmethod
    async def count(
        self,
        status: Optional[RequestStatus] = None,
        created_before: Optional[datetime] = None,
        has_image: Optional[bool] = None,
    ) -> int:
        """Count requests matching every given filter without loading them.

        `has_image` selects requests with (True) or without (False) an image URL.
        """
        pass
