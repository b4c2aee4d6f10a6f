"""MaintenanceRequest SQLAlchemy model

Backs the `requests` collection: one row per issue report filed by a branch.
"""

import uuid

from sqlalchemy import Column, Index, Integer, String, Text

from .base import Base, UTCDateTime


def _new_id() -> str:
    return uuid.uuid4().hex


class MaintenanceRequest(Base):
    """Maintenance request filed by branch staff.

    `status` holds a domain.maintenance.RequestStatus value. `timestamp` and
    `image_url` are written once at creation and never updated.
    """
    __tablename__ = "requests"
    __table_args__ = (
        Index("ix_requests_status_timestamp", "status", "timestamp"),
        Index("ix_requests_branch_code", "branch_code"),
        Index("ix_requests_user_id", "user_id"),
    )

    id = Column(String(32), primary_key=True, default=_new_id)
    branch_code = Column(String(64), nullable=False)
    user_id = Column(String(128), nullable=True)
    problem_type = Column(String(64), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(32), nullable=False)
    timestamp = Column(UTCDateTime(), nullable=False)
    image_url = Column(Text, nullable=True)
    rating = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    manager_notes = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<MaintenanceRequest(id={self.id}, branch={self.branch_code}, status={self.status})>"
