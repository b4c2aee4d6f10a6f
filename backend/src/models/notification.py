"""Notification SQLAlchemy model

Backs the `notifications` collection. Rows are written once when a request is
created or changes status; afterwards only `read` is ever updated.
"""

import uuid

from sqlalchemy import Boolean, Column, Index, String, Text, false

from .base import Base, UTCDateTime


def _new_id() -> str:
    return uuid.uuid4().hex


class Notification(Base):
    """In-app notification for managers or for a branch."""
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_timestamp", "timestamp"),
        Index("ix_notifications_audience", "is_for_manager", "branch_code"),
    )

    id = Column(String(32), primary_key=True, default=_new_id)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    timestamp = Column(UTCDateTime(), nullable=False)
    read = Column(Boolean, nullable=False, default=False, server_default=false())
    branch_code = Column(String(64), nullable=True)
    is_for_manager = Column(Boolean, nullable=False, default=False)
    request_id = Column(String(32), nullable=True)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type={self.type}, read={self.read})>"
