"""Group document model"""
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GroupRecord(Base):
    """Group settings and member list stored as one JSON document"""

    __tablename__ = "groups"

    id = Column(String(64), primary_key=True, index=True)
    document = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<GroupRecord(id={self.id})>"
