"""Ledger entry document model"""
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerEntryRecord(Base):
    """
    One ledger entry stored as a whole JSON document.

    Only the columns needed to look entries up are broken out; the
    document is always read and written in full.
    """

    __tablename__ = "ledger_entries"

    id = Column(String(36), primary_key=True, index=True)
    group_id = Column(String(64), nullable=False, index=True)
    document = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<LedgerEntryRecord(id={self.id}, group_id={self.group_id})>"
