"""SQLAlchemy models"""
from app.models.entry import LedgerEntryRecord
from app.models.group import GroupRecord

__all__ = ["LedgerEntryRecord", "GroupRecord"]
