"""Ledger entry data access"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.entry import LedgerEntryRecord
from app.schemas.expense import LedgerEntry


class EntryRepository:
    """
    Document store for ledger entries.

    Entries are always loaded and saved whole; there are no field-level
    updates, so concurrent writers to one entry are last-writer-wins.
    """

    @staticmethod
    def _to_entry(record: LedgerEntryRecord) -> LedgerEntry:
        return LedgerEntry.model_validate(record.document)

    @staticmethod
    async def load(db: AsyncSession, group_id: str) -> List[LedgerEntry]:
        """
        Load every entry of a group, oldest first.

        Args:
            db: Database session
            group_id: Group ID

        Returns:
            List of entries, including soft-deleted ones
        """
        result = await db.execute(
            select(LedgerEntryRecord)
            .where(LedgerEntryRecord.group_id == group_id)
            .order_by(LedgerEntryRecord.created_at, LedgerEntryRecord.id)
        )
        return [EntryRepository._to_entry(r) for r in result.scalars().all()]

    @staticmethod
    async def get_by_id(
        db: AsyncSession, group_id: str, entry_id: str
    ) -> Optional[LedgerEntry]:
        """
        Get entry by ID.

        Args:
            db: Database session
            group_id: Group the entry must belong to
            entry_id: Entry ID

        Returns:
            Entry if found, None otherwise
        """
        result = await db.execute(
            select(LedgerEntryRecord).where(
                LedgerEntryRecord.id == entry_id,
                LedgerEntryRecord.group_id == group_id,
            )
        )
        record = result.scalar_one_or_none()
        return EntryRepository._to_entry(record) if record else None

    @staticmethod
    async def save(db: AsyncSession, entry: LedgerEntry) -> LedgerEntry:
        """
        Insert or replace the whole entry document.

        Args:
            db: Database session
            entry: Entry to persist

        Returns:
            The persisted entry
        """
        document = entry.model_dump(mode="json", exclude={"split_strategy"})
        record = await db.get(LedgerEntryRecord, entry.id)

        if record is None:
            record = LedgerEntryRecord(
                id=entry.id,
                group_id=entry.group_id,
                document=document,
                created_at=entry.created_at,
            )
            db.add(record)
        else:
            record.document = document

        await db.flush()
        return entry
