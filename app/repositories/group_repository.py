"""Group data access"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.group import GroupRecord
from app.schemas.group import Group


class GroupRepository:
    """Document store for the group"""

    @staticmethod
    async def get_by_id(db: AsyncSession, group_id: str) -> Optional[Group]:
        """
        Get group by ID.

        Args:
            db: Database session
            group_id: Group ID

        Returns:
            Group if found, None otherwise
        """
        record = await db.get(GroupRecord, group_id)
        if record is None:
            return None
        return Group.model_validate(record.document)

    @staticmethod
    async def save(db: AsyncSession, group: Group) -> Group:
        """
        Insert or replace the group document.

        Args:
            db: Database session
            group: Group to persist

        Returns:
            The persisted group
        """
        document = group.model_dump(mode="json")
        record = await db.get(GroupRecord, group.id)

        if record is None:
            record = GroupRecord(id=group.id, document=document, created_at=group.created_at)
            db.add(record)
        else:
            record.document = document

        await db.flush()
        return group
