"""Group and membership business logic"""
import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.exceptions import NotFoundError, StateError, ValidationError
from app.repositories.entry_repository import EntryRepository
from app.repositories.group_repository import GroupRepository
from app.schemas.group import Group, GroupUpdate, Member, MemberCreate, MemberUpdate
from app.services.balance_calculator import calculate_balances
from app.services.cache_service import CacheService
from app.utils.decimal_utils import is_settled

logger = logging.getLogger(__name__)
settings = get_settings()


class GroupService:
    """Service for group and member operations"""

    @staticmethod
    def ensure_unique_name(group: Group, name: str, member_id: str = None) -> None:
        """
        Reject a member name already used by another member.

        Args:
            group: Group snapshot
            name: Candidate name
            member_id: Member being renamed, ignored in the comparison

        Raises:
            ValidationError: If the name exists, compared case-insensitively
        """
        existing = group.find_by_name(name)
        if existing is not None and existing.id != member_id:
            raise ValidationError(f'Name "{name.strip()}" already exists')

    @staticmethod
    async def get_group(db: AsyncSession, group_id: str) -> Group:
        """
        Get the group, creating the configured default group on first use.

        Args:
            db: Database session
            group_id: Group ID

        Returns:
            Group

        Raises:
            NotFoundError: If the group does not exist and is not the default
        """
        group = await GroupRepository.get_by_id(db, group_id)
        if group is not None:
            return group

        if group_id != settings.default_group_id:
            raise NotFoundError(f"Group {group_id} not found")

        group = Group(
            id=group_id,
            name=settings.default_group_name,
            currency=settings.default_currency,
            members=[],
            created_at=datetime.now(timezone.utc),
        )
        await GroupRepository.save(db, group)
        await db.commit()
        logger.info("Created default group %s", group_id)
        return group

    @staticmethod
    async def get_member(db: AsyncSession, group_id: str, member_id: str) -> Member:
        """
        Get a member of the group.

        Raises:
            NotFoundError: If the member is not in the group
        """
        group = await GroupService.get_group(db, group_id)
        member = group.get_member(member_id)
        if member is None:
            raise NotFoundError(f"Member with ID {member_id} not found")
        return member

    @staticmethod
    async def update_group(
        db: AsyncSession, group_id: str, group_data: GroupUpdate
    ) -> Group:
        """
        Update group name and display currency.

        Args:
            db: Database session
            group_id: Group ID
            group_data: Fields to change

        Returns:
            Updated group
        """
        group = await GroupService.get_group(db, group_id)
        updates = group_data.model_dump(exclude_unset=True, exclude_none=True)
        group = group.model_copy(update=updates)

        await GroupRepository.save(db, group)
        await db.commit()
        await CacheService.delete(f"balances:{group_id}")
        return group

    @staticmethod
    async def add_member(
        db: AsyncSession, group_id: str, member_data: MemberCreate
    ) -> Member:
        """
        Add a member to the group.

        Raises:
            ValidationError: If the name is already used
        """
        group = await GroupService.get_group(db, group_id)
        GroupService.ensure_unique_name(group, member_data.name)

        member = Member(**member_data.model_dump())
        group = group.model_copy(update={"members": [*group.members, member]})

        await GroupRepository.save(db, group)
        await db.commit()
        await CacheService.delete(f"balances:{group_id}")
        logger.info("Added member %s (%s) to group %s", member.id, member.name, group_id)
        return member

    @staticmethod
    async def update_member(
        db: AsyncSession, group_id: str, member_id: str, member_data: MemberUpdate
    ) -> Member:
        """
        Rename a member or change payout metadata.

        Raises:
            NotFoundError: If the member is not in the group
            ValidationError: If the new name is already used
        """
        group = await GroupService.get_group(db, group_id)
        member = group.get_member(member_id)
        if member is None:
            raise NotFoundError(f"Member with ID {member_id} not found")

        updates = member_data.model_dump(exclude_unset=True)
        if updates.get("name") is not None:
            GroupService.ensure_unique_name(group, updates["name"], member_id)
        else:
            updates.pop("name", None)

        # Revalidate so the name is stripped the same way as on creation
        updated = Member.model_validate({**member.model_dump(), **updates})
        members = [updated if m.id == member_id else m for m in group.members]
        group = group.model_copy(update={"members": members})

        await GroupRepository.save(db, group)
        await db.commit()
        await CacheService.delete(f"balances:{group_id}")
        return updated

    @staticmethod
    async def remove_member(db: AsyncSession, group_id: str, member_id: str) -> bool:
        """
        Remove a member whose confirmed and pending balances are both zero.

        Raises:
            NotFoundError: If the member is not in the group
            StateError: If the member still has a balance
        """
        group = await GroupService.get_group(db, group_id)
        if not group.has_member(member_id):
            raise NotFoundError(f"Member with ID {member_id} not found")

        entries = await EntryRepository.load(db, group_id)
        balances = calculate_balances(
            entries, group.members, include_deleted=settings.include_deleted_in_balances
        )
        balance = next(b for b in balances if b.member_id == member_id)

        if not (is_settled(balance.confirmed) and is_settled(balance.pending)):
            raise StateError(
                f"Cannot remove {balance.member_name}: balance is "
                f"{balance.confirmed} confirmed and {balance.pending} pending"
            )

        members = [m for m in group.members if m.id != member_id]
        group = group.model_copy(update={"members": members})

        await GroupRepository.save(db, group)
        await db.commit()
        await CacheService.delete(f"balances:{group_id}")
        logger.info("Removed member %s from group %s", member_id, group_id)
        return True
