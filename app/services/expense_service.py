"""Ledger entry business logic"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.exceptions import AuthorizationError, NotFoundError, StateError, ValidationError
from app.repositories.entry_repository import EntryRepository
from app.schemas.expense import (EntryBase, EntryCreate, EntryResponse, EntryUpdate,
                                 LedgerEntry, Split, SplitInput, SplitStrategy,
                                 SettlementCreate)
from app.schemas.group import Group
from app.services import acceptance
from app.services.balance_service import BalanceService
from app.services.group_service import GroupService
from app.services.item_reconciler import (assign_item, build_item_splits, is_incomplete,
                                          validate_items)
from app.services.split_strategies import calculate_splits, validate_splits

logger = logging.getLogger(__name__)
settings = get_settings()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExpenseService:
    """Service for ledger entry operations"""

    @staticmethod
    def validate_members_exist(group: Group, member_ids: Iterable[str]) -> None:
        """
        Validate that all member IDs belong to the group.

        Args:
            group: Group snapshot
            member_ids: IDs referenced by the request

        Raises:
            NotFoundError: If any member ID is unknown
        """
        for member_id in member_ids:
            if not group.has_member(member_id):
                raise NotFoundError(f"Member with ID {member_id} not found")

    @staticmethod
    def build_splits(group: Group, entry_data: EntryBase, now: datetime) -> List[Split]:
        """
        Compute fresh splits for an entry, before any acceptance is applied.

        Entries with line items are split by item ownership; all others by
        the chosen strategy.

        Args:
            group: Group snapshot
            entry_data: Caller input
            now: Timestamp for the payer's acceptance

        Returns:
            List of Split rows

        Raises:
            NotFoundError: If the payer, a participant or an item owner is unknown
            ValidationError: If the amounts or inputs are inconsistent
        """
        ExpenseService.validate_members_exist(group, [entry_data.paid_by])

        if entry_data.items:
            if entry_data.strategy == SplitStrategy.SETTLEMENT:
                raise ValidationError("Settlements cannot have line items")

            validate_items(entry_data.amount, entry_data.items)
            ExpenseService.validate_members_exist(
                group, [i.owner_id for i in entry_data.items if i.owner_id]
            )
            return build_item_splits(entry_data.amount, entry_data.items, entry_data.paid_by)

        ExpenseService.validate_members_exist(group, [s.member_id for s in entry_data.splits])
        validate_splits(
            entry_data.amount, entry_data.strategy, entry_data.splits, entry_data.paid_by
        )
        return calculate_splits(
            entry_data.amount,
            entry_data.strategy,
            entry_data.splits,
            entry_data.paid_by,
            now,
        )

    @staticmethod
    def ensure_can_modify(entry: LedgerEntry, member_id: str, action: str) -> None:
        """
        Only the payer or the member who recorded the entry may change it.

        Raises:
            AuthorizationError: If the member is neither
        """
        if member_id not in (entry.paid_by, entry.created_by):
            raise AuthorizationError(f"Only the payer or the creator can {action} this entry")

    @staticmethod
    def ensure_not_deleted(entry: LedgerEntry) -> None:
        """
        Raises:
            StateError: If the entry was deleted
        """
        if entry.is_deleted:
            raise StateError(f"Entry {entry.id} has been deleted")

    @staticmethod
    def to_response(entry: LedgerEntry) -> EntryResponse:
        """Attach derived display fields to an entry"""
        return EntryResponse(
            **entry.model_dump(exclude={"split_strategy"}),
            status=acceptance.entry_status(entry),
            incomplete=is_incomplete(entry),
            fully_accepted=acceptance.is_fully_accepted(entry),
        )

    @staticmethod
    async def _store(db: AsyncSession, entry: LedgerEntry) -> LedgerEntry:
        """Persist an entry and drop the cached balances of its group"""
        await EntryRepository.save(db, entry)
        await db.commit()
        await BalanceService.invalidate_group_balances(entry.group_id)
        return entry

    @staticmethod
    async def get_entry(db: AsyncSession, group_id: str, entry_id: str) -> LedgerEntry:
        """
        Get a single entry, deleted or not.

        Raises:
            NotFoundError: If the entry does not exist in the group
        """
        entry = await EntryRepository.get_by_id(db, group_id, entry_id)
        if entry is None:
            raise NotFoundError(f"Entry {entry_id} not found")
        return entry

    @staticmethod
    async def create_entry(
        db: AsyncSession, group_id: str, entry_data: EntryCreate, member_id: str
    ) -> LedgerEntry:
        """
        Record a new entry.

        Args:
            db: Database session
            group_id: Group ID
            entry_data: Entry creation data
            member_id: Member recording the entry

        Returns:
            Created entry; payer and creator start Accepted

        Raises:
            NotFoundError: If a referenced member is unknown
            ValidationError: If validation fails
        """
        group = await GroupService.get_group(db, group_id)
        ExpenseService.validate_members_exist(group, [member_id])

        now = _utcnow()
        splits = ExpenseService.build_splits(group, entry_data, now)

        entry = LedgerEntry(
            group_id=group.id,
            description=entry_data.description,
            amount=entry_data.amount,
            paid_by=entry_data.paid_by,
            created_by=member_id,
            created_at=now,
            strategy=entry_data.strategy,
            splits=acceptance.initialize_acceptance(splits, entry_data.paid_by, member_id, now),
            items=entry_data.items,
            tags=entry_data.tags,
            receipt_date=entry_data.receipt_date,
        )

        await ExpenseService._store(db, entry)
        logger.info(
            "Member %s recorded %s entry %s for %s",
            member_id,
            entry.split_strategy.value,
            entry.id,
            entry.amount,
        )
        return entry

    @staticmethod
    async def update_entry(
        db: AsyncSession,
        group_id: str,
        entry_id: str,
        entry_data: EntryUpdate,
        member_id: str,
    ) -> LedgerEntry:
        """
        Edit an entry (payer or creator only).

        Members whose share moved by more than 0.01 fall back to Pending
        and keep their old amount in previous_amount.

        Raises:
            NotFoundError: If the entry or a referenced member is unknown
            AuthorizationError: If the member may not edit the entry
            StateError: If the entry was deleted
            ValidationError: If validation fails
        """
        entry = await ExpenseService.get_entry(db, group_id, entry_id)
        ExpenseService.ensure_not_deleted(entry)
        ExpenseService.ensure_can_modify(entry, member_id, "edit")

        group = await GroupService.get_group(db, group_id)
        now = _utcnow()
        proposed = ExpenseService.build_splits(group, entry_data, now)

        updated = LedgerEntry.model_validate(
            {
                **entry.model_dump(exclude={"split_strategy"}),
                "description": entry_data.description,
                "amount": entry_data.amount,
                "paid_by": entry_data.paid_by,
                "strategy": entry_data.strategy,
                "splits": acceptance.reconcile_edit(
                    entry.splits, proposed, entry_data.paid_by, now
                ),
                "items": entry_data.items,
                "tags": entry_data.tags,
                "receipt_date": entry_data.receipt_date,
                "updated_at": now,
            }
        )

        await ExpenseService._store(db, updated)
        logger.info("Member %s edited entry %s", member_id, entry_id)
        return updated

    @staticmethod
    async def accept_entry(
        db: AsyncSession, group_id: str, entry_id: str, member_id: str
    ) -> LedgerEntry:
        """
        Accept the member's own share of an entry.

        Raises:
            NotFoundError: If the entry is unknown or the member has no share
            StateError: If the entry was deleted
        """
        entry = await ExpenseService.get_entry(db, group_id, entry_id)
        ExpenseService.ensure_not_deleted(entry)

        updated = acceptance.accept_split(entry, member_id, _utcnow())
        if updated is entry:
            return entry

        await ExpenseService._store(db, updated)
        logger.info("Member %s accepted entry %s", member_id, entry_id)
        return updated

    @staticmethod
    async def force_accept(
        db: AsyncSession,
        group_id: str,
        entry_id: str,
        member_id: str,
        actor_id: str,
    ) -> LedgerEntry:
        """
        Accept another member's share after the grace period.

        Args:
            db: Database session
            group_id: Group ID
            entry_id: Entry ID
            member_id: Member whose share is accepted
            actor_id: Payer or creator performing the override

        Raises:
            NotFoundError: If the entry is unknown or the member has no share
            AuthorizationError: If the actor is neither payer nor creator
            StateError: If the entry is deleted, a settlement, or too recent
        """
        entry = await ExpenseService.get_entry(db, group_id, entry_id)
        ExpenseService.ensure_not_deleted(entry)

        updated = acceptance.force_accept(
            entry,
            actor_id,
            member_id,
            _utcnow(),
            grace_period=timedelta(days=settings.force_accept_grace_days),
        )
        if updated is entry:
            return entry

        return await ExpenseService._store(db, updated)

    @staticmethod
    async def claim_item(
        db: AsyncSession,
        group_id: str,
        entry_id: str,
        item_id: str,
        actor_id: str,
        owner_id: Optional[str] = None,
    ) -> LedgerEntry:
        """
        Claim a line item for `owner_id` (the acting member by default).

        Raises:
            NotFoundError: If the entry or the owner is unknown
            StateError: If the entry is deleted, a settlement, or has no such item
        """
        owner_id = owner_id or actor_id

        group = await GroupService.get_group(db, group_id)
        ExpenseService.validate_members_exist(group, [owner_id])

        entry = await ExpenseService.get_entry(db, group_id, entry_id)
        ExpenseService.ensure_not_deleted(entry)

        updated = assign_item(entry, item_id, owner_id, actor_id, _utcnow())
        await ExpenseService._store(db, updated)
        logger.info("Item %s on entry %s claimed for %s", item_id, entry_id, owner_id)
        return updated

    @staticmethod
    async def unclaim_item(
        db: AsyncSession, group_id: str, entry_id: str, item_id: str, actor_id: str
    ) -> LedgerEntry:
        """
        Release a line item; its amount goes back to the payer.

        Raises:
            NotFoundError: If the entry is unknown
            StateError: If the entry is deleted, a settlement, or has no such item
        """
        entry = await ExpenseService.get_entry(db, group_id, entry_id)
        ExpenseService.ensure_not_deleted(entry)

        updated = assign_item(entry, item_id, None, actor_id, _utcnow())
        await ExpenseService._store(db, updated)
        logger.info("Item %s on entry %s unclaimed by %s", item_id, entry_id, actor_id)
        return updated

    @staticmethod
    async def delete_entry(
        db: AsyncSession, group_id: str, entry_id: str, member_id: str
    ) -> LedgerEntry:
        """
        Soft-delete an entry (payer or creator only). Deleting twice is a no-op.

        Raises:
            NotFoundError: If the entry is unknown
            AuthorizationError: If the member may not delete the entry
        """
        entry = await ExpenseService.get_entry(db, group_id, entry_id)
        ExpenseService.ensure_can_modify(entry, member_id, "delete")

        updated = acceptance.soft_delete(entry, _utcnow())
        if updated is entry:
            return entry

        await ExpenseService._store(db, updated)
        logger.info("Member %s deleted entry %s", member_id, entry_id)
        return updated

    @staticmethod
    async def record_settlement(
        db: AsyncSession, group_id: str, settlement_data: SettlementCreate, member_id: str
    ) -> LedgerEntry:
        """
        Record a direct payment between two members.

        The recipient's share starts Pending unless the recipient recorded it.

        Raises:
            NotFoundError: If a member is unknown
            ValidationError: If a member would settle with themselves
        """
        entry_data = EntryCreate(
            description=settlement_data.description,
            amount=settlement_data.amount,
            paid_by=settlement_data.from_member_id,
            strategy=SplitStrategy.SETTLEMENT,
            splits=[
                SplitInput(
                    member_id=settlement_data.to_member_id, value=settlement_data.amount
                )
            ],
        )
        return await ExpenseService.create_entry(db, group_id, entry_data, member_id)

    @staticmethod
    async def list_entries(
        db: AsyncSession,
        group_id: str,
        page: int = 1,
        page_size: int = 20,
        include_deleted: bool = False,
    ) -> tuple[List[LedgerEntry], int]:
        """
        Get entries of the group with pagination, newest first.

        Args:
            db: Database session
            group_id: Group ID
            page: Page number (1-indexed)
            page_size: Items per page
            include_deleted: Whether soft-deleted entries are listed

        Returns:
            Tuple of (entries list, total count)
        """
        entries = await EntryRepository.load(db, group_id)
        if not include_deleted:
            entries = [e for e in entries if not e.is_deleted]

        entries.reverse()
        skip = (page - 1) * page_size
        return entries[skip:skip + page_size], len(entries)

    @staticmethod
    async def pending_actions(db: AsyncSession, group_id: str, member_id: str) -> dict:
        """
        Entries that need attention, from the member's point of view.

        Returns:
            Dict with `awaiting_you` (the member's own share is Pending),
            `awaiting_others` (entries the member paid or recorded that
            others have not accepted) and `incomplete` (unclaimed items)
        """
        entries = [e for e in await EntryRepository.load(db, group_id) if not e.is_deleted]

        awaiting_you = []
        awaiting_others = []
        incomplete = []

        for entry in entries:
            own = entry.split_for(member_id)
            if own is not None and not own.accepted:
                awaiting_you.append(entry)

            if member_id in (entry.paid_by, entry.created_by) and any(
                not s.accepted for s in entry.splits if s.member_id != member_id
            ):
                awaiting_others.append(entry)

            if is_incomplete(entry):
                incomplete.append(entry)

        return {
            "awaiting_you": awaiting_you,
            "awaiting_others": awaiting_others,
            "incomplete": incomplete,
        }
