"""Expense endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_member, get_group_id
from app.database import get_db
from app.schemas.common import PaginationMeta
from app.schemas.expense import (EntryCreate, EntryListResponse, EntryResponse,
                                 EntryUpdate, ForceAcceptRequest,
                                 PendingActionsResponse)
from app.schemas.group import Member
from app.services.expense_service import ExpenseService

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    entry_data: EntryCreate,
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a new expense.

    Either `splits` with a strategy or `items` for a receipt split by line
    item. The payer and the caller start Accepted.

    Args:
        entry_data: Expense creation data
        current_member: Member recording the expense
        group_id: Group ID
        db: Database session

    Returns:
        Created expense with derived status

    Raises:
        400: If validation fails (sum mismatch, duplicate member, ...)
        404: If a referenced member doesn't exist
    """
    entry = await ExpenseService.create_entry(db, group_id, entry_data, current_member.id)
    return ExpenseService.to_response(entry)


@router.get("", response_model=EntryListResponse)
async def list_expenses(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    include_deleted: bool = Query(False, description="Also list deleted entries"),
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Get entries of the group, newest first, with pagination.

    Returns:
        Paginated list of entries with metadata
    """
    entries, total_count = await ExpenseService.list_entries(
        db, group_id, page=page, page_size=page_size, include_deleted=include_deleted
    )

    total_pages = (total_count + page_size - 1) // page_size if total_count > 0 else 0

    pagination = PaginationMeta(
        page=page,
        page_size=page_size,
        total_items=total_count,
        total_pages=total_pages
    )

    return EntryListResponse(
        items=[ExpenseService.to_response(e) for e in entries],
        pagination=pagination
    )


@router.get("/pending", response_model=PendingActionsResponse)
async def pending_actions(
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Entries awaiting the caller, entries the caller is waiting on, and
    entries with unclaimed items.
    """
    actions = await ExpenseService.pending_actions(db, group_id, current_member.id)
    return PendingActionsResponse(
        **{
            key: [ExpenseService.to_response(e) for e in entries]
            for key, entries in actions.items()
        }
    )


@router.get("/{entry_id}", response_model=EntryResponse)
async def get_expense(
    entry_id: str,
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a single entry, including deleted ones.

    Raises:
        404: If the entry doesn't exist
    """
    entry = await ExpenseService.get_entry(db, group_id, entry_id)
    return ExpenseService.to_response(entry)


@router.put("/{entry_id}", response_model=EntryResponse)
async def update_expense(
    entry_id: str,
    entry_data: EntryUpdate,
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Edit an entry.

    Only the payer or the creator can edit. Members whose share changed
    have to accept again.

    Raises:
        400: If validation fails
        403: If the caller is neither payer nor creator
        404: If the entry or a referenced member doesn't exist
        409: If the entry was deleted
    """
    entry = await ExpenseService.update_entry(
        db, group_id, entry_id, entry_data, current_member.id
    )
    return ExpenseService.to_response(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    entry_id: str,
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Soft-delete an entry. Deleting a deleted entry succeeds without change.

    Raises:
        403: If the caller is neither payer nor creator
        404: If the entry doesn't exist
    """
    await ExpenseService.delete_entry(db, group_id, entry_id, current_member.id)
    return None


@router.post("/{entry_id}/accept", response_model=EntryResponse)
async def accept_expense(
    entry_id: str,
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Accept the caller's share of an entry.

    Raises:
        404: If the entry doesn't exist or the caller has no share in it
        409: If the entry was deleted
    """
    entry = await ExpenseService.accept_entry(db, group_id, entry_id, current_member.id)
    return ExpenseService.to_response(entry)


@router.post("/{entry_id}/force-accept", response_model=EntryResponse)
async def force_accept_expense(
    entry_id: str,
    request: ForceAcceptRequest,
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Accept another member's share once the entry is old enough.

    Raises:
        403: If the caller is neither payer nor creator
        404: If the entry doesn't exist or the member has no share in it
        409: If the entry is deleted, a settlement, or inside the grace period
    """
    entry = await ExpenseService.force_accept(
        db, group_id, entry_id, request.member_id, current_member.id
    )
    return ExpenseService.to_response(entry)


@router.post("/{entry_id}/items/{item_id}/claim", response_model=EntryResponse)
async def claim_item(
    entry_id: str,
    item_id: str,
    owner_id: Optional[str] = Query(None, description="Claim on behalf of this member"),
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Claim a line item, for the caller unless `owner_id` is given.

    Raises:
        404: If the entry or the owner doesn't exist
        409: If the item doesn't exist or the entry can't hold items
    """
    entry = await ExpenseService.claim_item(
        db, group_id, entry_id, item_id, current_member.id, owner_id=owner_id
    )
    return ExpenseService.to_response(entry)


@router.delete("/{entry_id}/items/{item_id}/claim", response_model=EntryResponse)
async def unclaim_item(
    entry_id: str,
    item_id: str,
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Release a line item back to the payer.

    Raises:
        404: If the entry doesn't exist
        409: If the item doesn't exist or the entry can't hold items
    """
    entry = await ExpenseService.unclaim_item(
        db, group_id, entry_id, item_id, current_member.id
    )
    return ExpenseService.to_response(entry)
