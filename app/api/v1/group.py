"""Group and member endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_group_id
from app.database import get_db
from app.schemas.group import Group, GroupUpdate, Member, MemberCreate, MemberUpdate
from app.services.group_service import GroupService

router = APIRouter(prefix="/group", tags=["Group"])


@router.get("", response_model=Group)
async def get_group(
    group_id: str = Depends(get_group_id), db: AsyncSession = Depends(get_db)
):
    """
    Get the group with its members.

    The group is created with default settings on first access.
    """
    return await GroupService.get_group(db, group_id)


@router.patch("", response_model=Group)
async def update_group(
    group_data: GroupUpdate,
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Rename the group or change its display currency.

    Args:
        group_data: Fields to change
        group_id: Group ID
        db: Database session

    Returns:
        Updated group
    """
    return await GroupService.update_group(db, group_id, group_data)


@router.post("/members", response_model=Member, status_code=status.HTTP_201_CREATED)
async def add_member(
    member_data: MemberCreate,
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Add a member to the group.

    Raises:
        400: If the name is already used (case-insensitive)
    """
    return await GroupService.add_member(db, group_id, member_data)


@router.patch("/members/{member_id}", response_model=Member)
async def update_member(
    member_id: str,
    member_data: MemberUpdate,
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Rename a member or edit payout account details.

    Raises:
        400: If the new name is already used
        404: If the member does not exist
    """
    return await GroupService.update_member(db, group_id, member_id, member_data)


@router.delete("/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    member_id: str,
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Remove a member.

    Raises:
        404: If the member does not exist
        409: If the member still has a confirmed or pending balance
    """
    await GroupService.remove_member(db, group_id, member_id)
    return None
