"""Dependency injection (caller identity, group, db)"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.exceptions import AuthenticationError
from app.database import get_db
from app.schemas.group import Member
from app.services.group_service import GroupService


def get_group_id() -> str:
    """
    The group served by this deployment.

    Returns:
        Configured group ID
    """
    return get_settings().default_group_id


async def get_current_member(
    member_id: Optional[str] = Header(None, alias="X-Member-Id"),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
) -> Member:
    """
    Resolve the calling member from the X-Member-Id header.

    The header is an identity claim, not a credential: any caller that
    knows a member id can act as that member.

    Args:
        member_id: Value of the X-Member-Id header
        group_id: Group ID
        db: Database session

    Returns:
        Current member

    Raises:
        AuthenticationError: If the header is missing or names no member
    """
    if not member_id:
        raise AuthenticationError("X-Member-Id header is required")

    group = await GroupService.get_group(db, group_id)
    member = group.get_member(member_id)

    if member is None:
        raise AuthenticationError(f"Unknown member {member_id}")

    return member
