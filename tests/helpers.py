"""Builders shared by the test modules"""

from datetime import datetime, timezone
from typing import List

from app.schemas.expense import LedgerEntry, Split, SplitStrategy
from app.schemas.group import Member

GROUP_ID = "default"


def member_headers(member: Member) -> dict:
    """Identity header for API calls made as `member`"""
    return {"X-Member-Id": member.id}


def make_entry(
    amount: str,
    paid_by: str,
    splits: List[Split],
    created_by: str = None,
    created_at: datetime = None,
    strategy: SplitStrategy = SplitStrategy.EXACT,
    **kwargs,
) -> LedgerEntry:
    """Build an entry directly, bypassing the calculator"""
    return LedgerEntry(
        group_id=GROUP_ID,
        description=kwargs.pop("description", "Test entry"),
        amount=amount,
        paid_by=paid_by,
        created_by=created_by or paid_by,
        created_at=created_at or datetime.now(timezone.utc),
        strategy=strategy,
        splits=splits,
        **kwargs,
    )


def split(member_id: str, amount: str, accepted: bool = False, **kwargs) -> Split:
    """Shorthand for a split row"""
    return Split(member_id=member_id, value=amount, amount=amount, accepted=accepted, **kwargs)
