"""Balance aggregation over a ledger snapshot"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List

from app.schemas.balance import MemberBalance
from app.schemas.expense import LedgerEntry
from app.schemas.group import Member
from app.utils.decimal_utils import ZERO, round_decimal


def calculate_balances(
    entries: List[LedgerEntry],
    members: List[Member],
    include_deleted: bool = False,
) -> List[MemberBalance]:
    """
    Fold ledger entries into per-member confirmed and pending balances.

    Every split lands in the confirmed bucket when accepted and in the
    pending bucket otherwise. The payer's own split credits the payer with
    `amount - own share`; any other split debits that member's share. A
    payer without a split row is credited with the accepted split sum in
    confirmed and the pending split sum in pending.

    Args:
        entries: Ledger snapshot of one group
        members: Group members, in display order
        include_deleted: Count soft-deleted entries too

    Returns:
        One MemberBalance per member, in member order
    """
    confirmed: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    pending: Dict[str, Decimal] = defaultdict(lambda: ZERO)

    for entry in entries:
        if entry.is_deleted and not include_deleted:
            continue

        payer_has_row = False
        for split in entry.splits:
            bucket = confirmed if split.accepted else pending
            if split.member_id == entry.paid_by:
                payer_has_row = True
                bucket[entry.paid_by] += entry.amount - split.amount
            else:
                bucket[split.member_id] -= split.amount

        if not payer_has_row:
            for split in entry.splits:
                bucket = confirmed if split.accepted else pending
                bucket[entry.paid_by] += split.amount

    return [
        MemberBalance(
            member_id=member.id,
            member_name=member.name,
            confirmed=round_decimal(confirmed[member.id]),
            pending=round_decimal(pending[member.id]),
        )
        for member in members
    ]
