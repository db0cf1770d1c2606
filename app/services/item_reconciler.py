"""Item-level assignment

A purchase can be broken into line items that members claim. Each
claimant owes the sum of their items and the payer absorbs whatever is
left of the total, including every unclaimed item.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from app.core.exceptions import StateError, ValidationError
from app.schemas.expense import LedgerEntry, LineItem, Split
from app.utils.decimal_utils import ZERO, round_decimal, sum_decimals

logger = logging.getLogger(__name__)


def item_member_totals(
    amount: Decimal, items: List[LineItem], paid_by: str
) -> Dict[str, Decimal]:
    """
    Per-member running totals for an item-mode entry.

    Owners appear in the order their first item appears. The payer is
    credited with `amount - sum(owned items)`, which is negative when the
    claimed items exceed the stated total.
    """
    totals: Dict[str, Decimal] = {}
    for item in items:
        if item.owner_id is None:
            continue
        totals[item.owner_id] = totals.get(item.owner_id, ZERO) + item.amount

    owned = sum_decimals(totals.values())
    remainder = amount - owned
    totals[paid_by] = totals.get(paid_by, ZERO) + remainder

    return {member_id: round_decimal(total) for member_id, total in totals.items()}


def build_item_splits(
    amount: Decimal, items: List[LineItem], paid_by: str
) -> List[Split]:
    """
    Split rows derived from item ownership, all Pending.

    Members whose total is zero are dropped unless they are the payer.
    """
    totals = item_member_totals(amount, items, paid_by)
    return [
        Split(member_id=member_id, value=total, amount=total)
        for member_id, total in totals.items()
        if total != ZERO or member_id == paid_by
    ]


def validate_items(amount: Decimal, items: List[LineItem]) -> None:
    """
    Raises:
        ValidationError: On a non-positive total or duplicate item ids
    """
    if amount <= 0:
        raise ValidationError(f"Total amount must be greater than 0, got {amount}")

    item_ids = [item.id for item in items]
    if len(set(item_ids)) != len(item_ids):
        raise ValidationError("Item ids must be unique within an entry")


def assign_item(
    entry: LedgerEntry,
    item_id: str,
    owner_id: Optional[str],
    actor_id: str,
    now: Optional[datetime] = None,
) -> LedgerEntry:
    """
    Claim (owner_id set) or unclaim (owner_id None) a line item.

    Splits are rebuilt from item ownership. The acting member and the payer
    become Accepted; every other member keeps the acceptance state they had,
    and a member appearing for the first time starts Pending. The entry's
    chosen strategy is left alone; item mode is read from `split_strategy`.

    Raises:
        StateError: If the entry is a settlement or the item does not exist
    """
    if entry.is_settlement:
        raise StateError("Settlements have no line items")

    if entry.get_item(item_id) is None:
        raise StateError(f"Item {item_id} does not exist on entry {entry.id}")

    now = now or datetime.now(timezone.utc)

    items = [
        item.model_copy(update={"owner_id": owner_id}) if item.id == item_id else item
        for item in entry.items
    ]

    prior = {s.member_id: s for s in entry.splits}
    splits = []
    for split in build_item_splits(entry.amount, items, entry.paid_by):
        if split.member_id in (actor_id, entry.paid_by):
            splits.append(
                split.model_copy(
                    update={"accepted": True, "accepted_at": now, "previous_amount": None}
                )
            )
            continue

        old = prior.get(split.member_id)
        if old is not None:
            split = split.model_copy(
                update={
                    "accepted": old.accepted,
                    "accepted_at": old.accepted_at,
                    "previous_amount": old.previous_amount,
                    "forced_by": old.forced_by,
                }
            )
        splits.append(split)

    logger.debug(
        "Item %s on entry %s %s by %s",
        item_id,
        entry.id,
        "claimed" if owner_id else "unclaimed",
        actor_id,
    )
    return entry.model_copy(update={"items": items, "splits": splits, "updated_at": now})


def is_incomplete(entry: LedgerEntry) -> bool:
    """An entry with any unclaimed item blocks on assignment"""
    return any(item.owner_id is None for item in entry.items)


def unclaimed_total(entry: LedgerEntry) -> Decimal:
    """Amount of the items nobody has claimed yet"""
    return sum_decimals(item.amount for item in entry.items if item.owner_id is None)
