"""Per-split acceptance state machine

Each split is Pending or Accepted. A split only falls back to Pending when
an edit changes its amount; the payer's split is always Accepted. Every
function here returns new objects and leaves its inputs untouched, so a
refused transition has no partial effect.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from app.core.exceptions import AuthorizationError, NotFoundError, StateError
from app.schemas.expense import EntryStatus, LedgerEntry, Split
from app.services.item_reconciler import is_incomplete
from app.utils.decimal_utils import amounts_differ

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = timedelta(days=7)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _accepted(split: Split, now: datetime, forced_by: Optional[str] = None) -> Split:
    return split.model_copy(
        update={
            "accepted": True,
            "accepted_at": now,
            "previous_amount": None,
            "forced_by": forced_by,
        }
    )


def _pending(split: Split, previous_amount=None) -> Split:
    return split.model_copy(
        update={
            "accepted": False,
            "accepted_at": None,
            "previous_amount": previous_amount,
            "forced_by": None,
        }
    )


def initialize_acceptance(
    splits: List[Split],
    paid_by: str,
    created_by: str,
    now: Optional[datetime] = None,
) -> List[Split]:
    """
    Acceptance state of a freshly created entry: the payer and the member
    who recorded it start Accepted, everybody else Pending.
    """
    now = now or _utcnow()
    return [
        _accepted(split, now) if split.member_id in (paid_by, created_by) else _pending(split)
        for split in splits
    ]


def reconcile_edit(
    previous: List[Split],
    proposed: List[Split],
    paid_by: str,
    now: Optional[datetime] = None,
) -> List[Split]:
    """
    Carry acceptance across an edit.

    Args:
        previous: Splits stored before the edit
        proposed: Freshly computed splits after the edit
        paid_by: Payer after the edit
        now: Timestamp for new acceptances

    Returns:
        Splits where the payer is Accepted, new members and members whose
        amount moved by more than 0.01 are Pending with previous_amount
        set, and everyone else keeps their prior state
    """
    now = now or _utcnow()
    prior: Dict[str, Split] = {s.member_id: s for s in previous}
    reconciled = []

    for split in proposed:
        old = prior.get(split.member_id)

        if split.member_id == paid_by:
            if old is not None and old.accepted and not amounts_differ(old.amount, split.amount):
                reconciled.append(_accepted(split, old.accepted_at or now))
            else:
                reconciled.append(_accepted(split, now))
        elif old is None:
            reconciled.append(_pending(split))
        elif amounts_differ(old.amount, split.amount):
            reconciled.append(_pending(split, previous_amount=old.amount))
        else:
            reconciled.append(
                split.model_copy(
                    update={
                        "accepted": old.accepted,
                        "accepted_at": old.accepted_at,
                        "previous_amount": old.previous_amount,
                        "forced_by": old.forced_by,
                    }
                )
            )

    return reconciled


def accept_split(
    entry: LedgerEntry,
    member_id: str,
    now: Optional[datetime] = None,
) -> LedgerEntry:
    """
    Explicit acceptance by the member themself.

    Accepting an already accepted split changes nothing.

    Raises:
        NotFoundError: If the member has no split on the entry
    """
    split = entry.split_for(member_id)
    if split is None:
        raise NotFoundError(f"Member {member_id} has no share in entry {entry.id}")

    if split.accepted:
        return entry

    now = now or _utcnow()
    splits = [_accepted(s, now) if s.member_id == member_id else s for s in entry.splits]
    return entry.model_copy(update={"splits": splits})


def force_accept(
    entry: LedgerEntry,
    actor_id: str,
    member_id: str,
    now: Optional[datetime] = None,
    grace_period: timedelta = DEFAULT_GRACE_PERIOD,
) -> LedgerEntry:
    """
    Accept a member's split on their behalf once the grace period is over.

    Args:
        entry: Entry holding the split
        actor_id: Member performing the override (payer or creator)
        member_id: Member whose split is accepted
        now: Current time
        grace_period: Minimum age of the entry

    Returns:
        Entry with the split accepted and forced_by recorded

    Raises:
        AuthorizationError: If the actor is neither payer nor creator
        StateError: If the entry is a settlement or too recent
        NotFoundError: If the member has no split on the entry
    """
    now = now or _utcnow()

    if actor_id not in (entry.paid_by, entry.created_by):
        raise AuthorizationError("Only the payer or the creator can force-accept a share")

    if entry.is_settlement:
        raise StateError("Settlements cannot be force-accepted")

    age = now - entry.created_at
    if age < grace_period:
        raise StateError(
            f"Force-accept is available {grace_period.days} days after creation "
            f"(entry is {age.days} days old)"
        )

    split = entry.split_for(member_id)
    if split is None:
        raise NotFoundError(f"Member {member_id} has no share in entry {entry.id}")

    if split.accepted:
        return entry

    logger.info(
        "Member %s force-accepted share of %s on entry %s", actor_id, member_id, entry.id
    )
    splits = [
        _accepted(s, now, forced_by=actor_id) if s.member_id == member_id else s
        for s in entry.splits
    ]
    return entry.model_copy(update={"splits": splits})


def soft_delete(entry: LedgerEntry, now: Optional[datetime] = None) -> LedgerEntry:
    """
    Mark an entry deleted. Deleting twice keeps the first timestamp; tags
    and acceptance state are never touched.
    """
    if entry.is_deleted:
        return entry
    return entry.model_copy(update={"deleted_at": now or _utcnow()})


def is_fully_accepted(entry: LedgerEntry) -> bool:
    """Every split accepted (for a settlement: its single recipient split)"""
    return all(split.accepted for split in entry.splits)


def entry_status(entry: LedgerEntry) -> EntryStatus:
    """Derived display status"""
    if entry.is_deleted:
        return EntryStatus.DELETED
    if is_incomplete(entry):
        return EntryStatus.INCOMPLETE
    if is_fully_accepted(entry):
        return EntryStatus.ACCEPTED
    return EntryStatus.PENDING
