"""Split calculation strategies"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from app.core.exceptions import ValidationError
from app.schemas.expense import Split, SplitInput, SplitStrategy
from app.services.split_strategies.base import (BaseSplitStrategy,
                                                ParticipantSplit)
from app.services.split_strategies.equal_split import EqualSplitStrategy
from app.services.split_strategies.exact_split import ExactSplitStrategy
from app.services.split_strategies.percentage_split import \
    PercentageSplitStrategy
from app.services.split_strategies.settlement_split import \
    SettlementSplitStrategy
from app.services.split_strategies.shares_split import SharesSplitStrategy
from app.utils.decimal_utils import ZERO, round_decimal


def get_split_strategy(strategy: SplitStrategy) -> BaseSplitStrategy:
    """
    Get appropriate split strategy based on strategy name.

    Args:
        strategy: equal, exact, percentage, shares or settlement

    Returns:
        Instance of appropriate strategy

    Raises:
        ValidationError: If strategy is not recognized
    """
    strategies = {
        SplitStrategy.EQUAL: EqualSplitStrategy(),
        SplitStrategy.EXACT: ExactSplitStrategy(),
        SplitStrategy.PERCENTAGE: PercentageSplitStrategy(),
        SplitStrategy.SHARES: SharesSplitStrategy(),
        SplitStrategy.SETTLEMENT: SettlementSplitStrategy(),
    }

    split_strategy = strategies.get(strategy)
    if split_strategy is None:
        raise ValidationError(f"Unknown split strategy: {strategy}")

    return split_strategy


def validate_splits(
    amount: Decimal,
    strategy: SplitStrategy,
    inputs: List[SplitInput],
    payer_id: Optional[str] = None,
) -> None:
    """
    Validate calculator inputs. Call before calculate_splits.

    Raises:
        ValidationError: with a message naming the failed invariant
    """
    get_split_strategy(strategy).validate(amount, inputs)

    if strategy == SplitStrategy.SETTLEMENT and inputs[0].member_id == payer_id:
        raise ValidationError("A member cannot settle with themselves")


def calculate_splits(
    amount: Decimal,
    strategy: SplitStrategy,
    inputs: List[SplitInput],
    payer_id: str,
    now: Optional[datetime] = None,
) -> List[Split]:
    """
    Turn a total, a strategy and raw per-member inputs into Split rows.

    Only the payer's row starts accepted. The calculator never corrects
    invalid inputs; run validate_splits first.
    """
    now = now or datetime.now(timezone.utc)
    participant_splits = get_split_strategy(strategy).calculate_splits(
        amount, inputs, payer_id
    )

    return [
        Split(
            member_id=p.member_id,
            value=p.value,
            amount=p.amount,
            accepted=p.member_id == payer_id,
            accepted_at=now if p.member_id == payer_id else None,
        )
        for p in participant_splits
    ]


def derive_split_values(
    amount: Decimal,
    splits: List[Split],
    strategy: SplitStrategy,
) -> List[SplitInput]:
    """
    Express computed split amounts as raw inputs for another strategy.

    Used when the display strategy of an existing entry is switched, e.g.
    equal -> percentage -> exact. Percentages are rounded to two places,
    so a round trip may drift by a cent.
    """
    derived = []
    for split in splits:
        if strategy == SplitStrategy.EQUAL:
            value = ZERO
        elif strategy == SplitStrategy.PERCENTAGE:
            value = round_decimal(split.amount * Decimal("100") / amount) if amount else ZERO
        else:
            # exact, shares and settlement all take the amount itself
            value = split.amount
        derived.append(SplitInput(member_id=split.member_id, value=value))
    return derived


__all__ = [
    "BaseSplitStrategy",
    "ParticipantSplit",
    "EqualSplitStrategy",
    "ExactSplitStrategy",
    "PercentageSplitStrategy",
    "SharesSplitStrategy",
    "SettlementSplitStrategy",
    "get_split_strategy",
    "validate_splits",
    "calculate_splits",
    "derive_split_values",
]
