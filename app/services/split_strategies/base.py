"""Base strategy interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from app.core.exceptions import ValidationError
from app.schemas.expense import SplitInput
from app.utils.decimal_utils import sum_decimals

CENT = Decimal("0.01")


class ParticipantSplit(BaseModel):
    """Result of split calculation for a participant"""

    member_id: str
    value: Decimal
    amount: Decimal


class BaseSplitStrategy(ABC):
    """Base class for split strategies"""

    def validate(self, total_amount: Decimal, inputs: List[SplitInput]) -> None:
        """
        Check the inputs before calculating.

        Shared checks run here; strategies extend with their own sum rules.

        Raises:
            ValidationError: naming the invariant that failed
        """
        if total_amount <= 0:
            raise ValidationError(
                f"Total amount must be greater than 0, got {total_amount}"
            )

        if not inputs:
            raise ValidationError("At least one participant is required")

        member_ids = [i.member_id for i in inputs]
        if len(set(member_ids)) != len(member_ids):
            raise ValidationError("Each member can appear only once in the splits")

        for split_input in inputs:
            if split_input.value < 0:
                raise ValidationError(
                    f"Split value cannot be negative, got {split_input.value}"
                )

    @abstractmethod
    def calculate_splits(
        self,
        total_amount: Decimal,
        inputs: List[SplitInput],
        payer_id: Optional[str] = None,
    ) -> List[ParticipantSplit]:
        """
        Calculate split amounts for participants.

        Args:
            total_amount: Total entry amount
            inputs: Raw per-member values, in display order
            payer_id: Member who fronted the money

        Returns:
            List of ParticipantSplit with member_id, raw value and amount
        """
        pass

    @staticmethod
    def _distribute_residual(
        splits: List[ParticipantSplit],
        target: Decimal,
        payer_id: Optional[str],
    ) -> List[ParticipantSplit]:
        """
        Hand out the cents left over after flooring every row so the amounts
        add up to `target`.

        Rows must already be floored to whole cents, which keeps the
        leftover non-negative and no row below zero. Cents go one at a time
        to the payer's row first, then to the other rows from the last one
        backwards.
        """
        if not splits:
            return splits

        leftover_cents = int((target - sum_decimals(s.amount for s in splits)) / CENT)
        if leftover_cents <= 0:
            return splits

        payer_rows = [s for s in splits if s.member_id == payer_id]
        order = payer_rows + [s for s in reversed(splits) if s.member_id != payer_id]
        for index in range(leftover_cents):
            order[index % len(order)].amount += CENT

        return splits
