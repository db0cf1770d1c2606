"""Percentage split strategy"""

from decimal import Decimal
from typing import List, Optional

from app.core.exceptions import ValidationError
from app.schemas.expense import SplitInput
from app.services.split_strategies.base import (BaseSplitStrategy,
                                                ParticipantSplit)
from app.utils.decimal_utils import (TOLERANCE, floor_decimal, round_decimal,
                                     sum_decimals)

HUNDRED = Decimal("100")


class PercentageSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting an entry by percentage"""

    def validate(self, total_amount: Decimal, inputs: List[SplitInput]) -> None:
        """
        Raises:
            ValidationError: If percentages don't sum to 100 or one is out of range
        """
        super().validate(total_amount, inputs)

        for split_input in inputs:
            if split_input.value > HUNDRED:
                raise ValidationError(
                    f"Percentage must be between 0 and 100, got {split_input.value}"
                )

        total_percentage = sum_decimals(i.value for i in inputs)
        if abs(total_percentage - HUNDRED) > TOLERANCE:
            raise ValidationError(
                f"Percentages must sum to 100%, got {total_percentage}%"
            )

    def calculate_splits(
        self,
        total_amount: Decimal,
        inputs: List[SplitInput],
        payer_id: Optional[str] = None,
    ) -> List[ParticipantSplit]:
        """
        Calculate percentage-based split for participants.

        Leftover cents are handed out against the exact share of the total
        the percentages describe, so an off-by-a-little percentage sum is
        not silently corrected to the full total.
        """
        if not inputs:
            return []

        splits = [
            ParticipantSplit(
                member_id=split_input.member_id,
                value=split_input.value,
                amount=floor_decimal(total_amount * split_input.value / HUNDRED),
            )
            for split_input in inputs
        ]

        total_percentage = sum_decimals(i.value for i in inputs)
        target = round_decimal(total_amount * total_percentage / HUNDRED)
        return self._distribute_residual(splits, target, payer_id)
