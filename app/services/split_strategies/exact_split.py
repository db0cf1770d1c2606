"""Exact split strategy"""
from decimal import Decimal
from typing import List, Optional

from app.core.exceptions import ValidationError
from app.schemas.expense import SplitInput
from app.services.split_strategies.base import BaseSplitStrategy, ParticipantSplit
from app.utils.decimal_utils import amounts_differ, round_decimal, sum_decimals


class ExactSplitStrategy(BaseSplitStrategy):
    """Strategy for splits with explicitly specified amounts"""

    def validate(self, total_amount: Decimal, inputs: List[SplitInput]) -> None:
        """
        Raises:
            ValidationError: If exact amounts don't sum to total_amount
        """
        super().validate(total_amount, inputs)

        total_assigned = sum_decimals(i.value for i in inputs)

        # Allow small rounding difference (0.01)
        if amounts_differ(total_assigned, total_amount):
            raise ValidationError(
                f"Split amounts ({total_assigned}) must equal total amount ({total_amount})"
            )

    def calculate_splits(
        self,
        total_amount: Decimal,
        inputs: List[SplitInput],
        payer_id: Optional[str] = None,
    ) -> List[ParticipantSplit]:
        """
        Use the supplied amounts as-is; a residual within tolerance is kept.
        """
        return [
            ParticipantSplit(
                member_id=split_input.member_id,
                value=split_input.value,
                amount=round_decimal(split_input.value),
            )
            for split_input in inputs
        ]
