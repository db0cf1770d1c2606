"""Settlement split strategy"""
from decimal import Decimal
from typing import List, Optional

from app.core.exceptions import ValidationError
from app.schemas.expense import SplitInput
from app.services.split_strategies.base import BaseSplitStrategy, ParticipantSplit
from app.utils.decimal_utils import amounts_differ, round_decimal


class SettlementSplitStrategy(BaseSplitStrategy):
    """A direct payment: the single split row is the recipient"""

    def validate(self, total_amount: Decimal, inputs: List[SplitInput]) -> None:
        """
        Raises:
            ValidationError: If there is not exactly one recipient or the
                amount does not match the total
        """
        super().validate(total_amount, inputs)

        if len(inputs) != 1:
            raise ValidationError(
                f"A settlement must have exactly one recipient, got {len(inputs)}"
            )

        if amounts_differ(inputs[0].value, total_amount):
            raise ValidationError(
                f"Settlement amount ({inputs[0].value}) must equal total amount ({total_amount})"
            )

    def calculate_splits(
        self,
        total_amount: Decimal,
        inputs: List[SplitInput],
        payer_id: Optional[str] = None,
    ) -> List[ParticipantSplit]:
        """The recipient's amount is the full settlement amount"""
        return [
            ParticipantSplit(
                member_id=split_input.member_id,
                value=split_input.value,
                amount=round_decimal(split_input.value),
            )
            for split_input in inputs
        ]
