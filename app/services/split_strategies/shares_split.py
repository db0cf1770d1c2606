"""Shares split strategy"""

from decimal import Decimal
from typing import List, Optional

from app.core.exceptions import ValidationError
from app.schemas.expense import SplitInput
from app.services.split_strategies.base import (BaseSplitStrategy,
                                                ParticipantSplit)
from app.utils.decimal_utils import (ZERO, floor_decimal, round_decimal,
                                     sum_decimals)


class SharesSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting an entry proportionally to share counts"""

    def validate(self, total_amount: Decimal, inputs: List[SplitInput]) -> None:
        """
        Raises:
            ValidationError: If the share total is not positive
        """
        super().validate(total_amount, inputs)

        total_shares = sum_decimals(i.value for i in inputs)
        if total_shares <= 0:
            raise ValidationError(
                f"Total shares must be greater than 0, got {total_shares}"
            )

    def calculate_splits(
        self,
        total_amount: Decimal,
        inputs: List[SplitInput],
        payer_id: Optional[str] = None,
    ) -> List[ParticipantSplit]:
        """
        amount = total * shares / sum(shares); every row is zero when the
        share total is not positive.
        """
        total_shares = sum_decimals(i.value for i in inputs)

        if total_shares <= 0:
            return [
                ParticipantSplit(member_id=i.member_id, value=i.value, amount=ZERO)
                for i in inputs
            ]

        splits = [
            ParticipantSplit(
                member_id=split_input.member_id,
                value=split_input.value,
                amount=floor_decimal(total_amount * split_input.value / total_shares),
            )
            for split_input in inputs
        ]

        return self._distribute_residual(splits, round_decimal(total_amount), payer_id)
