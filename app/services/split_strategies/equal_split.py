"""Equal split strategy"""

from decimal import Decimal
from typing import List, Optional

from app.schemas.expense import SplitInput
from app.services.split_strategies.base import (BaseSplitStrategy,
                                                ParticipantSplit)
from app.utils.decimal_utils import floor_decimal, round_decimal


class EqualSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting an entry equally among participants"""

    def calculate_splits(
        self,
        total_amount: Decimal,
        inputs: List[SplitInput],
        payer_id: Optional[str] = None,
    ) -> List[ParticipantSplit]:
        """
        Calculate equal split for all participants.

        Raw values are ignored. 10 split three ways gives 3.33 to each
        other participant and 3.34 to the payer.
        """
        num_participants = len(inputs)

        if num_participants == 0:
            return []

        base_amount = floor_decimal(total_amount / num_participants)

        splits = [
            ParticipantSplit(
                member_id=split_input.member_id,
                value=split_input.value,
                amount=base_amount,
            )
            for split_input in inputs
        ]

        return self._distribute_residual(splits, round_decimal(total_amount), payer_id)
