"""Balance schemas"""
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.utils.decimal_utils import is_settled


class MemberBalance(BaseModel):
    """
    Net position of a member.

    Positive = the member is owed money, negative = the member owes money.
    """
    member_id: str
    member_name: str
    confirmed: Decimal
    pending: Decimal

    @computed_field
    @property
    def balance(self) -> Decimal:
        return self.confirmed + self.pending

    @computed_field
    @property
    def settled(self) -> bool:
        return is_settled(self.confirmed) and is_settled(self.pending)


class SettlementProposal(BaseModel):
    """Suggested payment `from` -> `to`"""
    from_id: str = Field(..., alias="from")
    from_name: str
    to_id: str = Field(..., alias="to")
    to_name: str
    amount: Decimal

    model_config = ConfigDict(populate_by_name=True)


class BalanceSheet(BaseModel):
    """Balances of every member plus the proposed settlements"""
    group_id: str
    currency: str
    balances: List[MemberBalance]
    settlements: List[SettlementProposal]


class SettlementPlanResponse(BaseModel):
    """Response schema for the settlement plan"""
    settlements: List[SettlementProposal]
