"""Ledger entry schemas"""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.schemas.common import PaginationMeta
from app.schemas.group import new_id
from app.utils.decimal_utils import to_decimal


class SplitStrategy(str, enum.Enum):
    """How an entry's total is divided among participants"""
    EQUAL = "equal"
    EXACT = "exact"
    PERCENTAGE = "percentage"
    SHARES = "shares"
    SETTLEMENT = "settlement"


class EntryStatus(str, enum.Enum):
    """Derived display status of an entry"""
    DELETED = "Deleted"
    INCOMPLETE = "Incomplete"
    ACCEPTED = "Accepted"
    PENDING = "Pending"


class SplitInput(BaseModel):
    """Raw per-member input for the split calculator"""

    member_id: str
    value: Decimal = Decimal("0")

    @field_validator("value", mode="before")
    @classmethod
    def convert_value(cls, v):
        """Convert numeric values to Decimal"""
        if v is None:
            return Decimal("0")
        return to_decimal(v)


class Split(BaseModel):
    """One member's share of an entry with its acceptance state"""

    member_id: str
    value: Decimal = Decimal("0")
    amount: Decimal
    accepted: bool = False
    accepted_at: Optional[datetime] = None
    previous_amount: Optional[Decimal] = None
    forced_by: Optional[str] = None

    @field_validator("value", "amount", "previous_amount", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal"""
        if v is None:
            return v
        return to_decimal(v)


class LineItem(BaseModel):
    """Receipt line item, optionally claimed by a member"""

    id: str = Field(default_factory=new_id)
    description: str = Field(default="", max_length=500)
    amount: Decimal = Field(..., gt=0)
    owner_id: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return to_decimal(v)


class LedgerEntry(BaseModel):
    """
    Atomic unit of the ledger.

    `strategy` holds the strategy chosen by the caller; `split_strategy`
    is what actually drives the splits and is `exact` whenever the entry
    is built from line items.
    """

    id: str = Field(default_factory=new_id)
    group_id: str
    description: str
    amount: Decimal
    paid_by: str
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    strategy: SplitStrategy
    splits: List[Split] = Field(default_factory=list)
    items: List[LineItem] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    deleted_at: Optional[datetime] = None
    receipt_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return to_decimal(v)

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: List[str]) -> List[str]:
        """Drop blank and repeated tags, keeping first-seen order"""
        seen: List[str] = []
        for tag in v:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    @computed_field
    @property
    def split_strategy(self) -> SplitStrategy:
        if self.items:
            return SplitStrategy.EXACT
        return self.strategy

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_settlement(self) -> bool:
        return self.strategy == SplitStrategy.SETTLEMENT

    def split_for(self, member_id: str) -> Optional[Split]:
        return next((s for s in self.splits if s.member_id == member_id), None)

    def get_item(self, item_id: str) -> Optional[LineItem]:
        return next((i for i in self.items if i.id == item_id), None)


class EntryBase(BaseModel):
    """Fields supplied by the caller when recording an entry"""

    description: str = Field(..., min_length=1, max_length=500)
    amount: Decimal
    paid_by: str
    strategy: SplitStrategy = SplitStrategy.EQUAL
    splits: List[SplitInput] = Field(default_factory=list)
    items: List[LineItem] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    receipt_date: Optional[date] = None

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return to_decimal(v)


class EntryCreate(EntryBase):
    """Schema for creating an entry"""


class EntryUpdate(EntryBase):
    """Schema for editing an entry (full replacement of editable fields)"""


class SettlementCreate(BaseModel):
    """Direct payment from one member to another"""

    from_member_id: str
    to_member_id: str
    amount: Decimal = Field(..., gt=0)
    description: str = Field(default="Settlement", min_length=1, max_length=500)

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return to_decimal(v)


class ForceAcceptRequest(BaseModel):
    """Force-accept a member's split on their behalf"""

    member_id: str


class EntryResponse(LedgerEntry):
    """Entry with derived display fields"""

    status: EntryStatus
    incomplete: bool
    fully_accepted: bool


class EntryListResponse(BaseModel):
    """Response schema for entry list"""

    items: List[EntryResponse]
    pagination: PaginationMeta


class PendingActionsResponse(BaseModel):
    """Entries that need attention from the current member"""

    awaiting_you: List[EntryResponse]
    awaiting_others: List[EntryResponse]
    incomplete: List[EntryResponse]
