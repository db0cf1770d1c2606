"""Receipt extraction schemas"""
import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.expense import LineItem
from app.utils.decimal_utils import to_decimal


class ReceiptExtraction(BaseModel):
    """Result handed over by the external receipt extraction service"""
    items: List[LineItem] = Field(default_factory=list)
    merchant: Optional[str] = None
    date: Optional[datetime.date] = None
    discount_percent: Decimal = Decimal("0")
    total: Optional[Decimal] = None
    confidence: float = Field(default=0.0, ge=0, le=1)

    @field_validator("discount_percent", "total", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal"""
        if v is None:
            return v
        return to_decimal(v)


class ReceiptDraftRequest(BaseModel):
    """Seed a new entry from an extraction result"""
    extraction: ReceiptExtraction
    paid_by: str


class DiscountRescaleRequest(BaseModel):
    """Re-price items after the receipt discount was edited"""
    items: List[LineItem]
    old_discount: Decimal = Decimal("0")
    new_discount: Decimal = Decimal("0")

    @field_validator("old_discount", "new_discount", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal"""
        if v is None:
            return Decimal("0")
        return to_decimal(v)
