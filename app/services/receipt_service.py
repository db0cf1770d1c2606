"""Receipt drafting

Receipt images are read by an external extraction service; this module
only turns its output into an entry draft the payer can review.
"""
from decimal import Decimal
from typing import List

from app.core.exceptions import ValidationError
from app.schemas.expense import EntryCreate, LineItem, SplitStrategy
from app.schemas.receipt import ReceiptExtraction
from app.utils.decimal_utils import ZERO, round_decimal, sum_decimals

HUNDRED = Decimal("100")


def _validate_discount(discount: Decimal) -> None:
    if discount < ZERO or discount >= HUNDRED:
        raise ValidationError(f"Discount must be in [0, 100), got {discount}")


def rescale_for_discount(
    items: List[LineItem], old_discount: Decimal, new_discount: Decimal
) -> List[LineItem]:
    """
    Re-price items after the receipt-wide discount changed.

    Each amount is first restored to its undiscounted price, then the new
    discount is applied, and the result is rounded to cents.

    Raises:
        ValidationError: If either discount is outside [0, 100)
    """
    _validate_discount(old_discount)
    _validate_discount(new_discount)

    rescaled = []
    for item in items:
        original = item.amount / (1 - old_discount / HUNDRED)
        amount = round_decimal(original * (1 - new_discount / HUNDRED))
        if amount <= ZERO:
            raise ValidationError(f"Item '{item.description}' would be priced at {amount}")
        rescaled.append(item.model_copy(update={"amount": amount}))
    return rescaled


def draft_from_extraction(extraction: ReceiptExtraction, paid_by: str) -> EntryCreate:
    """
    Seed an entry from an extraction result.

    Items come back unassigned and discounted. The amount is the receipt
    total when one was read, otherwise the sum of the discounted items.

    Raises:
        ValidationError: If the receipt has neither items nor a positive total
    """
    items = rescale_for_discount(extraction.items, ZERO, extraction.discount_percent)
    items = [item.model_copy(update={"owner_id": None}) for item in items]

    amount = extraction.total if extraction.total else sum_decimals(i.amount for i in items)
    if amount <= ZERO:
        raise ValidationError("Receipt has no items and no total")

    return EntryCreate(
        description=(extraction.merchant or "").strip() or "Receipt",
        amount=round_decimal(amount),
        paid_by=paid_by,
        strategy=SplitStrategy.EXACT if items else SplitStrategy.EQUAL,
        items=items,
        receipt_date=extraction.date,
    )
