"""Receipt drafting endpoints"""
from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_current_member
from app.schemas.expense import EntryCreate, LineItem
from app.schemas.group import Member
from app.schemas.receipt import DiscountRescaleRequest, ReceiptDraftRequest
from app.services.receipt_service import draft_from_extraction, rescale_for_discount

router = APIRouter(prefix="/receipts", tags=["Receipts"])


@router.post("/draft", response_model=EntryCreate)
async def draft_expense(
    request: ReceiptDraftRequest,
    current_member: Member = Depends(get_current_member),
):
    """
    Turn an extraction result into an expense draft with unclaimed items.

    Nothing is stored; submit the draft to `POST /expenses`.
    """
    return draft_from_extraction(request.extraction, request.paid_by)


@router.post("/rescale", response_model=List[LineItem])
async def rescale_items(
    request: DiscountRescaleRequest,
    current_member: Member = Depends(get_current_member),
):
    """
    Re-price line items after the receipt discount was edited.

    Raises:
        400: If a discount is outside [0, 100)
    """
    return rescale_for_discount(request.items, request.old_discount, request.new_discount)
