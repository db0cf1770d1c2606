"""Balance and settlement endpoints"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_member, get_group_id
from app.core.exceptions import NotFoundError
from app.database import get_db
from app.schemas.balance import BalanceSheet, MemberBalance, SettlementPlanResponse
from app.schemas.expense import EntryResponse, SettlementCreate
from app.schemas.group import Member
from app.services.balance_service import BalanceService
from app.services.expense_service import ExpenseService

router = APIRouter(tags=["Balances"])


@router.get("/balances", response_model=BalanceSheet)
async def get_balances(
    fresh: bool = Query(False, description="Bypass the balance cache"),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Get confirmed and pending balances of every member, plus the
    settlement plan.

    Positive = the member is owed money, negative = the member owes money.
    Only confirmed balances feed the settlement plan.
    """
    return await BalanceService.get_balance_sheet(group_id, db, use_cache=not fresh)


@router.get("/balances/me", response_model=MemberBalance)
async def get_my_balance(
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the caller's own balance.

    Raises:
        404: If the caller is not part of the balance sheet
    """
    balance = await BalanceService.get_member_balance(group_id, current_member.id, db)
    if balance is None:
        raise NotFoundError(f"No balance for member {current_member.id}")
    return balance


@router.get("/settlements/plan", response_model=SettlementPlanResponse)
async def get_settlement_plan(
    group_id: str = Depends(get_group_id), db: AsyncSession = Depends(get_db)
):
    """
    Suggested payments that clear every confirmed balance.
    """
    settlements = await BalanceService.get_settlement_plan(group_id, db)
    return SettlementPlanResponse(settlements=settlements)


@router.post(
    "/settlements", response_model=EntryResponse, status_code=status.HTTP_201_CREATED
)
async def record_settlement(
    settlement_data: SettlementCreate,
    current_member: Member = Depends(get_current_member),
    group_id: str = Depends(get_group_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a direct payment `from_member_id` -> `to_member_id`.

    The recipient confirms it by accepting the entry.

    Raises:
        400: If a member would pay themselves
        404: If a member doesn't exist
    """
    entry = await ExpenseService.record_settlement(
        db, group_id, settlement_data, current_member.id
    )
    return ExpenseService.to_response(entry)
