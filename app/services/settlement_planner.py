"""Greedy settlement planner"""

from decimal import Decimal
from typing import List

from app.schemas.balance import MemberBalance, SettlementProposal
from app.utils.decimal_utils import TOLERANCE, ZERO, round_decimal


def plan_settlements(balances: List[MemberBalance]) -> List[SettlementProposal]:
    """
    Propose payments that zero every confirmed balance.

    Pending amounts are ignored: nobody should be asked to pay for money
    that has not been confirmed yet.

    Largest debtor pays largest creditor, repeatedly. Not a minimum
    transaction count solver, but deterministic: equal magnitudes keep the
    order of `balances`.

    Args:
        balances: Member balances in group member order

    Returns:
        Ordered payment proposals
    """
    debtors = [[b, abs(b.confirmed)] for b in balances if b.confirmed < -TOLERANCE]
    creditors = [[b, b.confirmed] for b in balances if b.confirmed > TOLERANCE]

    # sort() is stable, ties keep member order
    debtors.sort(key=lambda d: d[1], reverse=True)
    creditors.sort(key=lambda c: c[1], reverse=True)

    settlements: List[SettlementProposal] = []
    debtor_idx = 0
    creditor_idx = 0

    while debtor_idx < len(debtors) and creditor_idx < len(creditors):
        debtor, owed = debtors[debtor_idx]
        creditor, due = creditors[creditor_idx]

        amount: Decimal = round_decimal(min(owed, due))

        if amount > ZERO:
            settlements.append(
                SettlementProposal(
                    from_id=debtor.member_id,
                    from_name=debtor.member_name,
                    to_id=creditor.member_id,
                    to_name=creditor.member_name,
                    amount=amount,
                )
            )

        debtors[debtor_idx][1] = owed - amount
        creditors[creditor_idx][1] = due - amount

        if debtors[debtor_idx][1] < TOLERANCE:
            debtor_idx += 1
        if creditors[creditor_idx][1] < TOLERANCE:
            creditor_idx += 1

    return settlements
