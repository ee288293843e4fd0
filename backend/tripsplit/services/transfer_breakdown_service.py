"""
Breakdown of which expenses make up the debt between two people.
"""
from decimal import Decimal
from typing import List, Optional
from tripsplit.schemas.expense import Expense
from tripsplit.schemas.settlement import ExpenseBreakdown, TransferBreakdown
from tripsplit.services.expense_service import compute_shares
from tripsplit.services.settlement_service import require_single_currency


def calculate_breakdown(
    from_id: str,
    to_id: str,
    expenses: List[Expense],
    remainder: Optional[str] = None
) -> TransferBreakdown:
    """
    Calculate how each expense contributes to the debt from from_id to to_id.

    Only the direct relationship between the two people counts: if to_id
    paid, from_id's share is added; if from_id paid, to_id's share is
    subtracted; expenses paid by someone else contribute nothing. The
    total therefore equals the pairwise netted debt (negative when the
    debt actually runs the other way).
    """
    expenses = list(expenses)
    currency = require_single_currency(expenses)

    breakdowns = []
    for expense in expenses:
        shares = compute_shares(expense, remainder=remainder)
        from_owes = shares.get(from_id, Decimal(0))
        to_owes = shares.get(to_id, Decimal(0))

        if expense.payer_id == to_id and from_id != to_id:
            contribution = from_owes
        elif expense.payer_id == from_id and from_id != to_id:
            contribution = -to_owes
        else:
            contribution = Decimal(0)

        breakdowns.append(ExpenseBreakdown(
            expense_id=expense.id,
            description=expense.description,
            from_paid=expense.amount if expense.payer_id == from_id else Decimal(0),
            from_owes=from_owes,
            to_paid=expense.amount if expense.payer_id == to_id else Decimal(0),
            to_owes=to_owes,
            net_contribution=contribution
        ))

    return TransferBreakdown(
        from_id=from_id,
        to_id=to_id,
        currency=currency,
        total_amount=sum((b.net_contribution for b in breakdowns), Decimal(0)),
        expense_breakdowns=breakdowns
    )
