"""
Expense share routes.
"""
import logging
from fastapi import APIRouter
from tripsplit.core.utils import sum_decimals
from tripsplit.schemas.expense import Expense, ExpenseSharesResponse, ExpenseValidationResponse
from tripsplit.services.currency_service import get_decimal_places
from tripsplit.services.expense_service import collect_expense_issues, compute_shares, validate_expense

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("/shares", response_model=ExpenseSharesResponse)
async def get_expense_shares(expense: Expense):
    """Compute each participant's share of a single expense."""
    validate_expense(expense)

    shares = compute_shares(expense)
    total_shares = sum_decimals(shares.values())

    return ExpenseSharesResponse(
        expense_id=expense.id,
        currency=expense.currency,
        decimal_places=get_decimal_places(expense.currency),
        shares=shares,
        total_shares=total_shares,
        residue=expense.amount - total_shares
    )


@router.post("/validate", response_model=ExpenseValidationResponse)
async def validate_expense_split(expense: Expense):
    """Check an expense's split configuration without computing shares."""
    issues = collect_expense_issues(expense)
    if issues:
        logger.info(f"Expense {expense.id} failed validation: {len(issues)} issue(s)")

    return ExpenseValidationResponse(
        expense_id=expense.id,
        valid=not issues,
        issues=issues
    )
