"""
Settlement calculation routes.

Stateless: every request carries the expenses to settle, nothing is stored.
"""
import logging
from fastapi import APIRouter
from typing import List
from tripsplit.core.utils import sum_decimals
from tripsplit.schemas.settlement import (
    ExpenseListRequest,
    PersonCategorySpending,
    SettlementRequest,
    SettlementResult,
    SettlementValidateRequest,
    TransferBreakdown,
    TransferBreakdownRequest,
    ValidationResult,
)
from tripsplit.services.category_service import calculate_category_spending
from tripsplit.services.expense_service import validate_expenses
from tripsplit.services.currency_service import minimal_unit
from tripsplit.services.settlement_service import (
    calculate_rounding_residues,
    compute_settlement,
    compute_settlements_by_currency,
)
from tripsplit.services.settlement_validator import validate_settlement
from tripsplit.services.transfer_breakdown_service import calculate_breakdown

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settlement", tags=["settlement"])


@router.post("/compute", response_model=SettlementResult)
async def compute_trip_settlement(request: SettlementRequest):
    """Compute summaries, pairwise debts, and minimal transfers for one currency."""
    validate_expenses(request.expenses)
    return compute_settlement(request.expenses, settled_transfers=request.settled_transfers)


@router.post("/compute-by-currency", response_model=List[SettlementResult])
async def compute_trip_settlement_by_currency(request: ExpenseListRequest):
    """Settle every currency of a multi-currency trip independently."""
    validate_expenses(request.expenses)
    return compute_settlements_by_currency(request.expenses)


@router.post("/validate", response_model=ValidationResult)
async def validate_trip_settlement(request: SettlementValidateRequest):
    """Check a transfer plan (the computed one unless supplied) against the expenses."""
    validate_expenses(request.expenses)
    settlement = compute_settlement(request.expenses)
    transfers = settlement.transfers if request.transfers is None else request.transfers

    # Unredistributed equal-split residue shows up as unmatched dust
    residue = sum_decimals(abs(r) for r in calculate_rounding_residues(request.expenses))
    tolerance = minimal_unit(settlement.currency) + residue

    return validate_settlement(settlement.summaries, transfers, settlement.currency, tolerance=tolerance)


@router.post("/breakdown", response_model=TransferBreakdown)
async def get_transfer_breakdown(request: TransferBreakdownRequest):
    """Show how each expense contributes to the debt between two people."""
    validate_expenses(request.expenses)
    return calculate_breakdown(request.from_id, request.to_id, request.expenses)


@router.post("/categories", response_model=List[PersonCategorySpending])
async def get_category_spending(request: ExpenseListRequest):
    """Per-person spending grouped by expense category."""
    validate_expenses(request.expenses)
    return calculate_category_spending(request.expenses)
