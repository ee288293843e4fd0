"""
Expense service for share computation and expense validation.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Tuple, Type
from tripsplit.core.config import settings
from tripsplit.core.exceptions import EmptyParticipantSet, InvalidSplitConfiguration, SettlementError
from tripsplit.core.utils import round_money, round_ratio, sum_decimals
from tripsplit.schemas.expense import Expense, SplitType
from tripsplit.services.currency_service import get_decimal_places, minimal_unit

logger = logging.getLogger(__name__)

REMAINDER_MODES = ("none", "first")


def compute_shares(
    expense: Expense,
    decimal_places: Optional[int] = None,
    remainder: Optional[str] = None
) -> Dict[str, Decimal]:
    """
    Calculate each participant's share of an expense.

    Shares are rounded to the currency's decimal places. An empty mapping
    means there is nothing to split (no participants, or weights summing
    to zero); callers must treat that as an invalid expense.

    Args:
        expense: Expense to split
        decimal_places: Precision override (defaults to the currency lookup)
        remainder: "none" keeps the rounding residue of an equal split,
            "first" hands it out one minimal unit at a time in participant
            id order (defaults to settings.EQUAL_SPLIT_REMAINDER)

    Returns:
        Mapping of participant id to share amount
    """
    if decimal_places is None:
        decimal_places = get_decimal_places(expense.currency)
    if remainder is None:
        remainder = settings.EQUAL_SPLIT_REMAINDER
    if remainder not in REMAINDER_MODES:
        raise ValueError(f"Unknown remainder mode: {remainder}")

    if expense.split_type == SplitType.ITEMIZED:
        return dict(expense.participant_amounts or {})
    if expense.split_type == SplitType.WEIGHTED:
        return _calculate_weighted_shares(expense, decimal_places)

    shares = _calculate_equal_shares(expense, decimal_places)
    if remainder == "first" and shares:
        shares = _distribute_remainder(expense.amount, shares, decimal_places)
    return shares


def _calculate_equal_shares(expense: Expense, decimal_places: int) -> Dict[str, Decimal]:
    """Divide the amount evenly; every participant gets the same rounded share."""
    participant_count = len(expense.participant_weights)
    if participant_count == 0:
        return {}

    share = round_ratio(expense.amount, Decimal(participant_count), decimal_places)
    logger.debug(f"Expense {expense.id}: {expense.amount} / {participant_count} = {share}")
    return {participant_id: share for participant_id in expense.participant_weights}


def _calculate_weighted_shares(expense: Expense, decimal_places: int) -> Dict[str, Decimal]:
    """Divide the amount proportionally to weights, rounding each share on its own."""
    if not expense.participant_weights:
        return {}

    total_weight = sum_decimals(expense.participant_weights.values())
    if total_weight == 0:
        return {}

    return {
        participant_id: round_ratio(expense.amount * weight, total_weight, decimal_places)
        for participant_id, weight in expense.participant_weights.items()
    }


def _distribute_remainder(
    amount: Decimal,
    shares: Dict[str, Decimal],
    decimal_places: int
) -> Dict[str, Decimal]:
    """Push the rounding residue onto participants in id order until shares sum to amount."""
    unit = Decimal(1).scaleb(-decimal_places)
    residue = amount - sum_decimals(shares.values())
    steps = int(residue / unit)
    if steps == 0:
        return shares

    step = unit if steps > 0 else -unit
    adjusted = dict(shares)
    for participant_id in sorted(adjusted)[:abs(steps)]:
        adjusted[participant_id] = round_money(adjusted[participant_id] + step, decimal_places)
    logger.debug(f"Distributed residue {residue} across {abs(steps)} participants")
    return adjusted


def _iter_issues(expense: Expense) -> Iterator[Tuple[Type[SettlementError], str]]:
    """Yield every reason the expense cannot be split, most fundamental first."""
    participants = expense.participant_ids
    if not participants:
        yield EmptyParticipantSet, f"Expense {expense.id} has no participants"
        return

    weights = expense.participant_weights
    for participant_id, weight in weights.items():
        if weight < 0:
            yield InvalidSplitConfiguration, (
                f"Expense {expense.id}: negative weight {weight} for {participant_id}"
            )

    if expense.split_type == SplitType.EQUAL:
        uneven = sorted(pid for pid, weight in weights.items() if weight != 1)
        if uneven:
            yield InvalidSplitConfiguration, (
                f"Expense {expense.id}: equal split requires every weight to be 1 "
                f"(got non-uniform weights for {', '.join(uneven)})"
            )

    elif expense.split_type == SplitType.WEIGHTED:
        if sum_decimals(weights.values()) == 0:
            yield InvalidSplitConfiguration, f"Expense {expense.id}: weighted split has zero total weight"
        else:
            for participant_id, weight in weights.items():
                if weight == 0:
                    yield InvalidSplitConfiguration, (
                        f"Expense {expense.id}: weight for {participant_id} must be positive"
                    )

    elif expense.split_type == SplitType.ITEMIZED:
        amounts = expense.participant_amounts
        if amounts is None:
            yield InvalidSplitConfiguration, f"Expense {expense.id}: itemized split requires participant amounts"
            return
        for participant_id, share in amounts.items():
            if share < 0:
                yield InvalidSplitConfiguration, (
                    f"Expense {expense.id}: negative itemized amount {share} for {participant_id}"
                )
        declared = sum_decimals(amounts.values())
        if abs(declared - expense.amount) > minimal_unit(expense.currency):
            yield InvalidSplitConfiguration, (
                f"Expense {expense.id}: itemized amounts sum to {declared}, "
                f"expected {expense.amount} {expense.currency}"
            )


def collect_expense_issues(expense: Expense) -> List[str]:
    """Return human-readable validation issues; empty when the expense is valid."""
    return [message for _, message in _iter_issues(expense)]


def validate_expense(expense: Expense) -> None:
    """
    Validate that an expense can be split.

    Raises:
        EmptyParticipantSet: nobody to split between
        InvalidSplitConfiguration: weights/amounts disagree with the split type
    """
    for error_class, message in _iter_issues(expense):
        raise error_class(message)


def validate_expenses(expenses: List[Expense]) -> None:
    """Validate a list of expenses, stopping at the first invalid one."""
    for expense in expenses:
        validate_expense(expense)
