"""
Settlement validation for mathematical correctness.

Checks:
1. Conservation of money (sum of net balances = 0)
2. Every transfer names known, distinct participants
3. No duplicate transfers for the same direction
4. Transfers reproduce each person's net balance
5. No zero or negative transfer amounts
"""
import logging
from collections import Counter, defaultdict
from decimal import Decimal
from typing import Dict, List, Optional
from tripsplit.core.utils import sum_decimals
from tripsplit.schemas.settlement import MinimalTransfer, PersonSummary, ValidationResult
from tripsplit.services.currency_service import minimal_unit

logger = logging.getLogger(__name__)


def validate_settlement(
    summaries: List[PersonSummary],
    transfers: List[MinimalTransfer],
    currency: str,
    tolerance: Optional[Decimal] = None
) -> ValidationResult:
    """
    Validate that a transfer plan is consistent with person summaries.

    Args:
        summaries: Person summaries the plan was derived from
        transfers: Pending transfers to check
        currency: Currency of the settlement (sets the default tolerance)
        tolerance: Allowed absolute deviation, one minimal unit by default

    Returns:
        ValidationResult listing every issue found
    """
    if tolerance is None:
        tolerance = minimal_unit(currency)
    by_id = {summary.participant_id: summary for summary in summaries}

    issues = []
    issues.extend(_check_conservation(summaries, tolerance))
    issues.extend(_check_participants(by_id, transfers))
    issues.extend(_check_duplicates(transfers))
    issues.extend(_check_balances(by_id, transfers, tolerance))
    issues.extend(_check_amounts(transfers))

    if issues:
        logger.warning(f"Settlement validation found {len(issues)} issue(s) ({currency})")
    return ValidationResult(is_valid=not issues, issues=issues)


def quick_validate(summaries: List[PersonSummary], currency: str) -> bool:
    """Only check conservation of money."""
    return not _check_conservation(summaries, minimal_unit(currency))


def _check_conservation(summaries: List[PersonSummary], tolerance: Decimal) -> List[str]:
    total = sum_decimals(summary.net for summary in summaries)
    if abs(total) > tolerance:
        return [
            f"Conservation of money violated: sum of balances = {total} "
            f"(should be 0, tolerance: ±{tolerance})"
        ]
    return []


def _check_participants(by_id: Dict[str, PersonSummary], transfers: List[MinimalTransfer]) -> List[str]:
    issues = []
    for transfer in transfers:
        if transfer.from_id not in by_id:
            issues.append(f"Transfer {transfer.from_id} -> {transfer.to_id} has unknown payer: {transfer.from_id}")
        if transfer.to_id not in by_id:
            issues.append(f"Transfer {transfer.from_id} -> {transfer.to_id} has unknown receiver: {transfer.to_id}")
        if transfer.from_id == transfer.to_id:
            issues.append(f"Transfer has same payer and receiver: {transfer.from_id}")
    return issues


def _check_duplicates(transfers: List[MinimalTransfer]) -> List[str]:
    counts = Counter((transfer.from_id, transfer.to_id) for transfer in transfers)
    return [
        f"Duplicate transfers detected for pair {from_id} -> {to_id}: {count} transfers found"
        for (from_id, to_id), count in sorted(counts.items())
        if count > 1
    ]


def _check_balances(
    by_id: Dict[str, PersonSummary],
    transfers: List[MinimalTransfer],
    tolerance: Decimal
) -> List[str]:
    # incoming - outgoing per person
    flow: Dict[str, Decimal] = defaultdict(Decimal)
    for transfer in transfers:
        flow[transfer.from_id] -= transfer.amount
        flow[transfer.to_id] += transfer.amount

    issues = []
    for participant_id, summary in by_id.items():
        difference = abs(flow[participant_id] - summary.net)
        if difference > tolerance:
            issues.append(
                f"Balance mismatch for {participant_id}: transfers show net = {flow[participant_id]}, "
                f"but person summary shows net = {summary.net} (difference: {difference})"
            )
    return issues


def _check_amounts(transfers: List[MinimalTransfer]) -> List[str]:
    issues = []
    for transfer in transfers:
        if transfer.amount < 0:
            issues.append(f"Transfer {transfer.from_id} -> {transfer.to_id} has negative amount: {transfer.amount}")
        elif transfer.amount == 0:
            issues.append(f"Transfer {transfer.from_id} -> {transfer.to_id} has zero amount")
    return issues
