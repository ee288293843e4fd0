"""
Settlement service for trip debt calculation.

Turns a single-currency expense list into per-person summaries, pairwise
netted debts, and a greedy minimal transfer plan.
"""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from tripsplit.core.exceptions import CurrencyMismatchError, InvalidSettledTransfer
from tripsplit.core.utils import sum_decimals
from tripsplit.schemas.expense import Expense
from tripsplit.schemas.settlement import MinimalTransfer, PairwiseDebt, PersonSummary, SettlementResult
from tripsplit.services.currency_service import normalize_currency
from tripsplit.services.expense_service import compute_shares

logger = logging.getLogger(__name__)

ExpenseShares = List[Tuple[Expense, Dict[str, Decimal]]]


def _split_expenses(expenses: Iterable[Expense], remainder: Optional[str] = None) -> ExpenseShares:
    """Pair every expense with its computed shares."""
    return [(expense, compute_shares(expense, remainder=remainder)) for expense in expenses]


def require_single_currency(expenses: List[Expense], currency: Optional[str] = None) -> str:
    """Return the one currency shared by all expenses, or raise CurrencyMismatchError."""
    currencies = {expense.currency for expense in expenses}
    if currency is not None:
        currencies.add(normalize_currency(currency))
    if len(currencies) > 1:
        raise CurrencyMismatchError(currencies)
    if currencies:
        return currencies.pop()
    return normalize_currency(None)


def _summaries_from_shares(split: ExpenseShares) -> List[PersonSummary]:
    paid: Dict[str, Decimal] = defaultdict(Decimal)
    owed: Dict[str, Decimal] = defaultdict(Decimal)

    for expense, shares in split:
        paid[expense.payer_id] += expense.amount
        for participant_id, share in shares.items():
            owed[participant_id] += share

    participants = sorted(set(paid) | set(owed))
    return [
        PersonSummary(
            participant_id=participant_id,
            total_paid=paid[participant_id],
            total_owed=owed[participant_id],
            net=paid[participant_id] - owed[participant_id]
        )
        for participant_id in participants
    ]


def _pairwise_from_shares(split: ExpenseShares) -> List[PairwiseDebt]:
    # (debtor, creditor) -> amount before netting
    raw: Dict[Tuple[str, str], Decimal] = defaultdict(Decimal)

    for expense, shares in split:
        for participant_id, share in shares.items():
            if participant_id == expense.payer_id:
                continue
            raw[(participant_id, expense.payer_id)] += share

    pairs = {tuple(sorted(key)) for key in raw}
    debts = []
    for user_a, user_b in pairs:
        net_a_to_b = raw.get((user_a, user_b), Decimal(0)) - raw.get((user_b, user_a), Decimal(0))
        if net_a_to_b > 0:
            debts.append(PairwiseDebt(from_id=user_a, to_id=user_b, amount=net_a_to_b))
        elif net_a_to_b < 0:
            debts.append(PairwiseDebt(from_id=user_b, to_id=user_a, amount=-net_a_to_b))

    debts.sort(key=lambda d: (d.from_id, d.to_id))
    return debts


def calculate_person_summaries(expenses: List[Expense], remainder: Optional[str] = None) -> List[PersonSummary]:
    """
    Calculate paid/owed/net for everyone appearing in the expenses.
    Returns summaries ordered by participant id.
    """
    return _summaries_from_shares(_split_expenses(expenses, remainder))


def calculate_pairwise_debts(expenses: List[Expense], remainder: Optional[str] = None) -> List[PairwiseDebt]:
    """
    Calculate direct debts between every pair of participants.

    A owes B the sum of A's shares in expenses B paid for; the two
    directions are netted so at most one debt survives per pair.
    """
    return _pairwise_from_shares(_split_expenses(expenses, remainder))


def calculate_rounding_residues(expenses: List[Expense], remainder: Optional[str] = None) -> List[Decimal]:
    """
    Per expense (in input order), amount minus the sum of its rounded shares.

    Summed over all expenses this equals the sum of net balances, i.e. the
    dust greedy matching cannot place.
    """
    return [
        expense.amount - sum_decimals(shares.values())
        for expense, shares in _split_expenses(expenses, remainder)
    ]


def _largest_first(balance: Tuple[str, Decimal]):
    user_id, amount = balance
    return (-amount, user_id)


def minimize_transfers(balances: List[Tuple[str, Decimal]]) -> List[MinimalTransfer]:
    """
    Minimize the number of transfers needed to settle net balances.

    Greedy: always match the largest remaining debtor with the largest
    remaining creditor, ties broken by participant id. Every round settles
    at least one party, so K non-zero parties need at most K - 1 transfers.
    """
    # Separate creditors (positive balance) and debtors (negative balance)
    creditors = [(uid, bal) for uid, bal in balances if bal > 0]
    debtors = [(uid, -bal) for uid, bal in balances if bal < 0]  # Store as positive for easier calculation

    transfers = []
    while creditors and debtors:
        creditors.sort(key=_largest_first)
        debtors.sort(key=_largest_first)

        creditor_id, cred_amount = creditors[0]
        debtor_id, debt_amount = debtors[0]

        # Transfer the minimum of what's owed and what's needed
        transfer_amount = min(cred_amount, debt_amount)
        transfers.append(MinimalTransfer(from_id=debtor_id, to_id=creditor_id, amount=transfer_amount))
        logger.debug(f"Transfer #{len(transfers)}: {debtor_id} -> {creditor_id} {transfer_amount}")

        creditors[0] = (creditor_id, cred_amount - transfer_amount)
        debtors[0] = (debtor_id, debt_amount - transfer_amount)
        creditors = [c for c in creditors if c[1] > 0]
        debtors = [d for d in debtors if d[1] > 0]

    leftover = creditors or debtors
    if leftover:
        logger.debug(f"Unmatched rounding residue after greedy matching: {leftover}")

    return transfers


def apply_settled_transfers(
    summaries: List[PersonSummary],
    settled_transfers: Iterable[MinimalTransfer]
) -> List[PersonSummary]:
    """
    Adjust net balances for payments that already happened.

    The payer's net rises (they owe less), the receiver's net falls (they
    are owed less). Paid/owed totals stay as the expenses recorded them.

    Raises:
        InvalidSettledTransfer: a transfer has a non-positive amount, names
            someone outside the summaries, or pays the sender themselves
    """
    net = {summary.participant_id: summary.net for summary in summaries}
    for transfer in settled_transfers:
        if transfer.amount <= 0:
            raise InvalidSettledTransfer(
                f"Settled transfer {transfer.from_id} -> {transfer.to_id} must have a positive amount, "
                f"got {transfer.amount}"
            )
        unknown = [uid for uid in (transfer.from_id, transfer.to_id) if uid not in net]
        if unknown:
            raise InvalidSettledTransfer(
                f"Settled transfer {transfer.from_id} -> {transfer.to_id} names unknown "
                f"participant(s): {', '.join(unknown)}"
            )
        if transfer.from_id == transfer.to_id:
            raise InvalidSettledTransfer(f"Settled transfer has same payer and receiver: {transfer.from_id}")
        net[transfer.from_id] += transfer.amount
        net[transfer.to_id] -= transfer.amount

    return [
        summary.model_copy(update={"net": net[summary.participant_id]})
        for summary in summaries
    ]


def compute_settlement(
    expenses: List[Expense],
    settled_transfers: Optional[List[MinimalTransfer]] = None,
    currency: Optional[str] = None,
    remainder: Optional[str] = None
) -> SettlementResult:
    """
    Compute the full settlement view for a single-currency expense list.

    Args:
        expenses: Validated expenses, all in one currency
        settled_transfers: Payments already made; they reduce the nets the
            transfer plan has to cover
        currency: Expected currency (labels the result for an empty list)
        remainder: Equal-split remainder mode passed to compute_shares

    Returns:
        SettlementResult with summaries, pairwise debts, and transfers

    Raises:
        CurrencyMismatchError: expenses span more than one currency
    """
    expenses = list(expenses)
    result_currency = require_single_currency(expenses, currency)
    split = _split_expenses(expenses, remainder)

    summaries = _summaries_from_shares(split)
    if settled_transfers:
        summaries = apply_settled_transfers(summaries, settled_transfers)
    pairwise_debts = _pairwise_from_shares(split)
    transfers = minimize_transfers([(s.participant_id, s.net) for s in summaries])

    logger.info(
        f"Settlement computed: {len(expenses)} expenses, {len(summaries)} participants, "
        f"{len(pairwise_debts)} pairwise debts, {len(transfers)} transfers ({result_currency})"
    )
    return SettlementResult(
        currency=result_currency,
        summaries=summaries,
        pairwise_debts=pairwise_debts,
        transfers=transfers
    )


def group_by_currency(expenses: Iterable[Expense]) -> Dict[str, List[Expense]]:
    """Group expenses by currency code, preserving input order within a group."""
    groups: Dict[str, List[Expense]] = defaultdict(list)
    for expense in expenses:
        groups[expense.currency].append(expense)
    return dict(groups)


def compute_settlements_by_currency(
    expenses: List[Expense],
    remainder: Optional[str] = None
) -> List[SettlementResult]:
    """
    Settle each currency of a multi-currency trip on its own.
    No exchange rates are applied; results are ordered by currency code.
    """
    groups = group_by_currency(expenses)
    return [
        compute_settlement(groups[currency], currency=currency, remainder=remainder)
        for currency in sorted(groups)
    ]
