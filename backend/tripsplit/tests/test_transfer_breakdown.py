"""
Tests for transfer breakdown calculation.
"""
import pytest
from decimal import Decimal
from tripsplit.core.exceptions import CurrencyMismatchError
from tripsplit.services.settlement_service import calculate_pairwise_debts
from tripsplit.services.transfer_breakdown_service import calculate_breakdown


def test_breakdown_matches_pairwise_debt(trip_expenses):
    breakdown = calculate_breakdown("carol", "alice", trip_expenses)
    debts = {(d.from_id, d.to_id): d.amount for d in calculate_pairwise_debts(trip_expenses)}

    assert breakdown.total_amount == debts[("carol", "alice")]
    assert breakdown.currency == "USD"
    assert [b.net_contribution for b in breakdown.expense_breakdowns] == [Decimal("30"), Decimal("0")]
    assert [b.expense_id for b in breakdown.relevant_breakdowns] == ["e1"]


def test_breakdown_amounts_per_side(trip_expenses):
    breakdown = calculate_breakdown("carol", "bob", trip_expenses)
    dinner, taxi = breakdown.expense_breakdowns

    assert dinner.description == "Dinner"
    assert dinner.from_paid == Decimal("0")
    assert dinner.from_owes == Decimal("30")
    assert dinner.to_owes == Decimal("30")
    assert dinner.net_contribution == Decimal("0")
    assert taxi.to_paid == Decimal("30")
    assert taxi.net_contribution == Decimal("15")
    assert breakdown.total_amount == Decimal("15")


def test_breakdown_with_opposing_expenses(make_expense):
    expenses = [
        make_expense("e1", "B", "20000", ["A"], currency="VND"),
        make_expense("e2", "A", "10000", ["B"], currency="VND"),
    ]

    breakdown = calculate_breakdown("A", "B", expenses)

    assert breakdown.total_amount == Decimal("10000")
    assert breakdown.total_positive_contributions == Decimal("20000")
    assert breakdown.total_negative_contributions == Decimal("10000")
    assert breakdown.expense_breakdowns[0].explanation == "Contributes 20000 to transfer"
    assert breakdown.expense_breakdowns[1].explanation == "Reduces transfer by 10000"


def test_breakdown_reverse_direction_is_negative(trip_expenses):
    breakdown = calculate_breakdown("alice", "carol", trip_expenses)

    assert breakdown.total_amount == Decimal("-30")


def test_breakdown_unrelated_people(trip_expenses):
    breakdown = calculate_breakdown("alice", "zoe", trip_expenses)

    assert breakdown.total_amount == 0
    assert breakdown.relevant_breakdowns == []
    assert breakdown.expense_breakdowns[1].explanation == "No net effect on transfer"


def test_breakdown_rejects_mixed_currencies(make_expense):
    expenses = [
        make_expense("e1", "A", "10.00", ["B"]),
        make_expense("e2", "B", "10", ["A"], currency="JPY"),
    ]

    with pytest.raises(CurrencyMismatchError):
        calculate_breakdown("A", "B", expenses)
