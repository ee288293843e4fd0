"""
Shared fixtures for settlement tests.
"""
import pytest
from decimal import Decimal
from tripsplit.schemas.expense import Expense


@pytest.fixture
def make_expense():
    """Factory for expenses; participants get weight 1 unless weights are given."""
    def _make(
        expense_id,
        payer_id,
        amount,
        participants=None,
        currency="USD",
        split_type="equal",
        weights=None,
        amounts=None,
        category=None,
        description=None
    ):
        if weights is None:
            weights = {participant_id: 1 for participant_id in (participants or [])}
        return Expense(
            id=expense_id,
            payer_id=payer_id,
            amount=Decimal(str(amount)),
            currency=currency,
            split_type=split_type,
            participant_weights={k: Decimal(str(v)) for k, v in weights.items()},
            participant_amounts=(
                {k: Decimal(str(v)) for k, v in amounts.items()} if amounts is not None else None
            ),
            category=category,
            description=description
        )
    return _make


@pytest.fixture
def trip_expenses(make_expense):
    """Alice pays 90 for everyone, Bob pays 30 for Bob and Carol."""
    return [
        make_expense("e1", "alice", "90.00", ["alice", "bob", "carol"], description="Dinner"),
        make_expense("e2", "bob", "30.00", ["bob", "carol"], description="Taxi"),
    ]
