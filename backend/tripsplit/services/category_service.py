"""
Category spending service.
Breaks each person's owed shares down by expense category.
"""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional
from tripsplit.schemas.expense import Expense
from tripsplit.schemas.settlement import CategorySpending, PersonCategorySpending
from tripsplit.services.expense_service import compute_shares
from tripsplit.services.settlement_service import calculate_person_summaries, require_single_currency

logger = logging.getLogger(__name__)

# Default categories offered for trip expenses; any other label is kept as given
EXPENSE_CATEGORIES = [
    "food",           # Restaurants, cafes, groceries, food delivery
    "drink",          # Alcohol, beverages, tea, etc.
    "transportation", # Taxi, bus, train, flight, car rental, parking
    "accommodation",  # Hotel, hostel, Airbnb
    "shopping",       # Souvenirs, clothes, gifts, general shopping
    "entertainment",  # Movies, concerts, shows, activities
    "ticket",         # Museum tickets, attraction tickets, event tickets
    "health",         # Pharmacy, medical, health products
    "communication",  # Phone, internet, SIM card
    "other"           # Default category for uncategorized expenses
]

DEFAULT_CATEGORY = "other"


def normalize_category(category: Optional[str]) -> str:
    """Lower-case a category label; empty labels fall into DEFAULT_CATEGORY."""
    if not category or not category.strip():
        return DEFAULT_CATEGORY
    return category.strip().lower()


def calculate_category_spending(
    expenses: List[Expense],
    remainder: Optional[str] = None
) -> List[PersonCategorySpending]:
    """
    Calculate per-person spending by category.

    A person's spending in a category is the sum of their shares of the
    expenses in that category, so every person's category amounts add up
    to their total owed.

    Returns:
        One entry per participant (ordered by id), categories ordered by
        amount (largest first) then name
    """
    expenses = list(expenses)
    require_single_currency(expenses)

    amounts: Dict[str, Dict[str, Decimal]] = defaultdict(lambda: defaultdict(Decimal))
    counts: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))

    for expense in expenses:
        category = normalize_category(expense.category)
        for participant_id, share in compute_shares(expense, remainder=remainder).items():
            amounts[participant_id][category] += share
            counts[participant_id][category] += 1

    result = []
    for summary in calculate_person_summaries(expenses, remainder=remainder):
        person_amounts = amounts.get(summary.participant_id, {})
        categories = [
            CategorySpending(
                category=category,
                amount=amount,
                expense_count=counts[summary.participant_id][category]
            )
            for category, amount in person_amounts.items()
        ]
        categories.sort(key=lambda c: (-c.amount, c.category))
        result.append(PersonCategorySpending(
            participant_id=summary.participant_id,
            total_paid=summary.total_paid,
            total_owed=summary.total_owed,
            net=summary.net,
            categories=categories
        ))

    logger.debug(f"Category spending computed for {len(result)} participants")
    return result
