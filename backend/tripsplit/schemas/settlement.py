"""
Pydantic schemas for Settlement entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from tripsplit.schemas.expense import Expense


class PersonSummary(BaseModel):
    """One participant's aggregate position in a single currency."""
    participant_id: str
    total_paid: Decimal  # Sum of amounts this person paid
    total_owed: Decimal  # Sum of this person's shares
    net: Decimal  # total_paid - total_owed (positive = should receive)

    model_config = {"frozen": True}


class PairwiseDebt(BaseModel):
    """from_id owes to_id, after netting both directions of the pair."""
    from_id: str
    to_id: str
    amount: Decimal = Field(gt=0)

    model_config = {"frozen": True}


class MinimalTransfer(BaseModel):
    """Single payment instruction in the settlement plan."""
    from_id: str  # Who pays
    to_id: str  # Who receives
    amount: Decimal

    model_config = {"frozen": True}


class SettlementResult(BaseModel):
    """Complete settlement view for one currency."""
    currency: str
    summaries: List[PersonSummary] = []
    pairwise_debts: List[PairwiseDebt] = []
    transfers: List[MinimalTransfer] = []

    model_config = {"frozen": True}

    @property
    def total_expenses(self) -> Decimal:
        return sum((s.total_paid for s in self.summaries), Decimal(0))


class ValidationResult(BaseModel):
    """Outcome of checking a settlement for mathematical consistency."""
    is_valid: bool
    issues: List[str] = []


class ExpenseBreakdown(BaseModel):
    """How one expense moves the debt between two people."""
    expense_id: str
    description: Optional[str] = None
    from_paid: Decimal
    from_owes: Decimal
    to_paid: Decimal
    to_owes: Decimal
    net_contribution: Decimal  # Positive increases from -> to debt, negative reduces it

    @property
    def explanation(self) -> str:
        if self.net_contribution > 0:
            return f"Contributes {abs(self.net_contribution)} to transfer"
        if self.net_contribution < 0:
            return f"Reduces transfer by {abs(self.net_contribution)}"
        return "No net effect on transfer"


class TransferBreakdown(BaseModel):
    """All expenses behind the debt from from_id to to_id."""
    from_id: str
    to_id: str
    currency: str
    total_amount: Decimal
    expense_breakdowns: List[ExpenseBreakdown] = []

    @property
    def relevant_breakdowns(self) -> List[ExpenseBreakdown]:
        return [b for b in self.expense_breakdowns if b.net_contribution != 0]

    @property
    def total_positive_contributions(self) -> Decimal:
        return sum((b.net_contribution for b in self.expense_breakdowns if b.net_contribution > 0), Decimal(0))

    @property
    def total_negative_contributions(self) -> Decimal:
        return sum((-b.net_contribution for b in self.expense_breakdowns if b.net_contribution < 0), Decimal(0))


class CategorySpending(BaseModel):
    """Share of one category attributed to a person."""
    category: str
    amount: Decimal
    expense_count: int


class PersonCategorySpending(BaseModel):
    """Per-person spending grouped by expense category."""
    participant_id: str
    total_paid: Decimal
    total_owed: Decimal
    net: Decimal
    categories: List[CategorySpending] = []

    def spending_for(self, category: str) -> Decimal:
        for item in self.categories:
            if item.category == category:
                return item.amount
        return Decimal(0)


class SettlementRequest(BaseModel):
    """Schema for settlement computation request."""
    expenses: List[Expense]
    settled_transfers: List[MinimalTransfer] = []  # Payments already made


class SettlementValidateRequest(BaseModel):
    """Schema for settlement validation request."""
    expenses: List[Expense]
    transfers: Optional[List[MinimalTransfer]] = None  # Defaults to the computed plan


class TransferBreakdownRequest(BaseModel):
    """Schema for transfer breakdown request."""
    expenses: List[Expense]
    from_id: str
    to_id: str


class ExpenseListRequest(BaseModel):
    """Schema for requests carrying only an expense list."""
    expenses: List[Expense]
