"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from decimal import Decimal
import enum
from tripsplit.services.currency_service import normalize_currency


class SplitType(str, enum.Enum):
    """How an expense is divided among participants."""
    EQUAL = "equal"
    WEIGHTED = "weighted"
    ITEMIZED = "itemized"


class Expense(BaseModel):
    """
    Expense as handed over by the caller.

    participant_weights keys are the participants; for itemized expenses
    participant_amounts holds the authoritative per-person shares.
    """
    id: str
    payer_id: str
    amount: Decimal = Field(gt=0)
    currency: str = Field(default="", validate_default=True)
    split_type: SplitType = SplitType.EQUAL
    participant_weights: Dict[str, Decimal] = {}
    participant_amounts: Optional[Dict[str, Decimal]] = None
    description: Optional[str] = None
    category: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency_code(cls, v):
        """Upper-case the code, falling back to the configured default."""
        return normalize_currency(v)

    @field_validator("split_type", mode="before")
    @classmethod
    def parse_split_type(cls, v):
        """Accept split type names in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def participant_ids(self) -> List[str]:
        """Participants of this expense (weights or itemized amounts)."""
        if self.split_type == SplitType.ITEMIZED and self.participant_amounts is not None:
            return list(self.participant_amounts)
        return list(self.participant_weights)


class ExpenseSharesResponse(BaseModel):
    """Schema for computed shares of a single expense."""
    expense_id: str
    currency: str
    decimal_places: int
    shares: Dict[str, Decimal]
    total_shares: Decimal
    residue: Decimal  # amount - total_shares, left with nobody


class ExpenseValidationResponse(BaseModel):
    """Schema for expense validation result."""
    expense_id: str
    valid: bool
    issues: List[str] = []
