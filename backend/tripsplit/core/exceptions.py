"""
Errors raised for invalid settlement input.
"""


class SettlementError(ValueError):
    """Base class for caller-input errors in share or settlement computation."""
    pass


class InvalidSplitConfiguration(SettlementError):
    """Split type and participant weights/amounts do not agree."""
    pass


class EmptyParticipantSet(SettlementError):
    """Expense has nobody to split between."""
    pass


class CurrencyMismatchError(SettlementError):
    """A single settlement was asked to mix currencies."""

    def __init__(self, currencies):
        self.currencies = sorted(currencies)
        super().__init__(
            f"Expenses span multiple currencies ({', '.join(self.currencies)}); "
            f"settle each currency separately"
        )


class InvalidSettledTransfer(SettlementError):
    """An already-paid transfer cannot be applied to the trip's balances."""
    pass
