"""
Utility functions for the application.
"""
from typing import Any, Dict, Iterable
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction


def round_money(value: Decimal, decimal_places: int) -> Decimal:
    """Round half-up to a fixed number of decimal places."""
    return value.quantize(Decimal(1).scaleb(-decimal_places), rounding=ROUND_HALF_UP)


def round_ratio(numerator: Decimal, denominator: Decimal, decimal_places: int) -> Decimal:
    """
    Round numerator / denominator half-up (away from zero) without an
    intermediate inexact quotient.
    """
    if denominator == 0:
        raise ZeroDivisionError("denominator must be non-zero")
    scaled = Fraction(numerator) / Fraction(denominator) * (10 ** decimal_places)
    sign = -1 if scaled < 0 else 1
    quotient, remainder = divmod(abs(scaled.numerator), scaled.denominator)
    if 2 * remainder >= scaled.denominator:
        quotient += 1
    return Decimal(sign * quotient).scaleb(-decimal_places)


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """Sum Decimal values starting from an exact zero."""
    return sum(values, Decimal(0))


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response
