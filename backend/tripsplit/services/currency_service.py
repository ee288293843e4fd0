"""
Currency precision lookup.

Settlements never convert between currencies; this module only answers how
many minor units a currency has, which drives every rounding decision.
"""
import logging
from decimal import Decimal
from typing import Optional
from tripsplit.core.config import settings

logger = logging.getLogger(__name__)

# ISO 4217 minor units for the currencies trips actually use.
# Anything missing falls back to settings.DEFAULT_DECIMAL_PLACES.
ISO_4217_DECIMAL_PLACES = {
    # Zero decimal currencies
    "BIF": 0,
    "CLP": 0,
    "DJF": 0,
    "GNF": 0,
    "ISK": 0,
    "JPY": 0,
    "KMF": 0,
    "KRW": 0,
    "PYG": 0,
    "RWF": 0,
    "UGX": 0,
    "VND": 0,
    "VUV": 0,
    "XAF": 0,
    "XOF": 0,
    "XPF": 0,
    # Three decimal currencies
    "BHD": 3,
    "IQD": 3,
    "JOD": 3,
    "KWD": 3,
    "LYD": 3,
    "OMR": 3,
    "TND": 3,
    # Two decimal currencies
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "AUD": 2,
    "CAD": 2,
    "CHF": 2,
    "CNY": 2,
    "HKD": 2,
    "INR": 2,
    "MXN": 2,
    "NZD": 2,
    "SEK": 2,
    "SGD": 2,
    "THB": 2,
}


def normalize_currency(currency: Optional[str]) -> str:
    """
    Normalize a currency code to upper case.
    Falls back to the configured DEFAULT_CURRENCY when empty.
    """
    if currency and currency.strip():
        return currency.strip().upper()
    return settings.DEFAULT_CURRENCY.upper()


def get_decimal_places(currency: Optional[str]) -> int:
    """
    Get the number of minor units for a currency.

    Configured overrides win over the ISO 4217 table; unknown codes use
    DEFAULT_DECIMAL_PLACES.

    Args:
        currency: Currency code (e.g., 'USD', 'VND', 'BHD')

    Returns:
        Decimal places used when rounding amounts in that currency
    """
    code = normalize_currency(currency)
    overrides = settings.CURRENCY_PRECISION_OVERRIDES or {}
    if code in overrides:
        return overrides[code]
    if code in ISO_4217_DECIMAL_PLACES:
        return ISO_4217_DECIMAL_PLACES[code]
    logger.debug(f"No precision known for {code}, using {settings.DEFAULT_DECIMAL_PLACES}")
    return settings.DEFAULT_DECIMAL_PLACES


def minimal_unit(currency: Optional[str]) -> Decimal:
    """Smallest representable amount, e.g. 0.01 for USD and 1 for VND."""
    return Decimal(1).scaleb(-get_decimal_places(currency))

