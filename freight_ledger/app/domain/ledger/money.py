"""
Currency conversion between divisa (USD) and bolívares (VES).

Rates are expressed as VES per 1 USD. Every conversion is rounded to
cents (ROUND_HALF_UP) at the moment it happens; callers that add converted
amounts together sum the already-rounded values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional, Union

from freight_ledger.app.core.exceptions import InvalidRateError

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Optional[Number]) -> Optional[Decimal]:
    """Coerce a stored or user-supplied number to Decimal (None stays None)."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from dragging binary noise along
    return Decimal(str(value))


def quantize(amount: Number) -> Decimal:
    """Round to 2 decimals, half-up."""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount: Number) -> int:
    return int(quantize(amount) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def _checked_rate(rate: Any) -> Decimal:
    try:
        value = to_decimal(rate)
    except (InvalidOperation, ValueError):
        raise InvalidRateError(rate)
    if value is None or not value.is_finite() or value <= 0:
        raise InvalidRateError(rate)
    return value


def to_origin_currency(amount_ves: Number, rate: Number) -> Decimal:
    """
    Convert bolívares to divisa: amount / rate, rounded to cents.

    Raises:
        InvalidRateError: If rate is missing or not greater than 0.
    """
    return quantize(to_decimal(amount_ves) / _checked_rate(rate))


def to_ves(amount_usd: Number, rate: Number) -> Decimal:
    """
    Convert divisa to bolívares: amount * rate, rounded to cents.

    Raises:
        InvalidRateError: If rate is missing or not greater than 0.
    """
    return quantize(to_decimal(amount_usd) * _checked_rate(rate))


def average_rate(bcv: Number, parallel: Number) -> Decimal:
    """Average of the official and parallel rates, rounded to cents."""
    return quantize((_checked_rate(bcv) + _checked_rate(parallel)) / 2)
