"""
Money Utilities - Safe Decimal operations for prices and cart totals.

Catalog prices arrive from PostgREST as JSON numbers; everything is
converted to Decimal before arithmetic so totals never drift.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union

Numeric = Union[str, int, float, Decimal, None]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        # Go through str so 0.1 stays 0.1
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Numeric) -> Decimal:
    """Round monetary value to cents."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def multiply(value: Numeric, factor: Numeric) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def total(values: Iterable[Numeric]) -> Decimal:
    """Sum monetary values, starting from Decimal zero."""
    result = Decimal("0")
    for value in values:
        result += to_decimal(value)
    return result


def to_float(value: Numeric) -> float:
    """
    Convert Decimal to float for JSON payloads.

    Use only at boundaries, not for internal calculations.
    """
    return float(to_decimal(value))


def format_money(value: Numeric, symbol: str = "$") -> str:
    """Format monetary value for display, e.g. ``$1,250.00``."""
    return f"{symbol}{round_money(value):,.2f}"
