"""Decimal helpers for prices and amounts.

All prices, amounts and balances are Decimal. Exchange payloads arrive as
floats (or None); they are converted through str() so 0.1 stays 0.1.
"""

from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: object) -> Decimal | None:
    """Convert an exchange/DB value to Decimal; None, NaN and garbage -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return None if value.is_nan() else value
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if result.is_nan() or result.is_infinite():
        return None
    return result


def is_positive_number(value: object) -> bool:
    parsed = to_decimal(value)
    return parsed is not None and parsed > ZERO


def format_amount(value: Decimal) -> str:
    """Strip trailing zeros without falling into scientific notation."""
    normalized = value.normalize()
    if normalized == normalized.to_integral():
        return str(normalized.quantize(Decimal("1")))
    return format(normalized, "f")
