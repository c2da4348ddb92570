"""Numeric coercion and rounding helpers for currency amounts."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
# Largest magnitude accepted as an amount or rate; anything beyond is treated as invalid input.
MAX_AMOUNT = Decimal("1e15")
_UNIT = Decimal("1")
_CENT = Decimal("0.01")


def to_amount(value: Any) -> Decimal:
    """Coerce user or persisted input to a Decimal.

    Absent, blank, non-numeric, NaN and infinite values all become 0, as
    do magnitudes above ``MAX_AMOUNT``; this never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not result.is_finite() or result.copy_abs() > MAX_AMOUNT:
        return ZERO
    return result


def to_int(value: Any) -> int:
    """Coerce input to a whole number (truncating fractions), 0 on failure."""
    return int(to_amount(value))


def round_currency(value: Any) -> Decimal:
    """Round to the nearest whole currency unit, halves away from zero."""
    try:
        return to_amount(value).quantize(_UNIT, rounding=ROUND_HALF_UP)
    except ArithmeticError:
        return ZERO


def round_percent(value: Any) -> Decimal:
    """Round a percentage to two decimal places."""
    try:
        return to_amount(value).quantize(_CENT, rounding=ROUND_HALF_UP)
    except ArithmeticError:
        return ZERO


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, short-circuiting to 0 when the denominator is 0."""
    if denominator == 0:
        return ZERO
    try:
        return numerator / denominator
    except ArithmeticError:
        return ZERO
