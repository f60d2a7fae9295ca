"""
Currency arithmetic helpers

All money in the settlement code goes through this module so the numeric type
can be changed in one place.
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

logger = logging.getLogger(__name__)

Money = Decimal

ZERO = Money("0")
CENT = Money("0.01")

# Magnitudes at or above this are rejected as input errors
MAX_AMOUNT = Money("1000000000")


def _in_range(value: Decimal) -> bool:
    return value.is_finite() and abs(value) < MAX_AMOUNT


def to_money(value, default: Money = ZERO) -> Money:
    """
    Leniently convert user or OCR input to Money.

    Accepts Decimal, int, float and strings such as "$1,234.50". Anything that
    is not a finite number (None, "", "abc", "NaN") or whose magnitude reaches
    ``MAX_AMOUNT`` becomes ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, Decimal):
        return value if _in_range(value) else default
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return default

    cleaned = value.replace("$", "").replace(",", "").strip()
    try:
        result = Money(cleaned)
    except InvalidOperation:
        logger.debug(f"Invalid money input {value!r}, using {default}")
        return default
    if not _in_range(result):
        logger.debug(f"Out of range money input {value!r}, using {default}")
        return default
    return result


def round_money(value: Money) -> Money:
    """Round to cents for display"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Money) -> str:
    """Render an amount with exactly two decimal places"""
    return f"{round_money(value):.2f}"


def money_sum(values) -> Money:
    return sum(values, ZERO)
