"""Decimal helpers for money, share quantities and prices.

All rounding in the engine is ROUND_HALF_UP at a fixed number of places.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ledger_holdings.config import (
    CURRENCY_DECIMAL_LEN,
    PCT_RETURN_DECIMAL_LEN,
    PRICE_FRACTION_LEN,
    QUANTITY_FRACTION_DISPLAY_LEN,
    QUANTITY_FRACTION_LEN,
)

ZERO = Decimal("0")


def _exponent(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def to_decimal(value: Decimal | float | int | str | None) -> Decimal | None:
    """Convert input values to Decimal, going through str for floats."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


def round_to(value: Decimal, places: int) -> Decimal:
    return value.quantize(_exponent(places), rounding=ROUND_HALF_UP)


def round_currency(value: Decimal) -> Decimal:
    return round_to(value, CURRENCY_DECIMAL_LEN)


def round_quantity(value: Decimal) -> Decimal:
    return round_to(value, QUANTITY_FRACTION_LEN)


def round_price(value: Decimal) -> Decimal:
    return round_to(value, PRICE_FRACTION_LEN)


def round_pct(value: Decimal) -> Decimal:
    return round_to(value, PCT_RETURN_DECIMAL_LEN)


def is_display_zero(quantity: Decimal) -> bool:
    """True when the quantity shows as zero at display precision."""
    return round_to(quantity, QUANTITY_FRACTION_DISPLAY_LEN) == ZERO


def sign(value: Decimal) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0
