from __future__ import annotations

from decimal import Decimal, InvalidOperation

# Maximum price: $9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

_CENT = Decimal("0.01")


class MoneyFormatError(ValueError):
    """Raised when a client-supplied amount is not a valid price."""


def parse_price_cents(value) -> int:
    """
    Convert a client price ("10.5", 10.50, 10) into integer cents.

    Floats go through their shortest repr so 0.1 stays 0.1. Anything with more
    than two fractional digits is rejected rather than rounded.
    """
    if value is None or isinstance(value, bool):
        raise MoneyFormatError("price is required")
    try:
        amount = Decimal(repr(value)) if isinstance(value, float) else Decimal(str(value).strip())
    except InvalidOperation:
        raise MoneyFormatError("price must be a decimal number")

    if not amount.is_finite():
        raise MoneyFormatError("price must be a decimal number")
    try:
        exact = amount == amount.quantize(_CENT)
    except InvalidOperation:
        raise MoneyFormatError(f"price cannot exceed {MAX_PRICE_CENTS / 100:,.2f}")
    if not exact:
        raise MoneyFormatError("price cannot have more than two decimal places")

    cents = int(amount * 100)
    if cents < 0:
        raise MoneyFormatError("price must be >= 0")
    if cents > MAX_PRICE_CENTS:
        raise MoneyFormatError(f"price cannot exceed {MAX_PRICE_CENTS / 100:,.2f}")
    return cents


def format_cents(cents: int | None) -> str | None:
    """2000 -> "20.00"."""
    if cents is None:
        return None
    return str((Decimal(cents) / 100).quantize(_CENT))
