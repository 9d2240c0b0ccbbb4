"""Decimal helpers shared by the quote engine."""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")
MONTHS_PER_YEAR = Decimal("12")


def d(val) -> Decimal:
    """Coerce incoming values to Decimal safely."""
    if isinstance(val, Decimal):
        return val
    return Decimal(str(val))


def money(amount: Decimal) -> Decimal:
    """Round to cents, half-up. Call once per output field, never mid-calculation."""
    return d(amount).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def pct_of(amount: Decimal, pct: Decimal) -> Decimal:
    """Return ``amount * pct / 100`` without rounding."""
    return d(amount) * d(pct) / HUNDRED
