"""
Tax (IVA) calculation per bucket.

One-time and recurring money are taxed separately: they end up on two
different invoices (activation and recurring billing).
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from cotizador.services.money import ZERO, d, pct_of
from cotizador.services.quote_errors import InvalidInputError


@dataclass(frozen=True)
class TaxedBucket:
    net: Decimal
    tax: Decimal
    total: Decimal


def validate_vat(vat_pct) -> Decimal:
    vat = d(vat_pct)
    if not vat.is_finite() or vat < ZERO:
        raise InvalidInputError(f"VAT must be a non-negative percentage; received {vat}")
    return vat


def tax(net: Decimal, vat_pct: Decimal) -> Decimal:
    """net * vat_pct / 100, unrounded."""
    return pct_of(net, validate_vat(vat_pct))


def apply_tax(net: Decimal, vat_pct: Decimal) -> TaxedBucket:
    net = d(net)
    amount = tax(net, vat_pct)
    return TaxedBucket(net=net, tax=amount, total=net + amount)
