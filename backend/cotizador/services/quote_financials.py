"""
Breakdown of a stored (already persisted) quote.

Persisted quotes keep only tax-inclusive totals. The public quote view needs
the recurring base, financing surcharge and IVA back out of those totals, plus
the split of the upfront payment.

All functions return plain dicts suitable for an API response.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from cotizador import config
from cotizador.models.quote_schema import PaymentMode
from cotizador.services.money import HUNDRED, ZERO, d, money
from cotizador.services.quote_errors import InvalidInputError


def _pct_or_default(value: Optional[Decimal], default: Decimal, label: str) -> Decimal:
    # Only a missing value takes the default; an explicit 0 is a real rate.
    pct = d(default) if value is None else d(value)
    if not pct.is_finite() or pct < ZERO:
        raise InvalidInputError(f"{label} must be a non-negative percentage; received {pct}")
    return pct


def breakdown_stored_quote(
    total_annual,
    upfront_payment=None,
    payment_mode: PaymentMode = PaymentMode.ANNUAL,
    vat_pct: Optional[Decimal] = None,
    surcharge_pct: Optional[Decimal] = None,
) -> Dict[str, Any]:
    """
    Decompose a stored tax-inclusive total.

    Formula (remaining = total_annual - upfront_payment):
        monthly: base = remaining / ((1 + surcharge) * (1 + vat))
                 surcharge_amount = base * surcharge
                 vat = (base + surcharge_amount) * vat
        annual:  base = remaining / (1 + vat)
                 vat = base * vat
        upfront: subtotal = upfront / (1 + vat), vat = upfront - subtotal

    Args:
        total_annual:    Stored total including IVA.
        upfront_payment: Amount collected up front (IVA included). None -> 0.
        payment_mode:    ANNUAL or MONTHLY.
        vat_pct:         IVA percentage. None -> DEFAULT_VAT_PCT.
        surcharge_pct:   Monthly financing surcharge. None -> DEFAULT_SURCHARGE_PCT.
    """
    total = d(total_annual)
    upfront = ZERO if upfront_payment is None else d(upfront_payment)
    if not total.is_finite() or total < ZERO:
        raise InvalidInputError(f"total_annual must be non-negative; received {total}")
    if not upfront.is_finite() or upfront < ZERO or upfront > total:
        raise InvalidInputError(
            f"upfront_payment must be between 0 and total_annual; received {upfront}"
        )

    vat = _pct_or_default(vat_pct, config.DEFAULT_VAT_PCT, "vat_pct") / HUNDRED
    surcharge = _pct_or_default(surcharge_pct, config.DEFAULT_SURCHARGE_PCT, "surcharge_pct") / HUNDRED
    is_monthly = PaymentMode(payment_mode) == PaymentMode.MONTHLY

    remaining = total - upfront
    if is_monthly:
        base = remaining / ((1 + surcharge) * (1 + vat))
        surcharge_amount = base * surcharge
        recurring_vat = (base + surcharge_amount) * vat
    else:
        base = remaining / (1 + vat)
        surcharge_amount = ZERO
        recurring_vat = base * vat

    upfront_subtotal = upfront / (1 + vat)
    upfront_vat = upfront - upfront_subtotal

    return {
        "payment_mode": PaymentMode.MONTHLY.value if is_monthly else PaymentMode.ANNUAL.value,
        "vat_pct": vat * HUNDRED,
        "surcharge_pct": surcharge * HUNDRED if is_monthly else ZERO,
        "total_annual": money(total),
        "upfront_payment": money(upfront),
        "recurring_total": money(remaining),
        "recurring_base": money(base),
        "financing_surcharge": money(surcharge_amount),
        "recurring_vat": money(recurring_vat),
        "upfront_subtotal": money(upfront_subtotal),
        "upfront_vat": money(upfront_vat),
    }
