"""
Financing Engine - applies the chosen payment plan to the recurring bucket.

A DISCOUNT plan is a prepay incentive, a SURCHARGE plan is installment
interest. The manual discount is a separate concession computed by the quote
engine off the same base; the two never compound.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from cotizador.models.catalog_schema import AdjustmentType, FinancingPlan
from cotizador.models.quote_schema import QuoteConfig
from cotizador.services.money import ZERO, d, pct_of
from cotizador.services.quote_errors import InvalidInputError


@dataclass(frozen=True)
class FinancingAdjustment:
    adjustment_type: AdjustmentType
    adjustment_amount: Decimal   # signed: negative for discounts
    adjustment_pct: Decimal      # the plan rate, 0 when there is no adjustment
    savings_amount: Decimal      # positive mirror of a discount
    interest_amount: Decimal     # surcharge amount
    is_financed: bool


def adjust(
    recurring_subtotal_base: Decimal,
    plan: Union[FinancingPlan, QuoteConfig],
) -> FinancingAdjustment:
    """
    Compute the plan adjustment on the recurring base.

    ``plan`` is anything carrying adjustment_type, adjustment_rate_pct and
    installment_count.
    """
    base = d(recurring_subtotal_base)
    rate = d(plan.adjustment_rate_pct)
    if not rate.is_finite() or rate < ZERO:
        raise InvalidInputError(f"Adjustment rate must be a non-negative percentage; received {rate}")

    kind = plan.adjustment_type
    if kind == AdjustmentType.DISCOUNT:
        amount = -pct_of(base, rate)
        return FinancingAdjustment(
            adjustment_type=kind,
            adjustment_amount=amount,
            adjustment_pct=rate,
            savings_amount=-amount,
            interest_amount=ZERO,
            is_financed=False,
        )
    if kind == AdjustmentType.SURCHARGE:
        amount = pct_of(base, rate)
        return FinancingAdjustment(
            adjustment_type=kind,
            adjustment_amount=amount,
            adjustment_pct=rate,
            savings_amount=ZERO,
            interest_amount=amount,
            is_financed=plan.installment_count > 1,
        )
    if kind == AdjustmentType.NONE:
        return FinancingAdjustment(
            adjustment_type=kind,
            adjustment_amount=ZERO,
            adjustment_pct=ZERO,
            savings_amount=ZERO,
            interest_amount=ZERO,
            is_financed=False,
        )
    raise InvalidInputError(f"Unknown adjustment type {kind!r}")
