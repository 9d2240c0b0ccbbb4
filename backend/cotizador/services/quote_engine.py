"""
QuoteEngine - turns wizard state into an itemized, tax-inclusive quote.

Pipeline (see compute_quote):
  1. No package yet -> None (pending, not an error)
  2. Resolve package, implementation and selected item prices (overrides win)
  3. Classify into one-time and recurring buckets
  4. Manual discount on the recurring base
  5. Financing plan adjustment on the recurring base
  6. recurring_net = base + adjustment - manual discount, floored at 0
  7-8. IVA per bucket
  9. grand_total = one_time_total + recurring_total
  10. Installment amount
  11. Desglose rows: package, implementation, items in catalog order

All arithmetic is exact Decimal. Each output field is rounded half-up to cents
exactly once, when it is placed into the ComputedQuote.
"""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from cotizador.models.catalog_schema import Package
from cotizador.models.quote_schema import (
    IMPLEMENTATION_OVERRIDE_KEY,
    ComputedQuote,
    LineCategory,
    LineResult,
    QuoteConfig,
    QuoteInput,
)
from cotizador.services.financing_engine import adjust
from cotizador.services.money import MONTHS_PER_YEAR, ZERO, d, money, pct_of
from cotizador.services.pricing_engine import (
    PricedItem,
    classify_buckets,
    price_selected_items,
    resolve_price,
    validate_volume,
)
from cotizador.services.quote_errors import InvalidInputError
from cotizador.services.tax_engine import apply_tax, validate_vat

_PACKAGE_DEFAULT_DESCRIPTION = "Annual e-invoicing license"
_IMPLEMENTATION_NAME = "Implementation services"
_IMPLEMENTATION_DESCRIPTION = "Initial setup, data load and training (one-time payment)"


def effective_installment_count(config: QuoteConfig) -> int:
    """0 is clamped to 1; negative counts are a configuration error."""
    count = config.installment_count
    if count < 0:
        raise InvalidInputError(f"installment_count must be >= 1; received {count}")
    return max(1, count)


def _validate_config(config: QuoteConfig) -> None:
    discount = d(config.manual_discount_pct)
    if not discount.is_finite() or discount < ZERO:
        raise InvalidInputError(
            f"Manual discount must be a non-negative percentage; received {discount}"
        )
    validate_vat(config.vat_pct)


def _monthly_equivalent(amount: Decimal, is_one_time: bool) -> Decimal:
    if is_one_time:
        return money(ZERO)
    return money(amount / MONTHS_PER_YEAR)


def _package_row(package: Package, amount: Decimal) -> LineResult:
    name = package.name or package.id
    return LineResult(
        category=LineCategory.PACKAGE,
        name=f"{name} ({package.dte_capacity:,} DTEs)",
        description=package.description or _PACKAGE_DEFAULT_DESCRIPTION,
        amount=money(amount),
        monthly_equivalent=_monthly_equivalent(amount, False),
        is_one_time=False,
    )


def _item_row(priced: PricedItem) -> LineResult:
    item = priced.item
    return LineResult(
        category=LineCategory.for_item(item.category),
        name=item.name,
        description=item.description or priced.note,
        amount=money(priced.amount),
        monthly_equivalent=_monthly_equivalent(priced.amount, priced.is_one_time),
        is_one_time=priced.is_one_time,
    )


def compute_quote(quote_input: QuoteInput) -> Optional[ComputedQuote]:
    """
    Compute the full quote for one snapshot of wizard state.

    Returns None while no package is resolved. Raises InvalidInputError /
    InvalidConfigurationError for inputs that cannot produce a correct total.
    """
    package = quote_input.package
    if package is None:
        return None

    config = quote_input.config
    _validate_config(config)
    installments = effective_installment_count(config)
    volume = validate_volume(quote_input.volume)
    overrides = quote_input.overrides

    # -- Resolve prices -----------------------------------------------------
    package_price = resolve_price(package.id, package.annual_price, overrides)
    implementation: Optional[Decimal] = None
    if config.include_implementation:
        implementation = resolve_price(
            IMPLEMENTATION_OVERRIDE_KEY, package.implementation_cost, overrides
        )
    priced_items = price_selected_items(
        quote_input.items, quote_input.selected_item_ids, volume, overrides
    )

    # -- Buckets ------------------------------------------------------------
    buckets = classify_buckets(package_price, implementation, priced_items)
    base = buckets.recurring_subtotal_base

    manual_discount = pct_of(base, config.manual_discount_pct)
    adjustment = adjust(base, config)

    recurring_net = base + adjustment.adjustment_amount - manual_discount
    if recurring_net < ZERO:
        recurring_net = ZERO

    recurring = apply_tax(recurring_net, config.vat_pct)
    one_time = apply_tax(buckets.one_time_subtotal, config.vat_pct)

    one_time_total = money(one_time.total)
    recurring_total = money(recurring.total)

    if installments > 1:
        installment_amount = money(recurring.total / installments)
    else:
        installment_amount = recurring_total

    # -- Desglose -----------------------------------------------------------
    rows: List[LineResult] = [_package_row(package, package_price)]
    if implementation is not None and implementation > ZERO:
        rows.append(
            LineResult(
                category=LineCategory.IMPLEMENTATION,
                name=_IMPLEMENTATION_NAME,
                description=_IMPLEMENTATION_DESCRIPTION,
                amount=money(implementation),
                monthly_equivalent=money(ZERO),
                is_one_time=True,
            )
        )
    rows.extend(_item_row(priced) for priced in priced_items)

    return ComputedQuote(
        line_results=rows,
        one_time_subtotal=money(one_time.net),
        one_time_tax=money(one_time.tax),
        one_time_total=one_time_total,
        recurring_subtotal_base=money(base),
        adjustment_type=adjustment.adjustment_type,
        adjustment_amount=money(adjustment.adjustment_amount),
        adjustment_pct=adjustment.adjustment_pct,
        savings_amount=money(adjustment.savings_amount),
        interest_amount=money(adjustment.interest_amount),
        manual_discount_amount=money(manual_discount),
        recurring_net=money(recurring.net),
        recurring_tax=money(recurring.tax),
        recurring_total=recurring_total,
        grand_total=one_time_total + recurring_total,
        installment_amount=installment_amount,
        installment_count=installments,
        is_financed=adjustment.is_financed,
        payment_mode=config.payment_mode,
    )
