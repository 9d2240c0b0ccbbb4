"""
pricing_engine.py - price resolution and bucket classification for quotes.

Covers:
  - Override resolution (presence of the key wins, never the truthiness of the value)
  - Volume-based pricing (unit_price x DTE volume)
  - Catalog price per pricing mode, with optional margin markup
  - One-time vs recurring classification of the package, implementation and items

Every function is pure. Amounts stay unrounded here; rounding happens once in
quote_engine when each output field is assigned.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional

from cotizador.models.catalog_schema import LineItem, PricingMode
from cotizador.services.money import ZERO, d, pct_of
from cotizador.services.quote_errors import InvalidConfigurationError, InvalidInputError


@dataclass(frozen=True)
class PricedItem:
    """A selected line item with its effective (post-override) price."""
    item: LineItem
    amount: Decimal
    is_one_time: bool
    note: str


@dataclass(frozen=True)
class Buckets:
    one_time_subtotal: Decimal
    recurring_subtotal_base: Decimal


# ---------------------------------------------------------------------------
# 1. Override resolution
# ---------------------------------------------------------------------------

def resolve_price(
    entity_id: str,
    catalog_value: Decimal,
    overrides: Optional[Mapping[str, Optional[Decimal]]],
) -> Decimal:
    """
    Return the effective price for ``entity_id``.

    An override of exactly 0 is returned as 0. A key mapped to None is a
    cleared override and falls back to the catalog value.
    """
    if overrides and entity_id in overrides:
        value = overrides[entity_id]
        if value is not None:
            value = d(value)
            if not value.is_finite() or value < ZERO:
                raise InvalidInputError(
                    f"Override for '{entity_id}' must be a non-negative number; received {value}"
                )
            return value
    return d(catalog_value)


# ---------------------------------------------------------------------------
# 2. Volume-based pricing
# ---------------------------------------------------------------------------

def validate_volume(volume) -> Decimal:
    volume = d(volume)
    if not volume.is_finite() or volume < ZERO:
        raise InvalidInputError(f"DTE volume must be a non-negative finite number; received {volume}")
    return volume


def price_by_volume(item: LineItem, volume) -> Decimal:
    """unit_price x volume for a VOLUME_BASED item."""
    if item.pricing_mode != PricingMode.VOLUME_BASED:
        raise InvalidConfigurationError(
            f"Item '{item.id}' is priced {item.pricing_mode}, not by volume"
        )
    return d(item.unit_price) * validate_volume(volume)


def _plain(value: Decimal) -> str:
    """Decimal without exponent or trailing zeros: 100 -> '100', 0.10 -> '0.1'."""
    return format(value.normalize(), "f")


def _format_volume(volume: Decimal) -> str:
    if volume == volume.to_integral_value():
        return f"{int(volume):,}"
    return f"{volume.normalize():,f}"


# ---------------------------------------------------------------------------
# 3. Catalog price per pricing mode
# ---------------------------------------------------------------------------

def is_one_time_item(item: LineItem) -> bool:
    """
    ONE_TIME items are one-time. VOLUME_BASED items are recurring unless the
    catalog flags them billed_once. FIXED_RECURRING items are always recurring.
    """
    mode = item.pricing_mode
    if item.billed_once and mode != PricingMode.VOLUME_BASED:
        raise InvalidConfigurationError(
            f"Item '{item.id}': billed_once is only valid for volume-based items"
        )
    if mode == PricingMode.ONE_TIME:
        return True
    if mode == PricingMode.VOLUME_BASED:
        return bool(item.billed_once)
    if mode == PricingMode.FIXED_RECURRING:
        return False
    raise InvalidConfigurationError(f"Item '{item.id}' has unrecognised pricing mode {mode!r}")


def catalog_price(item: LineItem, volume) -> tuple[Decimal, str]:
    """
    Price an item from catalog data alone (no overrides).

    Returns (amount, note) where note is the human-readable calculation shown
    in the desglose.
    """
    mode = item.pricing_mode
    if mode == PricingMode.FIXED_RECURRING:
        amount, note = d(item.annual_price), "Annual price"
    elif mode == PricingMode.ONE_TIME:
        amount, note = d(item.one_time_price), "One-time payment"
    elif mode == PricingMode.VOLUME_BASED:
        amount = price_by_volume(item, volume)
        note = f"{_format_volume(validate_volume(volume))} DTEs x ${_plain(d(item.unit_price))}"
    else:
        raise InvalidConfigurationError(f"Item '{item.id}' has unrecognised pricing mode {mode!r}")

    margin = d(item.margin_pct)
    if margin < ZERO:
        raise InvalidConfigurationError(f"Item '{item.id}' has a negative margin ({margin}%)")
    if margin > ZERO:
        amount += pct_of(amount, margin)
        note += f" + {_plain(margin)}% margin"

    if amount < ZERO:
        raise InvalidConfigurationError(f"Item '{item.id}' resolves to a negative catalog price")
    return amount, note


def price_selected_items(
    items: Iterable[LineItem],
    selected_ids: Iterable[str],
    volume,
    overrides: Optional[Mapping[str, Optional[Decimal]]],
) -> List[PricedItem]:
    """
    Price every selected item, in catalog order.

    An override replaces the catalog (or volume-derived) amount outright.
    Selected ids missing from the catalog raise InvalidConfigurationError.
    """
    catalog = list(items)
    wanted = set(selected_ids)
    unknown = wanted - {item.id for item in catalog}
    if unknown:
        raise InvalidConfigurationError(f"Selected items not in catalog: {sorted(unknown)}")

    priced: List[PricedItem] = []
    for item in catalog:
        if item.id not in wanted:
            continue
        one_time = is_one_time_item(item)
        base_amount, note = catalog_price(item, volume)
        amount = resolve_price(item.id, base_amount, overrides)
        if overrides and overrides.get(item.id) is not None:
            note = "Manual price"
        priced.append(PricedItem(item=item, amount=amount, is_one_time=one_time, note=note))
    return priced


# ---------------------------------------------------------------------------
# 4. Bucket classification
# ---------------------------------------------------------------------------

def classify_buckets(
    package_price: Decimal,
    implementation_cost: Optional[Decimal],
    priced_items: Iterable[PricedItem],
) -> Buckets:
    """
    Split resolved prices into the one-time and recurring buckets.

    Args:
        package_price:       Resolved package annual price (recurring).
        implementation_cost: Resolved implementation fee, or None when not included.
        priced_items:        Output of price_selected_items.
    """
    one_time = d(implementation_cost) if implementation_cost is not None else ZERO
    recurring = d(package_price)
    for priced in priced_items:
        if priced.is_one_time:
            one_time += priced.amount
        else:
            recurring += priced.amount
    return Buckets(one_time_subtotal=one_time, recurring_subtotal_base=recurring)
