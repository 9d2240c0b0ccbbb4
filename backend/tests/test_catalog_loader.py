"""
test_catalog_loader.py - Tests for reading catalog snapshots from JSON.
"""

import json
from decimal import Decimal

import pytest

from cotizador.models.catalog_schema import AdjustmentType, ItemCategory, PricingMode
from cotizador.services.catalog_loader import CatalogLoadError, load_catalog


def test_bundled_catalog_loads():
    catalog = load_catalog()
    assert len(catalog.packages) == 4
    assert catalog.tax_settings.vat_pct == Decimal("13")
    assert catalog.get_package("pkg-starter").dte_capacity == 3000
    assert catalog.get_plan("plan-12").adjustment_type == AdjustmentType.SURCHARGE


def test_bundled_catalog_item_modes():
    catalog = load_catalog()
    whatsapp = next(i for i in catalog.items if i.id == "svc-whatsapp")
    assert whatsapp.pricing_mode == PricingMode.VOLUME_BASED
    assert whatsapp.unit_price == Decimal("0.025")


def test_ordered_items_puts_modules_first():
    categories = [i.category for i in load_catalog().ordered_items()]
    first_service = categories.index(ItemCategory.SERVICE)
    assert all(c == ItemCategory.SERVICE for c in categories[first_service:])


def test_active_packages_sorted_by_capacity():
    capacities = [p.dte_capacity for p in load_catalog().active_packages()]
    assert capacities == sorted(capacities)


def test_unknown_lookups_return_none():
    catalog = load_catalog()
    assert catalog.get_package("pkg-ghost") is None
    assert catalog.get_plan("plan-ghost") is None


def test_missing_file(tmp_path):
    with pytest.raises(CatalogLoadError, match="not found"):
        load_catalog(tmp_path / "nope.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogLoadError, match="Invalid JSON"):
        load_catalog(path)


def test_schema_mismatch(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"packages": [{"id": "p1", "annual_price": "abc"}]}), encoding="utf-8")
    with pytest.raises(CatalogLoadError, match="schema"):
        load_catalog(path)


def test_minimal_catalog(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({
        "packages": [{"id": "p1", "annual_price": 100, "dte_capacity": 50}],
    }), encoding="utf-8")
    catalog = load_catalog(path)
    assert catalog.packages[0].id == "p1"
    assert catalog.items == []
    assert catalog.tax_settings.vat_pct == Decimal("13")


def _write(tmp_path, payload):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_lookups_skip_inactive_entries(tmp_path):
    catalog = load_catalog(_write(tmp_path, {
        "packages": [{"id": "p-old", "annual_price": 100, "dte_capacity": 50, "active": False}],
        "items": [{"id": "m-old", "category": "module", "name": "Old",
                   "pricing_mode": "fixed_recurring", "annual_price": 10, "active": False}],
        "financing_plans": [{"id": "plan-old", "title": "Old", "active": False}],
    }))
    assert catalog.get_package("p-old") is None
    assert catalog.get_package("p-old", include_inactive=True).id == "p-old"
    assert catalog.get_plan("plan-old") is None
    assert catalog.get_plan("plan-old", include_inactive=True).id == "plan-old"
    assert catalog.ordered_items() == []
    view = catalog.active_view()
    assert view.packages == [] and view.items == [] and view.financing_plans == []


def test_reserved_implementation_id_rejected(tmp_path):
    path = _write(tmp_path, {
        "packages": [{"id": "implementation", "annual_price": 100, "dte_capacity": 50}],
    })
    with pytest.raises(CatalogLoadError, match="reserved"):
        load_catalog(path)


def test_id_shared_by_package_and_item_rejected(tmp_path):
    path = _write(tmp_path, {
        "packages": [{"id": "pos", "annual_price": 100, "dte_capacity": 50}],
        "items": [{"id": "pos", "category": "module", "name": "POS",
                   "pricing_mode": "fixed_recurring", "annual_price": 10}],
    })
    with pytest.raises(CatalogLoadError, match="Duplicate"):
        load_catalog(path)


def test_best_value_plan_is_highest_active_discount():
    assert load_catalog().best_value_plan().id == "plan-single"


def test_no_best_value_plan_without_discounts(tmp_path):
    catalog = load_catalog(_write(tmp_path, {
        "financing_plans": [
            {"id": "plan-12", "title": "12", "installment_count": 12,
             "adjustment_type": "surcharge", "adjustment_rate_pct": 20},
            {"id": "plan-old", "title": "Old", "adjustment_type": "discount",
             "adjustment_rate_pct": 15, "active": False},
        ],
    }))
    assert catalog.best_value_plan() is None
