"""
conftest.py - Shared pytest fixtures for the cotizador backend test suite.

No database or external service fixtures are defined here. Engine tests are
pure unit tests; API tests run the FastAPI app in-process with TestClient and
the bundled catalog.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``cotizador.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
from decimal import Decimal

import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any cotizador imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def starter_package():
    """
    Package used by the reference scenarios:
      annual = 1200, monthly = 120, implementation = 300, capacity = 3000 DTEs.
    """
    from cotizador.models.catalog_schema import Package
    return Package(
        id="pkg-starter",
        name="STARTER",
        annual_price=1200,
        monthly_price=120,
        implementation_cost=300,
        dte_capacity=3000,
    )


@pytest.fixture
def package_catalog():
    """Four tiers: 500 / 3000 / 10000 / 999999 DTEs at 600 / 1200 / 2400 / 4800."""
    from cotizador.models.catalog_schema import Package
    return [
        Package(id="pkg-pro", name="PRO", annual_price=2400, implementation_cost=200,
                dte_capacity=10000, display_order=3),
        Package(id="pkg-basic", name="BASIC", annual_price=600, implementation_cost=50,
                dte_capacity=500, display_order=1),
        Package(id="pkg-enterprise", name="ENTERPRISE", annual_price=4800,
                implementation_cost=500, dte_capacity=999999, display_order=4),
        Package(id="pkg-starter", name="STARTER", annual_price=1200, implementation_cost=100,
                dte_capacity=3000, display_order=2),
    ]


@pytest.fixture
def line_items():
    """
    One item per pricing mode, in catalog order:
      mod-pos        FIXED_RECURRING  annual 360
      svc-whatsapp   VOLUME_BASED     0.025 / DTE (recurring)
      svc-setup-dte  VOLUME_BASED     0.10 / DTE, billed_once (one-time)
      svc-branding   ONE_TIME         150
    """
    from cotizador.models.catalog_schema import ItemCategory, LineItem, PricingMode
    return [
        LineItem(id="mod-pos", category=ItemCategory.MODULE, name="POS",
                 description="Integrated point of sale",
                 pricing_mode=PricingMode.FIXED_RECURRING, annual_price=360, monthly_price=36),
        LineItem(id="svc-whatsapp", category=ItemCategory.SERVICE, name="WhatsApp notifications",
                 pricing_mode=PricingMode.VOLUME_BASED, unit_price=Decimal("0.025")),
        LineItem(id="svc-setup-dte", category=ItemCategory.SERVICE, name="Document template setup",
                 pricing_mode=PricingMode.VOLUME_BASED, unit_price=Decimal("0.10"),
                 billed_once=True),
        LineItem(id="svc-branding", category=ItemCategory.SERVICE, name="Brand customization",
                 pricing_mode=PricingMode.ONE_TIME, one_time_price=150),
    ]


@pytest.fixture
def make_input(starter_package, line_items):
    """
    Factory for QuoteInput around the starter package.

    Defaults reproduce scenario A: no items, no implementation, IVA 13 %,
    no plan adjustment, one installment.
    """
    from cotizador.models.quote_schema import QuoteConfig, QuoteInput

    def _make(package=starter_package, selected=(), volume=0, overrides=None, **config):
        cfg = {"vat_pct": 13, "include_implementation": False}
        cfg.update(config)
        return QuoteInput(
            package=package,
            items=line_items,
            selected_item_ids=frozenset(selected),
            volume=volume,
            config=QuoteConfig(**cfg),
            overrides=overrides or {},
        )

    return _make


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def client():
    """TestClient over the app with the bundled catalog and fresh metrics."""
    from fastapi.testclient import TestClient
    from cotizador.main import app
    from cotizador.services.perf_monitor import tracker

    tracker.reset()
    with TestClient(app) as test_client:
        yield test_client
    tracker.reset()
