"""
Catalog snapshot loader.

The catalog (packages, modules/services, financing plans, tax settings) is
owned by the external pricing-admin service. This module reads a JSON export
of it into immutable models; the quote engine only ever sees the snapshot.
"""
import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from cotizador import config
from cotizador.models.catalog_schema import (
    AdjustmentType,
    FinancingPlan,
    LineItem,
    Package,
    TaxSettings,
)
from cotizador.models.quote_schema import IMPLEMENTATION_OVERRIDE_KEY

logger = logging.getLogger("cotizador-catalog")


class CatalogLoadError(Exception):
    """Raised when a catalog file cannot be read or does not match the schema"""
    pass


class CatalogSnapshot(BaseModel):
    """
    Immutable catalog export.

    Lookups used for quoting only see active entries; retired packages, items
    and plans stay in the snapshot for stored quotes but cannot be quoted again.
    """
    model_config = ConfigDict(frozen=True)

    packages: List[Package] = Field(default_factory=list)
    items: List[LineItem] = Field(default_factory=list)
    financing_plans: List[FinancingPlan] = Field(default_factory=list)
    tax_settings: TaxSettings = Field(default_factory=TaxSettings)

    @model_validator(mode="after")
    def _check_override_keys(self) -> "CatalogSnapshot":
        # Package and item ids share the override map with the implementation fee
        seen = set()
        for entity_id in [p.id for p in self.packages] + [i.id for i in self.items]:
            if entity_id == IMPLEMENTATION_OVERRIDE_KEY:
                raise ValueError(
                    f"Catalog id '{entity_id}' is reserved for the implementation fee override"
                )
            if entity_id in seen:
                raise ValueError(f"Duplicate catalog id '{entity_id}' across packages and items")
            seen.add(entity_id)
        return self

    def get_package(self, package_id: str, include_inactive: bool = False) -> Optional[Package]:
        for pkg in self.packages:
            if pkg.id == package_id and (pkg.active or include_inactive):
                return pkg
        return None

    def get_plan(self, plan_id: str, include_inactive: bool = False) -> Optional[FinancingPlan]:
        for plan in self.financing_plans:
            if plan.id == plan_id and (plan.active or include_inactive):
                return plan
        return None

    def active_packages(self) -> List[Package]:
        return sorted(
            (p for p in self.packages if p.active),
            key=lambda p: (p.dte_capacity, p.display_order),
        )

    def ordered_items(self) -> List[LineItem]:
        """Active items in catalog order: modules first, then services, by display_order."""
        return sorted(
            (i for i in self.items if i.active),
            key=lambda i: (i.category.value != "module", i.display_order),
        )

    def active_plans(self) -> List[FinancingPlan]:
        return sorted((p for p in self.financing_plans if p.active), key=lambda p: p.display_order)

    def best_value_plan(self) -> Optional[FinancingPlan]:
        """Active DISCOUNT plan with the highest rate; ties go to display order."""
        discounts = [
            p for p in self.active_plans() if p.adjustment_type == AdjustmentType.DISCOUNT
        ]
        if not discounts:
            return None
        return max(discounts, key=lambda p: (p.adjustment_rate_pct, -p.display_order))

    def active_view(self) -> "CatalogSnapshot":
        """The quotable part of the catalog, as served to the wizard."""
        return CatalogSnapshot(
            packages=self.active_packages(),
            items=self.ordered_items(),
            financing_plans=self.active_plans(),
            tax_settings=self.tax_settings,
        )


def load_catalog(path: Optional[Union[str, Path]] = None) -> CatalogSnapshot:
    """
    Load a catalog snapshot from JSON.

    Args:
        path: Path to the catalog JSON file. If None, uses the bundled default.

    Returns:
        CatalogSnapshot

    Raises:
        CatalogLoadError: If the file is missing, not JSON, or fails validation.
    """
    catalog_path = Path(path) if path else config.DEFAULT_CATALOG_PATH
    if not catalog_path.exists():
        raise CatalogLoadError(f"Catalog file not found: {catalog_path}")

    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"Invalid JSON in catalog file {catalog_path}: {e}") from e
    except OSError as e:
        raise CatalogLoadError(f"Error reading catalog file {catalog_path}: {e}") from e

    try:
        snapshot = CatalogSnapshot.model_validate(raw)
    except ValidationError as e:
        raise CatalogLoadError(f"Catalog file {catalog_path} does not match the schema: {e}") from e

    logger.info(
        f"Loaded catalog from {catalog_path}: {len(snapshot.packages)} packages, "
        f"{len(snapshot.items)} items, {len(snapshot.financing_plans)} financing plans"
    )
    return snapshot
