from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemCategory(str, Enum):
    MODULE = "module"
    SERVICE = "service"


class PricingMode(str, Enum):
    FIXED_RECURRING = "fixed_recurring"
    VOLUME_BASED = "volume_based"
    ONE_TIME = "one_time"


class AdjustmentType(str, Enum):
    NONE = "none"
    DISCOUNT = "discount"
    SURCHARGE = "surcharge"


class Package(BaseModel):
    """
    Service tier scaled to a maximum annual DTE volume.
    Read-only snapshot of the pricing-admin catalog.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Catalog id, also the override key for the annual price")
    name: str = Field("", description="e.g., BASIC, STARTER, PRO")
    description: Optional[str] = Field(None, description="Shown on the package row of the desglose")
    annual_price: Decimal = Field(..., description="Authoritative recurring license price")
    monthly_price: Decimal = Field(Decimal("0"), description="Display only")
    implementation_cost: Decimal = Field(Decimal("0"), description="One-time activation fee")
    dte_capacity: int = Field(..., description="Maximum annual DTE volume covered by this tier")
    active: bool = True
    display_order: int = 0


class LineItem(BaseModel):
    """
    Selectable module or service.

    Exactly one price field is authoritative per pricing mode:
      FIXED_RECURRING -> annual_price
      VOLUME_BASED    -> unit_price (x volume)
      ONE_TIME        -> one_time_price
    """
    model_config = ConfigDict(frozen=True)

    id: str
    category: ItemCategory
    name: str
    description: Optional[str] = None
    pricing_mode: PricingMode
    annual_price: Decimal = Decimal("0")
    monthly_price: Decimal = Decimal("0")
    one_time_price: Decimal = Decimal("0")
    unit_price: Decimal = Decimal("0")
    billed_once: bool = Field(
        False, description="VOLUME_BASED only: bill unit_price x volume once, not yearly"
    )
    margin_pct: Decimal = Field(Decimal("0"), description="Markup applied to the catalog price")
    active: bool = Field(True, description="Retired items stay in the export but cannot be selected")
    display_order: int = 0


class FinancingPlan(BaseModel):
    """Admin-configured payment schedule. Only the plan resolved by id is consumed."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    term_months: int = 12
    installment_count: int = 1
    adjustment_type: AdjustmentType = AdjustmentType.NONE
    adjustment_rate_pct: Decimal = Decimal("0")
    is_popular: bool = False
    display_order: int = 0
    show_breakdown: bool = True
    active: bool = True


class TaxSettings(BaseModel):
    """Per-company payment settings."""
    model_config = ConfigDict(frozen=True)

    vat_pct: Decimal = Field(Decimal("13"), description="IVA applied to each bucket")
    best_price_label: Optional[str] = Field(None, description="Badge shown on the best-value financing plan")
