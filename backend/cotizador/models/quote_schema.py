"""
Quote engine input and output shapes.

Inputs are assembled by the caller on every wizard change; outputs live for a
single render. Nothing here is persisted by the engine.
"""
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cotizador.models.catalog_schema import (
    AdjustmentType,
    FinancingPlan,
    ItemCategory,
    LineItem,
    Package,
    TaxSettings,
)

# Override-map key for the package's implementation fee.
IMPLEMENTATION_OVERRIDE_KEY = "implementation"


class PaymentMode(str, Enum):
    ANNUAL = "annual"
    MONTHLY = "monthly"


class LineCategory(str, Enum):
    PACKAGE = "package"
    IMPLEMENTATION = "implementation"
    MODULE = "module"
    SERVICE = "service"

    @classmethod
    def for_item(cls, category: ItemCategory) -> "LineCategory":
        return cls.MODULE if category == ItemCategory.MODULE else cls.SERVICE


class QuoteConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    payment_mode: PaymentMode = PaymentMode.ANNUAL
    installment_count: int = 1
    adjustment_type: AdjustmentType = AdjustmentType.NONE
    adjustment_rate_pct: Decimal = Decimal("0")
    manual_discount_pct: Decimal = Decimal("0")
    vat_pct: Decimal = Decimal("13")
    include_implementation: bool = True

    @classmethod
    def build(
        cls,
        tax_settings: TaxSettings,
        plan: Optional[FinancingPlan] = None,
        **fields,
    ) -> "QuoteConfig":
        """
        Assemble a config from company tax settings and the resolved financing plan.

        The plan's installment_count, adjustment_type and adjustment_rate_pct win
        over anything in ``fields``. A plan with more than one installment switches
        payment_mode to MONTHLY unless the caller set it explicitly.
        """
        values = {"vat_pct": tax_settings.vat_pct}
        values.update(fields)
        if plan is not None:
            values["installment_count"] = plan.installment_count
            values["adjustment_type"] = plan.adjustment_type
            values["adjustment_rate_pct"] = plan.adjustment_rate_pct
            if "payment_mode" not in fields:
                values["payment_mode"] = (
                    PaymentMode.MONTHLY if plan.installment_count > 1 else PaymentMode.ANNUAL
                )
        return cls(**values)


class QuoteInput(BaseModel):
    """Everything compute_quote needs, passed explicitly."""
    model_config = ConfigDict(frozen=True)

    package: Optional[Package] = None
    items: List[LineItem] = Field(default_factory=list, description="Catalog items in catalog order")
    selected_item_ids: FrozenSet[str] = frozenset()
    volume: Decimal = Decimal("0")
    config: QuoteConfig = Field(default_factory=QuoteConfig)
    overrides: Dict[str, Optional[Decimal]] = Field(
        default_factory=dict,
        description="Entity id -> manual price. A present key wins even when the value is 0.",
    )


class LineResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: LineCategory
    name: str
    description: str = ""
    amount: Decimal
    monthly_equivalent: Decimal
    is_one_time: bool


class ComputedQuote(BaseModel):
    model_config = ConfigDict(frozen=True)

    line_results: List[LineResult]

    one_time_subtotal: Decimal
    one_time_tax: Decimal
    one_time_total: Decimal

    recurring_subtotal_base: Decimal
    adjustment_type: AdjustmentType
    adjustment_amount: Decimal
    adjustment_pct: Decimal
    savings_amount: Decimal
    interest_amount: Decimal
    manual_discount_amount: Decimal
    recurring_net: Decimal
    recurring_tax: Decimal
    recurring_total: Decimal

    grand_total: Decimal
    installment_amount: Decimal
    installment_count: int
    is_financed: bool
    payment_mode: PaymentMode
