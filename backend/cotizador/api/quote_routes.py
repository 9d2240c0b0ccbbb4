"""
Quote API Routes

GET  /api/catalog                  - active catalog used by the wizard
GET  /api/catalog/plans            - active financing plans with the best-price badge
POST /api/quotes/select-package    - suggested package for a DTE volume
POST /api/quotes/calculate         - full quote for the current wizard state
POST /api/quotes/stored-breakdown  - IVA / surcharge split of a persisted quote
"""
import logging
import time
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from cotizador.api.deps import get_catalog
from cotizador.models.catalog_schema import FinancingPlan, Package
from cotizador.models.quote_schema import ComputedQuote, PaymentMode, QuoteConfig, QuoteInput
from cotizador.services.catalog_loader import CatalogSnapshot
from cotizador.services.package_selector import select_package
from cotizador.services.perf_monitor import tracker
from cotizador.services.quote_engine import compute_quote
from cotizador.services.quote_errors import QuoteEngineError
from cotizador.services.quote_financials import breakdown_stored_quote

router = APIRouter(tags=["Quotes"])
logger = logging.getLogger("cotizador-api")


# ── Pydantic Models ─────────────────────────────────────────────────────────

class SelectPackageRequest(BaseModel):
    volume: Decimal


class SelectPackageResponse(BaseModel):
    package: Optional[Package] = None


class QuoteCalculateRequest(BaseModel):
    package_id: Optional[str] = None    # None -> suggested by volume
    volume: Decimal = Decimal("0")
    selected_item_ids: List[str] = []
    plan_id: Optional[str] = None
    installment_count: int = 1          # ignored when plan_id is set
    payment_mode: Optional[PaymentMode] = None
    manual_discount_pct: Decimal = Decimal("0")
    vat_pct: Optional[Decimal] = None   # None -> company tax settings
    include_implementation: bool = True
    overrides: Dict[str, Optional[Decimal]] = {}


class QuoteCalculateResponse(BaseModel):
    status: str                          # "pending" | "complete"
    package_id: Optional[str] = None
    quote: Optional[ComputedQuote] = None


class PlanOption(BaseModel):
    plan: FinancingPlan
    badge: Optional[str] = None          # best_price_label on the best-value plan


class StoredBreakdownRequest(BaseModel):
    total_annual: Decimal
    upfront_payment: Optional[Decimal] = None
    payment_mode: PaymentMode = PaymentMode.ANNUAL
    vat_pct: Optional[Decimal] = None
    surcharge_pct: Optional[Decimal] = None


# ── Helpers ──────────────────────────────────────────────────────────────────

def _engine_error(exc: QuoteEngineError) -> HTTPException:
    kind = type(exc).__name__
    tracker.record_error(kind)
    logger.warning(f"Quote rejected: {exc}", extra={"error_kind": kind})
    return HTTPException(status_code=422, detail=str(exc))


def _build_input(req: QuoteCalculateRequest, catalog: CatalogSnapshot) -> QuoteInput:
    if req.package_id is not None:
        package = catalog.get_package(req.package_id)
        if package is None:
            raise HTTPException(status_code=404, detail=f"Package {req.package_id} not found or inactive")
    else:
        package = select_package(catalog.packages, req.volume)

    plan = None
    if req.plan_id is not None:
        plan = catalog.get_plan(req.plan_id)
        if plan is None:
            raise HTTPException(status_code=404, detail=f"Financing plan {req.plan_id} not found or inactive")

    fields: Dict[str, Any] = {
        "manual_discount_pct": req.manual_discount_pct,
        "include_implementation": req.include_implementation,
    }
    if plan is None:
        fields["installment_count"] = req.installment_count
    if req.payment_mode is not None:
        fields["payment_mode"] = req.payment_mode
    if req.vat_pct is not None:
        fields["vat_pct"] = req.vat_pct

    return QuoteInput(
        package=package,
        items=catalog.ordered_items(),
        selected_item_ids=frozenset(req.selected_item_ids),
        volume=req.volume,
        config=QuoteConfig.build(catalog.tax_settings, plan, **fields),
        overrides=req.overrides,
    )


# ── Catalog ──────────────────────────────────────────────────────────────────

@router.get("/api/catalog", response_model=CatalogSnapshot)
async def get_catalog_snapshot(catalog: CatalogSnapshot = Depends(get_catalog)):
    """Quotable catalog only: retired packages, items and plans are left out."""
    return catalog.active_view()


@router.get("/api/catalog/plans", response_model=List[PlanOption])
async def list_financing_plans(catalog: CatalogSnapshot = Depends(get_catalog)):
    best = catalog.best_value_plan()
    label = catalog.tax_settings.best_price_label
    return [
        PlanOption(plan=plan, badge=label if best is not None and plan.id == best.id else None)
        for plan in catalog.active_plans()
    ]


# ── Package suggestion ───────────────────────────────────────────────────────

@router.post("/api/quotes/select-package", response_model=SelectPackageResponse)
async def suggest_package(
    req: SelectPackageRequest,
    catalog: CatalogSnapshot = Depends(get_catalog),
):
    """Cheapest package whose DTE capacity covers the volume (largest tier on overflow)."""
    try:
        package = select_package(catalog.packages, req.volume)
    except QuoteEngineError as e:
        raise _engine_error(e)
    return SelectPackageResponse(package=package)


# ── Quote calculation ────────────────────────────────────────────────────────

@router.post("/api/quotes/calculate", response_model=QuoteCalculateResponse)
async def calculate_quote(
    req: QuoteCalculateRequest,
    catalog: CatalogSnapshot = Depends(get_catalog),
):
    """
    Recompute the quote for the current wizard state.

    A missing package is not an error: the response has status "pending" and
    no quote, and the wizard keeps showing its placeholder.
    """
    start = time.perf_counter()
    try:
        quote_input = _build_input(req, catalog)
        quote = compute_quote(quote_input)
    except QuoteEngineError as e:
        raise _engine_error(e)
    duration_ms = (time.perf_counter() - start) * 1000
    tracker.record_quote(duration_ms, pending=quote is None)
    logger.info(
        "Quote calculated",
        extra={
            "quote_status": "pending" if quote is None else "complete",
            "package_id": quote_input.package.id if quote_input.package else None,
            "duration_ms": round(duration_ms, 3),
        },
    )

    if quote is None:
        return QuoteCalculateResponse(status="pending")
    return QuoteCalculateResponse(
        status="complete",
        package_id=quote_input.package.id,
        quote=quote,
    )


# ── Stored quote breakdown ───────────────────────────────────────────────────

@router.post("/api/quotes/stored-breakdown")
async def stored_quote_breakdown(req: StoredBreakdownRequest):
    """Split a persisted tax-inclusive total into base, surcharge and IVA."""
    try:
        return breakdown_stored_quote(
            total_annual=req.total_annual,
            upfront_payment=req.upfront_payment,
            payment_mode=req.payment_mode,
            vat_pct=req.vat_pct,
            surcharge_pct=req.surcharge_pct,
        )
    except QuoteEngineError as e:
        raise _engine_error(e)
