"""Map a DTE volume to the cheapest adequate package."""
from __future__ import annotations

from typing import Iterable, Optional

from cotizador.models.catalog_schema import Package
from cotizador.services.money import ZERO
from cotizador.services.pricing_engine import validate_volume


def select_package(catalog: Iterable[Package], volume) -> Optional[Package]:
    """
    Smallest dte_capacity that still covers ``volume``.

    Ties go to the lower annual price, then display order. A volume above every
    capacity selects the largest tier instead of failing. Returns None for an
    empty catalog or a zero volume (nothing entered yet).
    """
    volume = validate_volume(volume)
    candidates = sorted(
        (pkg for pkg in catalog if pkg.active),
        key=lambda pkg: (pkg.dte_capacity, pkg.annual_price, pkg.display_order),
    )
    if not candidates or volume == ZERO:
        return None

    for pkg in candidates:
        if pkg.dte_capacity >= volume:
            return pkg

    # Overflow tier
    top = max(pkg.dte_capacity for pkg in candidates)
    return min(
        (pkg for pkg in candidates if pkg.dte_capacity == top),
        key=lambda pkg: (pkg.annual_price, pkg.display_order),
    )
