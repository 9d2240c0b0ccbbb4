"""FastAPI dependency injection - catalog snapshot."""
from fastapi import HTTPException, Request, status

from cotizador.services.catalog_loader import CatalogSnapshot


def get_catalog(request: Request) -> CatalogSnapshot:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Catalog not loaded",
        )
    return catalog
