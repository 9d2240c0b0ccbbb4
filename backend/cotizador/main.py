"""
Cotizador API
FastAPI backend for the multi-step quote builder: package suggestion, quote
calculation and stored-quote breakdown over a read-only catalog snapshot.
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cotizador import config
from cotizador.api.quote_routes import router as quote_router
from cotizador.services.catalog_loader import CatalogLoadError, load_catalog
from cotizador.services.logging_config import setup_logging
from cotizador.services.middleware import RequestTimingMiddleware, SecurityHeadersMiddleware
from cotizador.services.perf_monitor import tracker as perf_tracker

setup_logging(level=config.LOG_LEVEL, json_output=config.LOG_JSON, service=config.SERVICE_NAME)
logger = logging.getLogger(config.SERVICE_NAME)

# Record process start time for uptime calculation
_PROCESS_START = time.monotonic()


def _load_startup_catalog():
    if not config.CATALOG_PATH:
        return load_catalog()
    try:
        return load_catalog(config.CATALOG_PATH)
    except CatalogLoadError as e:
        logger.error(f"Catalog load failed, falling back to bundled catalog: {e}")
        return load_catalog()


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.catalog = _load_startup_catalog()
    yield


app = FastAPI(
    title="Cotizador API",
    version=config.API_VERSION,
    description="Quote calculation engine for e-invoicing packages",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Requested-With"],
)
app.add_middleware(SecurityHeadersMiddleware)
# Request timing + X-Request-ID must be outermost so it wraps all other middleware
app.add_middleware(RequestTimingMiddleware)

app.include_router(quote_router)


@app.get("/health")
async def health_check():
    catalog = getattr(app.state, "catalog", None)
    return {
        "status": "active",
        "version": config.API_VERSION,
        "catalog_loaded": catalog is not None,
        "catalog_source": config.CATALOG_PATH or "bundled",
    }


@app.get("/metrics")
async def metrics():
    """Quote calculation counters from the in-process PerformanceTracker."""
    snapshot = perf_tracker.get_metrics()
    return {
        "uptime_seconds": round(time.monotonic() - _PROCESS_START, 1),
        **snapshot,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("cotizador.main:app", host=config.HOST, port=config.PORT, reload=True)
