"""
Service configuration - single source of truth for defaults and env-driven
settings. Import from here rather than reading os.environ in services.
"""
from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

# No-op when there is no .env file
load_dotenv()

# ── Service ───────────────────────────────────────────────────────────────────
SERVICE_NAME: str = "cotizador-api"
API_VERSION: str = "1.0.0"

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON: bool = os.getenv("LOG_FORMAT", "json").lower() != "text"

# ── Catalog ───────────────────────────────────────────────────────────────────
# Empty CATALOG_PATH -> bundled default catalog
DEFAULT_CATALOG_PATH: Path = Path(__file__).parent / "data" / "default_catalog.json"
CATALOG_PATH: str = os.getenv("CATALOG_PATH", "")

# ── Financial defaults ────────────────────────────────────────────────────────
# Used only when a stored quote carries no value at all (None), never for 0.
DEFAULT_VAT_PCT: Decimal = Decimal(os.getenv("DEFAULT_VAT_PCT", "13"))
DEFAULT_SURCHARGE_PCT: Decimal = Decimal(os.getenv("DEFAULT_SURCHARGE_PCT", "20"))

# ── CORS ──────────────────────────────────────────────────────────────────────
_cors_default = "http://localhost:3000,http://localhost:5173"
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", _cors_default).split(",") if o.strip()
]

# ── Server ────────────────────────────────────────────────────────────────────
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
