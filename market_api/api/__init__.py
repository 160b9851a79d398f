"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from market_api.api.catalog import router as catalog_router
from market_api.api.health import router as health_router
from market_api.api.products import router as products_router

__all__ = [
    "catalog_router",
    "health_router",
    "products_router",
]
