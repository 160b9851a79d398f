"""Application layer module.

Contains application services (use cases) that orchestrate
catalog logic and infrastructure.
"""

from market_api.application.catalog_service import BrowseResult, CatalogQueryService

__all__ = [
    "BrowseResult",
    "CatalogQueryService",
]
