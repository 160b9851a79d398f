"""Shared FastAPI dependencies."""

from fastapi import Request

from market_api.application.catalog_service import CatalogQueryService
from market_api.catalog.store import CatalogStore
from market_api.infrastructure.config import settings


def get_catalog_store(request: Request) -> CatalogStore:
    """Get the catalog store built by the application lifespan."""
    return request.app.state.catalog_store


def get_catalog_service(request: Request) -> CatalogQueryService:
    """Get a catalog service bound to the request ID."""
    return CatalogQueryService(
        get_catalog_store(request),
        timeout_seconds=settings.query_timeout_seconds,
        placeholder_image=settings.placeholder_image,
        request_id=getattr(request.state, "request_id", None),
    )
