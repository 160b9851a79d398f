"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from market_api.api.dependencies import get_catalog_service
from market_api.application.catalog_service import CatalogQueryService
from market_api.domain.exceptions import QueryFailure
from market_api.infrastructure.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="market-catalog-api",
        version=settings.api_version,
    )


@router.get("/ready", response_model=None)
async def readiness_check(
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
) -> dict[str, str] | JSONResponse:
    """Check the catalog store is reachable.

    Returns:
        Readiness status, or 503 if the store cannot be queried.
    """
    try:
        await service.ping()
    except QueryFailure as e:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "reason": e.message},
        )
    return {"status": "ready"}
