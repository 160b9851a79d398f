"""Catalog navigation endpoints.

Platforms, categories, tags and price bounds for the storefront sidebar,
plus a seller's listing page.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from market_api.api.converters import (
    category_to_schema,
    platforms_to_response,
    price_range_to_schema,
    products_to_response,
    query_to_raw,
)
from market_api.api.dependencies import get_catalog_service
from market_api.api.schemas import (
    CategoryFacetSchema,
    PlatformListResponse,
    PriceRangeSchema,
    ProductListResponse,
)
from market_api.application.catalog_service import CatalogQueryService
from market_api.catalog.filters import MAX_ID_LENGTH, parse_author_request

router = APIRouter(tags=["Catalog"])

PlatformScope = Annotated[str | None, Query(alias="platformId", max_length=MAX_ID_LENGTH)]


@router.get(
    "/platforms",
    response_model=PlatformListResponse,
    summary="List platforms",
)
async def list_platforms(
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
) -> PlatformListResponse:
    """List platforms ordered by name."""
    platforms = await service.list_platforms()
    return platforms_to_response(platforms)


@router.get(
    "/categories",
    response_model=list[CategoryFacetSchema],
    summary="List categories",
    description="Categories with live product counts, optionally for one platform.",
)
async def list_categories(
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
    platform_id: PlatformScope = None,
) -> list[CategoryFacetSchema]:
    categories = await service.categories(platform_id)
    return [category_to_schema(c) for c in categories]


@router.get("/tags", response_model=list[str], summary="List tags")
async def list_tags(
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
    platform_id: PlatformScope = None,
) -> list[str]:
    """Distinct tags of live products, sorted."""
    return await service.tags(platform_id)


@router.get("/price-range", response_model=PriceRangeSchema, summary="Price bounds")
async def get_price_range(
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
) -> PriceRangeSchema:
    """Lowest and highest live price across every platform."""
    price_range = await service.price_range()
    return price_range_to_schema(price_range)


@router.get(
    "/authors/{author_id}/products",
    response_model=ProductListResponse,
    summary="Seller listings",
)
async def author_products(
    author_id: str,
    request: Request,
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
) -> ProductListResponse:
    """List one seller's live products."""
    raw = query_to_raw(request.query_params)
    page = parse_author_request(raw)
    products = await service.author_products(author_id, raw)
    return products_to_response(products, page.limit, page.offset)
