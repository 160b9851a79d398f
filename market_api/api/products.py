"""Product API endpoints.

Provides the storefront product list, facets, single-product lookup and
related products. Query parameters are passed to the engine's validator
untouched so every endpoint reports malformed input the same way.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from market_api.api.converters import (
    facets_to_response,
    product_to_schema,
    products_to_response,
    query_error_to_schema,
    query_to_raw,
)
from market_api.api.dependencies import get_catalog_service
from market_api.api.schemas import (
    BrowseResponse,
    ErrorResponse,
    FacetsResponse,
    ProductListResponse,
    ProductSchema,
)
from market_api.application.catalog_service import CatalogQueryService
from market_api.catalog.filters import (
    parse_filter_spec,
    parse_related_request,
    parse_related_scope_request,
)

router = APIRouter(prefix="/products", tags=["Products"])

ERROR_RESPONSES = {
    422: {"model": ErrorResponse, "description": "Invalid filter"},
    503: {"model": ErrorResponse, "description": "Catalog query failed"},
    504: {"model": ErrorResponse, "description": "Catalog query timed out"},
}


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    status_code=status.HTTP_200_OK,
    summary="List products",
    description="Search, filter, sort and paginate live products.",
    responses=ERROR_RESPONSES,
)
async def list_products(
    request: Request,
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
) -> ProductListResponse:
    """List products matching the query parameters.

    An empty page is a normal response; store failures are returned as
    explicit errors, never as an empty list.
    """
    spec = parse_filter_spec(query_to_raw(request.query_params))
    products = await service.search(spec)
    return products_to_response(products, spec.limit, spec.offset)


@router.get(
    "/facets",
    response_model=FacetsResponse,
    summary="Get facets",
    description="Category counts and tags for a platform, plus global price bounds.",
)
async def get_facets(
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
    platform_id: Annotated[str | None, Query(alias="platformId", max_length=64)] = None,
) -> FacetsResponse:
    """Compute sidebar facets. Failed facets are listed in ``errors``."""
    facets = await service.get_facets(platform_id)
    return facets_to_response(facets)


@router.get(
    "/browse",
    response_model=BrowseResponse,
    summary="Browse catalog",
    description="Product page and facets in a single round-trip.",
    responses={422: ERROR_RESPONSES[422]},
)
async def browse(
    request: Request,
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
) -> BrowseResponse:
    """List products and compute facets concurrently."""
    raw = query_to_raw(request.query_params)
    spec = parse_filter_spec(raw)
    result = await service.browse(raw)

    return BrowseResponse(
        products=(
            products_to_response(result.products, spec.limit, spec.offset)
            if result.products is not None
            else None
        ),
        products_error=(
            query_error_to_schema("products", result.product_error)
            if result.product_error is not None
            else None
        ),
        facets=facets_to_response(result.facets),
    )


@router.get(
    "/related",
    response_model=ProductListResponse,
    summary="Related products by scope",
    description="Products in a category or on a platform, optionally excluding one product.",
    responses=ERROR_RESPONSES,
)
async def related_in_scope(
    request: Request,
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
) -> ProductListResponse:
    """List products related to a category and platform."""
    raw = query_to_raw(request.query_params)
    limit = parse_related_scope_request(raw).limit
    products = await service.related_in_scope(raw)
    return products_to_response(products, limit, 0)


@router.get(
    "/{product_ref}",
    response_model=ProductSchema,
    summary="Get product",
    description="Get a live product by id or slug.",
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def get_product(
    product_ref: str,
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
) -> ProductSchema:
    """Get a product by id, falling back to slug."""
    product = await service.get_product(product_ref)
    return product_to_schema(product)


@router.get(
    "/{product_ref}/related",
    response_model=ProductListResponse,
    summary="Related products",
    description="Products sharing a category or platform with the given product.",
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def related_products(
    product_ref: str,
    request: Request,
    service: Annotated[CatalogQueryService, Depends(get_catalog_service)],
) -> ProductListResponse:
    """List related products, excluding the product itself."""
    raw = query_to_raw(request.query_params)
    limit = parse_related_request(raw).limit
    products = await service.related_products(product_ref, raw)
    return products_to_response(products, limit, 0)
