"""Converters from engine results to API schemas."""

from starlette.datastructures import QueryParams

from market_api.api.schemas import (
    CategoryFacetSchema,
    FacetsResponse,
    PlatformListResponse,
    PlatformSchema,
    PriceRangeSchema,
    ProductListResponse,
    ProductSchema,
    QueryErrorSchema,
)
from market_api.catalog.facets import CategoryFacet, FacetResult, PriceRange
from market_api.catalog.projector import ProductView
from market_api.catalog.records import PlatformRecord
from market_api.domain.exceptions import QueryFailure, QueryTimeout

# Query parameters that may repeat (?tags=a&tags=b).
LIST_PARAMS = frozenset({"tags"})


def query_to_raw(params: QueryParams) -> dict[str, object]:
    """Collapse query parameters into a raw request mapping."""
    raw: dict[str, object] = {}
    for key in params.keys():
        raw[key] = params.getlist(key) if key in LIST_PARAMS else params.get(key)
    return raw


def error_code_for(error: QueryFailure) -> str:
    """Machine-readable code for a query failure."""
    return "QUERY_TIMEOUT" if isinstance(error, QueryTimeout) else "QUERY_FAILURE"


def product_to_schema(product: ProductView) -> ProductSchema:
    """Convert a projected product to its response schema."""
    return ProductSchema(
        id=product.id,
        slug=product.slug,
        name=product.name,
        description=product.description,
        content=product.content,
        price=product.price,
        original_price=product.original_price,
        discount=product.discount,
        platform=product.platform,
        platform_name=product.platform_name,
        category=product.category,
        category_name=product.category_name,
        rating=product.rating,
        review_count=product.review_count,
        sold=product.sold,
        image=product.image,
        author=product.author,
        author_id=product.author_id,
        tags=list(product.tags),
        is_featured=product.is_featured,
        is_new=product.is_new,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def products_to_response(
    products: list[ProductView], limit: int, offset: int
) -> ProductListResponse:
    """Convert a product page to its response schema."""
    return ProductListResponse(
        items=[product_to_schema(p) for p in products],
        count=len(products),
        limit=limit,
        offset=offset,
    )


def category_to_schema(category: CategoryFacet) -> CategoryFacetSchema:
    """Convert a category facet entry to its response schema."""
    return CategoryFacetSchema(
        id=category.id,
        name=category.name,
        platform_id=category.platform_id,
        count=category.count,
        description=category.description,
    )


def price_range_to_schema(price_range: PriceRange) -> PriceRangeSchema:
    """Convert price bounds to their response schema."""
    return PriceRangeSchema(min=float(price_range.min), max=float(price_range.max))


def query_error_to_schema(source: str, error: QueryFailure) -> QueryErrorSchema:
    """Convert a sub-query failure to its response schema."""
    return QueryErrorSchema(source=source, error_code=error_code_for(error), message=error.message)


def facets_to_response(facets: FacetResult) -> FacetsResponse:
    """Convert facets to their response schema."""
    return FacetsResponse(
        categories=(
            [category_to_schema(c) for c in facets.categories]
            if facets.categories is not None
            else None
        ),
        tags=facets.tags,
        price_range=(
            price_range_to_schema(facets.price_range)
            if facets.price_range is not None
            else None
        ),
        errors=[
            query_error_to_schema(name, error)
            for name, error in sorted(facets.errors.items())
        ],
    )


def platforms_to_response(platforms: list[PlatformRecord]) -> PlatformListResponse:
    """Convert platform records to their response schema."""
    return PlatformListResponse(
        platforms=[
            PlatformSchema(id=p.id, name=p.name, description=p.description)
            for p in platforms
        ],
        total=len(platforms),
    )
