"""API schemas for the marketplace catalog.

Pydantic models for response serialization. Wire names are camelCase to
match the storefront client.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSchema(CamelModel):
    """Public product shape."""

    id: str = Field(..., description="Product identifier")
    slug: str = Field(..., description="Human-readable identifier")
    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Short description")
    content: str = Field(default="", description="Long-form content")
    price: float = Field(..., ge=0, description="Current price")
    original_price: float = Field(..., ge=0, description="Price before discount")
    discount: int = Field(..., description="Discount percent")
    platform: str = Field(..., description="Platform identifier")
    platform_name: str | None = Field(default=None, description="Platform display name")
    category: str = Field(..., description="Category identifier")
    category_name: str | None = Field(default=None, description="Category display name")
    rating: float = Field(..., ge=0, le=5, description="Average rating")
    review_count: int = Field(..., description="Number of reviews")
    sold: int = Field(..., description="Units sold")
    image: str = Field(..., description="Image URL or placeholder")
    author: str = Field(..., description="Seller display name")
    author_id: str | None = Field(default=None, description="Seller account")
    tags: list[str] = Field(default_factory=list, description="Product tags")
    is_featured: bool = Field(..., description="Featured flag")
    is_new: bool = Field(..., description="New flag")
    created_at: datetime | None = Field(default=None, description="Creation time")
    updated_at: datetime | None = Field(default=None, description="Last update time")


class ProductListResponse(CamelModel):
    """One page of products."""

    items: list[ProductSchema] = Field(..., description="Products in sort order")
    count: int = Field(..., description="Number of products in this page")
    limit: int = Field(..., description="Requested page size")
    offset: int = Field(..., description="Requested offset")


# ============================================================================
# Facet Schemas
# ============================================================================


class CategoryFacetSchema(CamelModel):
    """Category with its live product count."""

    id: str = Field(..., description="Category identifier")
    name: str = Field(..., description="Category display name")
    platform_id: str = Field(..., description="Owning platform")
    count: int = Field(..., ge=0, description="Live product count")
    description: str | None = Field(default=None, description="Category description")


class PriceRangeSchema(CamelModel):
    """Price bounds over the live catalog."""

    min: float = Field(..., description="Lowest price")
    max: float = Field(..., description="Highest price")


class QueryErrorSchema(CamelModel):
    """A sub-query that could not be completed."""

    source: str = Field(..., description="Facet or list that failed")
    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class FacetsResponse(CamelModel):
    """Sidebar facets.

    A facet is null when it failed; the failure is listed in ``errors``.
    """

    categories: list[CategoryFacetSchema] | None = Field(default=None)
    tags: list[str] | None = Field(default=None)
    price_range: PriceRangeSchema | None = Field(default=None)
    errors: list[QueryErrorSchema] = Field(default_factory=list)


class BrowseResponse(CamelModel):
    """Product page and facets from one round-trip."""

    products: ProductListResponse | None = Field(default=None)
    products_error: QueryErrorSchema | None = Field(default=None)
    facets: FacetsResponse


# ============================================================================
# Platform Schemas
# ============================================================================


class PlatformSchema(CamelModel):
    """Platform information."""

    id: str = Field(..., description="Platform identifier")
    name: str = Field(..., description="Platform display name")
    description: str | None = Field(default=None, description="Description")


class PlatformListResponse(CamelModel):
    """List of platforms."""

    platforms: list[PlatformSchema] = Field(..., description="Platforms by name")
    total: int = Field(..., description="Number of platforms")
