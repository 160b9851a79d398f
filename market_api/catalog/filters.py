"""Filter request validation.

Turns a raw buyer request (query-string values or a JSON object) into an
immutable, fully-typed FilterSpec. Everything downstream of this module
can assume every field is in range and every "no constraint" is None.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from market_api.domain.exceptions import ValidationError

DEFAULT_LIMIT = 50
MAX_LIMIT = 100
MAX_SEARCH_LENGTH = 200
MAX_ID_LENGTH = 64

RELATED_DEFAULT_LIMIT = 8
RELATED_MAX_LIMIT = 20

# UI sentinel for "every platform" / "every category"; never a stored id.
ALL = "all"


class SortKey(str, Enum):
    """Supported product list orderings."""

    FEATURED = "featured"
    NEWEST = "newest"
    OLDEST = "oldest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    RATING = "rating"
    POPULAR = "popular"


AUTHOR_SORT_KEYS = frozenset(
    {
        SortKey.NEWEST,
        SortKey.OLDEST,
        SortKey.PRICE_LOW,
        SortKey.PRICE_HIGH,
        SortKey.RATING,
    }
)


@dataclass(frozen=True)
class FilterSpec:
    """Validated product list request.

    Attributes:
        search: Case-insensitive substring to look for, or None.
        platform_id: Exact platform to restrict to, or None for all.
        category_id: Exact category to restrict to, or None for all.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        show_discounted: Only products with a non-zero discount.
        tags: Requested tags; a product matches if it has any of them.
        sort_by: Ordering to apply.
        limit: Page size (1-100).
        offset: Number of rows to skip.
    """

    search: str | None = None
    platform_id: str | None = None
    category_id: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    show_discounted: bool = False
    tags: tuple[str, ...] = ()
    sort_by: SortKey = SortKey.FEATURED
    limit: int = DEFAULT_LIMIT
    offset: int = 0


# ============================================================================
# Raw Request Models
# ============================================================================


class ProductFilterRequest(BaseModel):
    """Raw product list request as sent by the storefront."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    search: str | None = Field(default=None, max_length=MAX_SEARCH_LENGTH)
    platform_id: str | None = Field(default=None, alias="platformId", max_length=MAX_ID_LENGTH)
    category_id: str | None = Field(default=None, alias="categoryId", max_length=MAX_ID_LENGTH)
    min_price: Decimal | None = Field(default=None, alias="minPrice", ge=0)
    max_price: Decimal | None = Field(default=None, alias="maxPrice", ge=0)
    show_discounted: bool | None = Field(default=None, alias="showDiscounted")
    tags: list[str] | None = None
    sort_by: SortKey = Field(default=SortKey.FEATURED, alias="sortBy")
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    offset: int = Field(default=0, ge=0)


class AuthorProductsRequest(BaseModel):
    """Raw request for one seller's listings."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    sort_by: SortKey = Field(default=SortKey.NEWEST, alias="sortBy")
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    offset: int = Field(default=0, ge=0)


class RelatedProductsRequest(BaseModel):
    """Raw request for products related to a given one."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    limit: int = Field(default=RELATED_DEFAULT_LIMIT, ge=1, le=RELATED_MAX_LIMIT)


class RelatedScopeRequest(RelatedProductsRequest):
    """Raw request for products related to a category and platform.

    Used when the caller has no product to anchor on, or already knows
    the anchor's category and platform.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", str_strip_whitespace=True)

    platform_id: str = Field(alias="platformId", min_length=1, max_length=MAX_ID_LENGTH)
    category_id: str = Field(alias="categoryId", min_length=1, max_length=MAX_ID_LENGTH)
    exclude_id: str | None = Field(default=None, alias="excludeId", max_length=MAX_ID_LENGTH)


# ============================================================================
# Normalization
# ============================================================================


def normalize_scope(value: str | None) -> str | None:
    """Map the "all" sentinel and blank ids to None."""
    if value is None:
        return None
    value = value.strip()
    if not value or value == ALL:
        return None
    return value


def _normalize_search(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _normalize_tags(values: list[str] | None) -> tuple[str, ...]:
    if not values:
        return ()
    seen: dict[str, None] = {}
    for tag in values:
        tag = tag.strip()
        if tag:
            seen.setdefault(tag, None)
    return tuple(seen)


def _raise_from_pydantic(error: PydanticValidationError) -> None:
    """Translate pydantic errors into a catalog ValidationError."""
    errors = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "request"
        errors.append({"field": field, "reason": item["msg"]})
    first = errors[0]
    raise ValidationError(first["field"], first["reason"], errors=errors) from error


def _validate(model: type[BaseModel], raw: Mapping[str, Any] | None) -> Any:
    if raw is not None and not isinstance(raw, Mapping):
        raise ValidationError("request", "must be an object")
    try:
        return model.model_validate(dict(raw or {}))
    except PydanticValidationError as e:
        _raise_from_pydantic(e)


def parse_filter_spec(raw: Mapping[str, Any] | None) -> FilterSpec:
    """Validate and normalize a raw product list request.

    Args:
        raw: Request fields keyed by their wire names (``platformId``,
            ``sortBy``...) or by their snake_case names.

    Returns:
        Immutable FilterSpec.

    Raises:
        ValidationError: If any field is outside its declared type or range,
            or if ``minPrice`` exceeds ``maxPrice``.
    """
    request: ProductFilterRequest = _validate(ProductFilterRequest, raw)

    if (
        request.min_price is not None
        and request.max_price is not None
        and request.min_price > request.max_price
    ):
        raise ValidationError("minPrice", "must be less than or equal to maxPrice")

    return FilterSpec(
        search=_normalize_search(request.search),
        platform_id=normalize_scope(request.platform_id),
        category_id=normalize_scope(request.category_id),
        min_price=request.min_price,
        max_price=request.max_price,
        show_discounted=bool(request.show_discounted),
        tags=_normalize_tags(request.tags),
        sort_by=request.sort_by,
        limit=request.limit,
        offset=request.offset,
    )


def parse_author_request(raw: Mapping[str, Any] | None) -> AuthorProductsRequest:
    """Validate a seller listing request.

    Raises:
        ValidationError: If a field is invalid or the sort key is not one
            of the seller-page orderings.
    """
    request: AuthorProductsRequest = _validate(AuthorProductsRequest, raw)
    if request.sort_by not in AUTHOR_SORT_KEYS:
        allowed = ", ".join(sorted(key.value for key in AUTHOR_SORT_KEYS))
        raise ValidationError("sortBy", f"must be one of: {allowed}")
    return request


def parse_related_request(raw: Mapping[str, Any] | None) -> RelatedProductsRequest:
    """Validate a related products request."""
    return _validate(RelatedProductsRequest, raw)


def parse_related_scope_request(raw: Mapping[str, Any] | None) -> RelatedScopeRequest:
    """Validate a category-and-platform related products request.

    Raises:
        ValidationError: If ``platformId`` or ``categoryId`` is missing,
            or ``limit`` is outside 1-20.
    """
    return _validate(RelatedScopeRequest, raw)
