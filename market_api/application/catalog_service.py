"""Catalog query application service.

Entry point for every read the storefront makes: validates requests,
compiles predicates and orderings, runs store queries under a time
budget, and fans product and facet queries out concurrently.
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from market_api.catalog.facets import CategoryFacet, FacetAggregator, FacetResult, PriceRange
from market_api.catalog.filters import (
    FilterSpec,
    normalize_scope,
    parse_author_request,
    parse_filter_spec,
    parse_related_request,
    parse_related_scope_request,
)
from market_api.catalog.predicates import (
    And,
    compile_author,
    compile_filter,
    compile_lookup,
    compile_related,
)
from market_api.catalog.projector import DEFAULT_PLACEHOLDER_IMAGE, ProductView, ResultProjector
from market_api.catalog.records import PlatformRecord
from market_api.catalog.sorting import (
    LOOKUP_ORDERING,
    RELATED_ORDERING,
    OrderTerm,
    ordering_for,
)
from market_api.catalog.store import CatalogStore, run_query
from market_api.domain.exceptions import ProductNotFoundError, QueryFailure

logger = structlog.get_logger()

PLATFORM_LIST_LIMIT = 50


@dataclass
class BrowseResult:
    """Product page and facets assembled from one fan-out.

    Attributes:
        products: Projected products, or None if the list query failed.
        product_error: Failure of the list query, if any.
        facets: Facets with per-facet errors.
    """

    products: list[ProductView] | None
    product_error: QueryFailure | None
    facets: FacetResult


class CatalogQueryService:
    """Read-side service for the marketplace catalog.

    Example usage:
        service = CatalogQueryService(store, timeout_seconds=5.0)
        products = await service.list_products({"platformId": "roblox", "sortBy": "rating"})
        facets = await service.get_facets(platform_id="roblox")
    """

    def __init__(
        self,
        store: CatalogStore,
        timeout_seconds: float = 5.0,
        placeholder_image: str = DEFAULT_PLACEHOLDER_IMAGE,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            store: Catalog store to read from.
            timeout_seconds: Time budget for each store query.
            placeholder_image: Image used when a product has none.
            request_id: Request ID for log correlation.
        """
        self.store = store
        self.timeout_seconds = timeout_seconds
        self.projector = ResultProjector(placeholder_image)
        self.facets = FacetAggregator(store, timeout_seconds)
        self.request_id = request_id

    # ------------------------------------------------------------------
    # Product lists
    # ------------------------------------------------------------------

    async def _fetch_page(
        self,
        operation: str,
        predicate: And,
        ordering: tuple[OrderTerm, ...],
        limit: int,
        offset: int,
    ) -> list[ProductView]:
        records = await run_query(
            operation,
            self.store.fetch_products(predicate, ordering, limit, offset),
            self.timeout_seconds,
            predicate,
        )
        return self.projector.project(records)[:limit]

    async def search(self, spec: FilterSpec) -> list[ProductView]:
        """Run a validated product list query.

        Args:
            spec: Validated filter.

        Returns:
            At most ``spec.limit`` products in sort order; empty when the
            offset is past the last match.

        Raises:
            QueryFailure: If the store query fails or times out.
        """
        predicate = compile_filter(spec)
        ordering = ordering_for(spec.sort_by)

        products = await self._fetch_page(
            "products.list", predicate, ordering, spec.limit, spec.offset
        )

        logger.info(
            "Products listed",
            predicate=predicate.describe(),
            sort_by=spec.sort_by.value,
            limit=spec.limit,
            offset=spec.offset,
            result_count=len(products),
            request_id=self.request_id,
        )
        return products

    async def list_products(self, raw: Mapping[str, Any] | None) -> list[ProductView]:
        """Validate a raw request and list matching products.

        Raises:
            ValidationError: If the request is malformed. Raised before
                any store access.
            QueryFailure: If the store query fails or times out.
        """
        return await self.search(parse_filter_spec(raw))

    async def get_product(self, product_ref: str) -> ProductView:
        """Get one live product by id, falling back to slug.

        Raises:
            ProductNotFoundError: If no live product has that id or slug.
        """
        for field in ("id", "slug"):
            products = await self._fetch_page(
                f"products.get_by_{field}",
                compile_lookup(field, product_ref),
                LOOKUP_ORDERING,
                1,
                0,
            )
            if products:
                return products[0]
        raise ProductNotFoundError(product_ref)

    async def related_products(
        self,
        product_ref: str,
        raw: Mapping[str, Any] | None = None,
    ) -> list[ProductView]:
        """Products sharing a category or platform with a product.

        The product itself is excluded.

        Raises:
            ValidationError: If ``limit`` is outside 1-20.
            ProductNotFoundError: If the product does not exist.
        """
        request = parse_related_request(raw)
        product = await self.get_product(product_ref)
        return await self._fetch_related(
            product.id, product.platform, product.category, request.limit
        )

    async def related_in_scope(self, raw: Mapping[str, Any] | None) -> list[ProductView]:
        """Products in a category or on a platform, without an anchor product.

        ``excludeId`` drops one product, typically the one being viewed;
        without it every match is eligible.

        Raises:
            ValidationError: If ``platformId`` or ``categoryId`` is missing,
                or ``limit`` is outside 1-20.
        """
        request = parse_related_scope_request(raw)
        return await self._fetch_related(
            request.exclude_id or None,
            request.platform_id,
            request.category_id,
            request.limit,
        )

    async def _fetch_related(
        self,
        exclude_id: str | None,
        platform_id: str,
        category_id: str,
        limit: int,
    ) -> list[ProductView]:
        products = await self._fetch_page(
            "products.related",
            compile_related(exclude_id, platform_id, category_id),
            RELATED_ORDERING,
            limit,
            0,
        )
        logger.info(
            "Related products listed",
            platform_id=platform_id,
            category_id=category_id,
            excluded=exclude_id is not None,
            result_count=len(products),
            request_id=self.request_id,
        )
        return products

    async def author_products(
        self,
        author_id: str,
        raw: Mapping[str, Any] | None = None,
    ) -> list[ProductView]:
        """One seller's live listings.

        Raises:
            ValidationError: If the sort key or pagination is invalid.
        """
        request = parse_author_request(raw)
        products = await self._fetch_page(
            "products.by_author",
            compile_author(author_id),
            ordering_for(request.sort_by),
            request.limit,
            request.offset,
        )
        logger.info(
            "Author products listed",
            author_id=author_id,
            result_count=len(products),
            request_id=self.request_id,
        )
        return products

    # ------------------------------------------------------------------
    # Facets
    # ------------------------------------------------------------------

    async def get_facets(self, platform_id: str | None = None) -> FacetResult:
        """Compute every facet for a platform scope ("all" means none)."""
        return await self.facets.compute(normalize_scope(platform_id))

    async def categories(self, platform_id: str | None = None) -> list[CategoryFacet]:
        """Category facet only."""
        return await self.facets.categories(normalize_scope(platform_id))

    async def tags(self, platform_id: str | None = None) -> list[str]:
        """Tag facet only."""
        return await self.facets.tags(normalize_scope(platform_id))

    async def price_range(self) -> PriceRange:
        """Price-bound facet only."""
        return await self.facets.price_range()

    async def list_platforms(self) -> list[PlatformRecord]:
        """Platforms ordered by name."""
        return await run_query(
            "platforms.list",
            self.store.fetch_platforms(PLATFORM_LIST_LIMIT),
            self.timeout_seconds,
        )

    async def ping(self) -> None:
        """Check the store is reachable."""
        await run_query("ping", self.store.ping(), self.timeout_seconds)

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    async def browse(self, raw: Mapping[str, Any] | None) -> BrowseResult:
        """List products and compute facets concurrently.

        Validation happens first and fails fast. After that, a failure of
        the product list is reported in the result rather than raised, so
        the caller can still render the facets that succeeded.

        Raises:
            ValidationError: If the request is malformed.
        """
        spec = parse_filter_spec(raw)

        products, facets = await asyncio.gather(
            self.search(spec),
            self.facets.compute(spec.platform_id),
            return_exceptions=True,
        )

        if isinstance(facets, BaseException):
            raise facets

        if isinstance(products, QueryFailure):
            return BrowseResult(products=None, product_error=products, facets=facets)
        if isinstance(products, BaseException):
            raise products

        return BrowseResult(products=products, product_error=None, facets=facets)
