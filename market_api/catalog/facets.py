"""Facet aggregation.

Computes the sidebar facets: category counts, tag vocabulary and price
bounds. Category and tag facets are scoped by platform only, so picking a
category or typing a search term never shrinks them. The price bound
always covers the whole live catalog.

The three facets run concurrently and fail independently; a failed facet
is reported in ``FacetResult.errors`` while the others still return.
"""

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal

import structlog

from market_api.catalog.filters import ALL
from market_api.catalog.predicates import compile_catalog_scope, compile_platform_scope
from market_api.catalog.store import CatalogStore, run_query
from market_api.domain.exceptions import QueryFailure

logger = structlog.get_logger()

DEFAULT_PRICE_RANGE = (Decimal("0"), Decimal("100"))


@dataclass(frozen=True)
class CategoryFacet:
    """One category entry with its live product count."""

    id: str
    name: str
    platform_id: str
    count: int
    description: str | None = None


@dataclass(frozen=True)
class PriceRange:
    """Price bounds over the live catalog."""

    min: Decimal
    max: Decimal


@dataclass
class FacetResult:
    """Facets for one request.

    A facet is None exactly when its computation failed; the failure is
    then recorded under the facet's name in ``errors``.
    """

    categories: list[CategoryFacet] | None = None
    tags: list[str] | None = None
    price_range: PriceRange | None = None
    errors: dict[str, QueryFailure] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether every facet was computed."""
        return not self.errors


class FacetAggregator:
    """Computes catalog facets against a store."""

    def __init__(self, store: CatalogStore, timeout_seconds: float) -> None:
        """Initialize aggregator.

        Args:
            store: Catalog store to read from.
            timeout_seconds: Time budget for each store query.
        """
        self.store = store
        self.timeout_seconds = timeout_seconds

    async def categories(self, platform_id: str | None = None) -> list[CategoryFacet]:
        """Category facet with live counts.

        Counts only non-deleted products whose ``(platform_id, category_id)``
        names an existing category; categories with no products report 0.
        """
        predicate = compile_platform_scope(platform_id)
        categories, counts = await asyncio.gather(
            run_query(
                "facet.categories",
                self.store.fetch_categories(platform_id),
                self.timeout_seconds,
            ),
            run_query(
                "facet.category_counts",
                self.store.count_by_category(predicate),
                self.timeout_seconds,
                predicate,
            ),
            return_exceptions=True,
        )
        # Both queries have settled here; report the first failure.
        for result in (categories, counts):
            if isinstance(result, BaseException):
                raise result

        by_key = {(c.platform_id, c.category_id): c.count for c in counts}
        facets = [
            CategoryFacet(
                id=category.id,
                name=category.name,
                platform_id=category.platform_id,
                count=by_key.get((category.platform_id, category.id), 0),
                description=category.description,
            )
            for category in categories
            if category.id != ALL
        ]
        facets.sort(key=lambda facet: (facet.platform_id, facet.name))
        return facets

    async def tags(self, platform_id: str | None = None) -> list[str]:
        """Sorted, deduplicated tags of live products in scope."""
        predicate = compile_platform_scope(platform_id)
        tags = await run_query(
            "facet.tags",
            self.store.fetch_tags(predicate),
            self.timeout_seconds,
            predicate,
        )
        return sorted(set(tags))

    async def price_range(self) -> PriceRange:
        """Min/max price over the whole live catalog, (0, 100) when empty."""
        predicate = compile_catalog_scope()
        bounds = await run_query(
            "facet.price_range",
            self.store.price_bounds(predicate),
            self.timeout_seconds,
            predicate,
        )
        low, high = bounds if bounds is not None else DEFAULT_PRICE_RANGE
        return PriceRange(min=low, max=high)

    async def compute(self, platform_id: str | None = None) -> FacetResult:
        """Compute every facet concurrently.

        Args:
            platform_id: Platform scope for category and tag facets, None
                for every platform.

        Returns:
            FacetResult with per-facet values or errors.
        """
        names = ("categories", "tags", "price_range")
        results = await asyncio.gather(
            self.categories(platform_id),
            self.tags(platform_id),
            self.price_range(),
            return_exceptions=True,
        )

        facets = FacetResult()
        for name, result in zip(names, results):
            if isinstance(result, QueryFailure):
                facets.errors[name] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                setattr(facets, name, result)

        if facets.errors:
            logger.warning(
                "Facet computation incomplete",
                failed=sorted(facets.errors),
                platform_id=platform_id,
            )
        return facets
