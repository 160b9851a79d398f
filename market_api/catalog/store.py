"""Catalog store interface and in-memory implementation.

The engine never talks to a database directly: every component receives a
CatalogStore at construction. ``SqlCatalogStore`` in
``market_api.catalog.repository`` backs production; ``InMemoryCatalogStore``
backs tests, fixtures and local development.
"""

import asyncio
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Awaitable, Iterable
from dataclasses import replace
from decimal import Decimal
from typing import TypeVar

import structlog

from market_api.catalog.predicates import And
from market_api.catalog.records import (
    CategoryCount,
    CategoryRecord,
    PlatformRecord,
    ProductRecord,
)
from market_api.catalog.sorting import OrderTerm, sort_records
from market_api.domain.exceptions import CatalogError, QueryFailure, QueryTimeout

logger = structlog.get_logger()

T = TypeVar("T")


class CatalogStore(ABC):
    """Read-only access to platforms, categories and products."""

    @abstractmethod
    async def fetch_products(
        self,
        predicate: And,
        ordering: tuple[OrderTerm, ...],
        limit: int,
        offset: int,
    ) -> list[ProductRecord]:
        """Fetch one page of products matching a predicate.

        Implementations are not required to deduplicate rows.
        """

    @abstractmethod
    async def fetch_tags(self, predicate: And) -> list[str]:
        """Fetch tags of every product matching a predicate (may repeat)."""

    @abstractmethod
    async def count_by_category(self, predicate: And) -> list[CategoryCount]:
        """Count matching products per ``(platform_id, category_id)``."""

    @abstractmethod
    async def fetch_categories(self, platform_id: str | None = None) -> list[CategoryRecord]:
        """Fetch category rows, optionally for one platform."""

    @abstractmethod
    async def price_bounds(self, predicate: And) -> tuple[Decimal, Decimal] | None:
        """Get ``(min, max)`` price over matching products, None if none match."""

    @abstractmethod
    async def fetch_platforms(self, limit: int = 50) -> list[PlatformRecord]:
        """Fetch platform rows ordered by name."""

    @abstractmethod
    async def ping(self) -> None:
        """Round-trip to the store; raises if it is unreachable."""


# ============================================================================
# Query Guard
# ============================================================================


async def run_query(
    operation: str,
    query: Awaitable[T],
    timeout_seconds: float,
    predicate: And | None = None,
) -> T:
    """Await a store query under a time budget.

    Store errors are logged with the predicate description (never the raw
    search text) and re-raised as QueryFailure. Cancellation by the caller
    propagates untouched so in-flight queries are abandoned cooperatively.

    Args:
        operation: Name of the sub-query, for logs and errors.
        query: Store coroutine to await.
        timeout_seconds: Time budget.
        predicate: Predicate the query runs with, for log context.

    Returns:
        The query result.

    Raises:
        QueryTimeout: If the budget is exceeded.
        QueryFailure: If the store raised.
    """
    described = predicate.describe() if predicate is not None else None
    try:
        return await asyncio.wait_for(query, timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        logger.warning(
            "Catalog query timed out",
            operation=operation,
            timeout_seconds=timeout_seconds,
            predicate=described,
        )
        raise QueryTimeout(operation, timeout_seconds) from e
    except CatalogError as e:
        if isinstance(e, QueryFailure):
            raise
        logger.error(
            "Catalog query returned malformed data",
            operation=operation,
            predicate=described,
            error=e.message,
        )
        raise QueryFailure(e, operation=operation) from e
    except Exception as e:
        logger.error(
            "Catalog query failed",
            operation=operation,
            predicate=described,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise QueryFailure(e, operation=operation) from e


# ============================================================================
# In-Memory Store
# ============================================================================


class InMemoryCatalogStore(CatalogStore):
    """Catalog store over in-memory lists.

    Rows are kept exactly as given, duplicates included, so callers see
    the same raw behaviour a database join could produce.
    """

    def __init__(
        self,
        platforms: Iterable[PlatformRecord] = (),
        categories: Iterable[CategoryRecord] = (),
        products: Iterable[ProductRecord] = (),
    ) -> None:
        self.platforms: list[PlatformRecord] = list(platforms)
        self.categories: list[CategoryRecord] = list(categories)
        self.products: list[ProductRecord] = list(products)

    def add_product(self, product: ProductRecord) -> None:
        """Add a product row."""
        self.products.append(product)

    def _matching(self, predicate: And) -> list[ProductRecord]:
        return [product for product in self.products if predicate.matches(product)]

    def _with_names(self, product: ProductRecord) -> ProductRecord:
        platform = next((p for p in self.platforms if p.id == product.platform_id), None)
        category = next(
            (
                c
                for c in self.categories
                if c.platform_id == product.platform_id and c.id == product.category_id
            ),
            None,
        )
        if platform is None and category is None:
            return product
        return replace(
            product,
            platform_name=platform.name if platform else product.platform_name,
            category_name=category.name if category else product.category_name,
        )

    async def fetch_products(
        self,
        predicate: And,
        ordering: tuple[OrderTerm, ...],
        limit: int,
        offset: int,
    ) -> list[ProductRecord]:
        rows = sort_records(self._matching(predicate), ordering)
        return [self._with_names(row) for row in rows[offset : offset + limit]]

    async def fetch_tags(self, predicate: And) -> list[str]:
        tags: list[str] = []
        for product in self._matching(predicate):
            if isinstance(product.tags, (list, tuple)):
                tags.extend(tag for tag in product.tags if isinstance(tag, str))
        return tags

    async def count_by_category(self, predicate: And) -> list[CategoryCount]:
        counts = Counter(
            (product.platform_id, product.category_id)
            for product in self._matching(predicate)
        )
        return [
            CategoryCount(platform_id=platform_id, category_id=category_id, count=count)
            for (platform_id, category_id), count in counts.items()
        ]

    async def fetch_categories(self, platform_id: str | None = None) -> list[CategoryRecord]:
        return [
            category
            for category in self.categories
            if platform_id is None or category.platform_id == platform_id
        ]

    async def price_bounds(self, predicate: And) -> tuple[Decimal, Decimal] | None:
        prices = [product.money.amount for product in self._matching(predicate)]
        if not prices:
            return None
        return min(prices), max(prices)

    async def fetch_platforms(self, limit: int = 50) -> list[PlatformRecord]:
        return sorted(self.platforms, key=lambda p: p.name)[:limit]

    async def ping(self) -> None:
        return None
