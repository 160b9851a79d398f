"""Shared catalog fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from market_api.catalog.records import CategoryRecord, PlatformRecord, ProductRecord
from market_api.catalog.store import InMemoryCatalogStore

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

ProductFactory = Callable[..., ProductRecord]


@pytest.fixture
def product_factory() -> ProductFactory:
    """Build product rows with sensible defaults."""

    def build(product_id: str, **overrides: Any) -> ProductRecord:
        values: dict[str, Any] = {
            "id": product_id,
            "slug": f"slug-{product_id}",
            "name": f"Product {product_id}",
            "description": "A digital item",
            "price": "10.00",
            "original_price": "10.00",
            "platform_id": "roblox",
            "category_id": "scripts",
            "author": "Alice",
            "author_id": "u-alice",
            "created_at": BASE_TIME,
            "updated_at": BASE_TIME,
            "tags": [],
        }
        values.update(overrides)
        return ProductRecord(**values)

    return build


@pytest.fixture
def platforms() -> list[PlatformRecord]:
    """Sample platforms."""
    return [
        PlatformRecord(id="roblox", name="Roblox", description="Roblox items"),
        PlatformRecord(id="steam", name="Steam", description="Steam keys"),
    ]


@pytest.fixture
def categories() -> list[CategoryRecord]:
    """Sample categories, including the "all" pseudo-row and an empty one."""
    return [
        CategoryRecord(platform_id="roblox", id="scripts", name="Scripts"),
        CategoryRecord(platform_id="roblox", id="accounts", name="Accounts"),
        CategoryRecord(platform_id="steam", id="all", name="All Steam"),
        CategoryRecord(
            platform_id="steam", id="rpg", name="RPG", description="Role-playing games"
        ),
        CategoryRecord(platform_id="steam", id="strategy", name="Strategy"),
        CategoryRecord(platform_id="steam", id="empty", name="Empty"),
    ]


@pytest.fixture
def products(product_factory: ProductFactory) -> list[ProductRecord]:
    """Sample products: four live, one soft-deleted."""
    return [
        product_factory(
            "p-001",
            name="Roblox Script - Auto Farm",
            price="19.99",
            original_price="29.99",
            discount=33,
            rating=4.5,
            review_count=10,
            sold=100,
            tags=["script", "auto"],
            is_featured=True,
            image="/img/p-001.png",
        ),
        product_factory(
            "p-002",
            name="Roblox Account Level 100",
            category_id="accounts",
            price="49.99",
            original_price="49.99",
            rating=4.8,
            review_count=3,
            sold=5,
            tags=["account"],
            author="Bob",
            author_id="u-bob",
            created_at=BASE_TIME + timedelta(days=31),
        ),
        product_factory(
            "p-003",
            name="Elden Key",
            platform_id="steam",
            category_id="rpg",
            price="0",
            original_price="0",
            rating=4.0,
            review_count=50,
            sold=10,
            tags=["rpg", "puzzle"],
            created_at=BASE_TIME + timedelta(days=60),
        ),
        product_factory(
            "p-004",
            name="Strategy Pack",
            description="automated farming is fun",
            platform_id="steam",
            category_id="strategy",
            price="9.99",
            original_price="9.99",
            rating=3.5,
            review_count=7,
            sold=300,
            tags=["strategy"],
            is_featured=True,
            author="Carol",
            author_id="u-carol",
            created_at=BASE_TIME + timedelta(days=90),
        ),
        product_factory(
            "p-005",
            name="Retired RPG",
            platform_id="steam",
            category_id="rpg",
            price="5.00",
            tags=["retired"],
            deleted_at=BASE_TIME + timedelta(days=100),
        ),
    ]


@pytest.fixture
def store(
    platforms: list[PlatformRecord],
    categories: list[CategoryRecord],
    products: list[ProductRecord],
) -> InMemoryCatalogStore:
    """In-memory store seeded with the sample catalog."""
    return InMemoryCatalogStore(platforms, categories, products)
