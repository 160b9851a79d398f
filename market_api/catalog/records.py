"""Store-agnostic catalog rows.

Every CatalogStore implementation returns these plain records, so the
predicate, sorting and projection code never depends on SQLAlchemy.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from functools import cached_property
from typing import Any

from market_api.domain.value_objects import Money


@dataclass(frozen=True)
class PlatformRecord:
    """Platform row."""

    id: str
    name: str
    description: str | None = None


@dataclass(frozen=True)
class CategoryRecord:
    """Category row, identified by ``(platform_id, id)``."""

    platform_id: str
    id: str
    name: str
    cached_count: int = 0
    description: str | None = None


@dataclass(frozen=True)
class CategoryCount:
    """Live count of non-deleted products for one category key."""

    platform_id: str
    category_id: str
    count: int


@dataclass(frozen=True)
class ProductRecord:
    """Product row as read from the store.

    Values are kept exactly as stored. ``price`` is the stored decimal
    (a string or a Decimal depending on the backend) and ``tags`` may be
    anything the column held; the projector decides how to expose them.
    """

    id: str
    slug: str
    name: str
    description: str
    price: str | Decimal | None
    original_price: str | Decimal | None
    platform_id: str
    category_id: str
    author: str
    created_at: datetime
    updated_at: datetime
    content: str = ""
    discount: int | None = 0
    rating: float | None = 0.0
    review_count: int | None = 0
    sold: int | None = 0
    image: str | None = None
    author_id: str | None = None
    is_featured: bool | None = False
    is_new: bool | None = False
    tags: Any = None
    deleted_at: datetime | None = None
    platform_name: str | None = None
    category_name: str | None = None

    @cached_property
    def money(self) -> Money:
        """Parsed price, built once per row.

        Raises:
            InvalidMoneyError: If the stored price is malformed or negative.
        """
        if self.price is None:
            return Money.zero()
        return Money.parse(self.price)

    @property
    def tag_set(self) -> frozenset[str]:
        """Tags as a set; empty when the stored value is not a list."""
        if not isinstance(self.tags, (list, tuple)):
            return frozenset()
        return frozenset(tag for tag in self.tags if isinstance(tag, str))
