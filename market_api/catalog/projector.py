"""Result projection.

Maps raw ProductRecords into the public product shape. Dedup by id is a
safety net only: the store's joins use full keys and should never fan out,
but a duplicate row must still never reach a caller.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import structlog

from market_api.catalog.records import ProductRecord
from market_api.domain.exceptions import InvalidMoneyError, QueryFailure
from market_api.domain.value_objects import Money

logger = structlog.get_logger()

DEFAULT_PLACEHOLDER_IMAGE = "/placeholder.svg"


@dataclass(frozen=True)
class ProductView:
    """Public product shape returned by the engine."""

    id: str
    slug: str
    name: str
    description: str
    content: str
    price: float
    original_price: float
    discount: int
    platform: str
    category: str
    rating: float
    review_count: int
    sold: int
    image: str
    author: str
    author_id: str | None
    tags: list[str] = field(default_factory=list)
    is_featured: bool = False
    is_new: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    platform_name: str | None = None
    category_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the storefront's camelCase dictionary."""
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "content": self.content,
            "price": self.price,
            "originalPrice": self.original_price,
            "discount": self.discount,
            "platform": self.platform,
            "platformName": self.platform_name,
            "category": self.category,
            "categoryName": self.category_name,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "sold": self.sold,
            "image": self.image,
            "author": self.author,
            "authorId": self.author_id,
            "tags": list(self.tags),
            "isFeatured": self.is_featured,
            "isNew": self.is_new,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class ResultProjector:
    """Deduplicates and projects product rows.

    Defaults are substituted only for values that are genuinely absent
    (None). A present but invalid price or rating fails the whole page
    with QueryFailure rather than being coerced.
    """

    def __init__(self, placeholder_image: str = DEFAULT_PLACEHOLDER_IMAGE) -> None:
        self.placeholder_image = placeholder_image

    def project(self, records: Iterable[ProductRecord]) -> list[ProductView]:
        """Project rows, preserving order and dropping repeated ids.

        Args:
            records: Rows in the order the store returned them.

        Returns:
            Projected products, first occurrence of each id kept.

        Raises:
            QueryFailure: If a row holds a malformed price or rating.
        """
        views: list[ProductView] = []
        seen: set[str] = set()
        duplicates = 0
        deleted = 0

        for record in records:
            if record.deleted_at is not None:
                deleted += 1
                continue
            if record.id in seen:
                duplicates += 1
                continue
            seen.add(record.id)
            views.append(self.project_one(record))

        if duplicates:
            logger.warning("Dropped duplicate product rows", duplicate_count=duplicates)
        if deleted:
            logger.warning("Dropped soft-deleted product rows", deleted_count=deleted)

        return views

    def project_one(self, record: ProductRecord) -> ProductView:
        """Project a single row.

        Raises:
            QueryFailure: If the row holds a malformed price or rating.
        """
        try:
            price = record.money
            original_price = (
                Money.parse(record.original_price)
                if record.original_price is not None
                else Money.zero()
            )
        except InvalidMoneyError as e:
            logger.error("Malformed price in product row", product_id=record.id, error=e.message)
            raise QueryFailure(e, operation="project") from e

        rating = float(record.rating) if record.rating is not None else 0.0
        if not 0 <= rating <= 5:
            logger.error("Rating out of range in product row", product_id=record.id, rating=rating)
            raise QueryFailure(f"rating {rating} out of range", operation="project")

        tags = (
            list(dict.fromkeys(tag for tag in record.tags if isinstance(tag, str)))
            if isinstance(record.tags, (list, tuple))
            else []
        )

        return ProductView(
            id=str(record.id),
            slug=record.slug,
            name=record.name,
            description=record.description,
            content=record.content,
            price=price.to_float(),
            original_price=original_price.to_float(),
            discount=record.discount if record.discount is not None else 0,
            platform=record.platform_id,
            category=record.category_id,
            rating=rating,
            review_count=record.review_count if record.review_count is not None else 0,
            sold=record.sold if record.sold is not None else 0,
            image=record.image or self.placeholder_image,
            author=record.author,
            author_id=record.author_id,
            tags=tags,
            is_featured=bool(record.is_featured) if record.is_featured is not None else False,
            is_new=bool(record.is_new) if record.is_new is not None else False,
            created_at=record.created_at,
            updated_at=record.updated_at,
            platform_name=record.platform_name,
            category_name=record.category_name,
        )
