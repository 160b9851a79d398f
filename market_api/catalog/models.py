"""SQLAlchemy models for the marketplace catalog.

Defines Platform, Category and Product tables. The engine only reads these
tables; rows are written by catalog-management collaborators.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    PrimaryKeyConstraint,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from market_api.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Platform(Base):
    """Platform a product targets (a game, or "websites").

    Attributes:
        id: Platform slug (e.g. "minecraft").
        name: Display name, unique.
        description: Optional description.
    """

    __tablename__ = "platforms"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Platform(id={self.id}, name={self.name})>"


class Category(Base):
    """Category scoped to a platform.

    The same category id may exist independently under several platforms,
    so identity is the composite ``(platform_id, id)``.

    Attributes:
        platform_id: Owning platform.
        id: Category slug within the platform.
        name: Display name, unique per platform.
        cached_count: Denormalized product count. Possibly stale; never
            used for facet counts.
        description: Optional description.
    """

    __tablename__ = "categories"

    platform_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("platforms.id", ondelete="CASCADE"),
        nullable=False,
    )
    id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    cached_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        PrimaryKeyConstraint("platform_id", "id", name="categories_pk"),
        UniqueConstraint("platform_id", "name", name="categories_platform_name_uidx"),
        CheckConstraint("cached_count >= 0", name="categories_cached_count_check"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(platform_id={self.platform_id}, id={self.id}, name={self.name})>"


class Product(Base):
    """Product listed in the catalog.

    Attributes:
        id: Opaque unique identifier.
        slug: Human-readable identifier used in product URLs.
        price: Fixed-point price with two fraction digits.
        original_price: Price before discount.
        discount: Informational discount percent (0-100).
        platform_id: Platform the product targets.
        category_id: Category within ``platform_id``.
        tags: Unordered set of free-form tags.
        deleted_at: Soft-delete marker. Non-null rows are invisible to
            every catalog query.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    slug: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    original_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    platform_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("platforms.id", ondelete="RESTRICT"),
        nullable=False,
    )
    category_id: Mapped[str] = mapped_column(String(64), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    author: Mapped[str] = mapped_column(String(128), nullable=False)
    author_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_new: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tags: Mapped[list[str] | None] = mapped_column(ARRAY(String(64)), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="products_price_check"),
        CheckConstraint("discount >= 0 AND discount <= 100", name="products_discount_check"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="products_rating_check"),
        Index("products_slug_idx", "slug"),
        Index("products_platform_idx", "platform_id"),
        Index("products_category_idx", "category_id"),
        Index("products_price_idx", "price"),
        Index("products_discount_idx", "discount"),
        Index("products_featured_idx", "is_featured"),
        Index("products_new_idx", "is_new"),
        Index("products_rating_idx", "rating"),
        Index("products_review_count_idx", "review_count"),
        Index("products_sold_idx", "sold"),
        Index("products_tags_idx", "tags", postgresql_using="gin"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, slug={self.slug}, name={self.name[:30]}...)>"
