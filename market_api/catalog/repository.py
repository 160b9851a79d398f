"""SQLAlchemy catalog store.

Renders compiled predicates and orderings as SQLAlchemy expressions and
runs them against PostgreSQL. Each call opens its own session so that
the product list and the facet queries can run concurrently.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, Select, and_, func, not_, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from market_api.catalog.filters import ALL
from market_api.catalog.models import Category, Platform, Product
from market_api.catalog.predicates import (
    And,
    BooleanFlag,
    Clause,
    Equals,
    IsNull,
    Not,
    NumericRange,
    Or,
    TagIntersect,
    TextSearch,
)
from market_api.catalog.records import (
    CategoryCount,
    CategoryRecord,
    PlatformRecord,
    ProductRecord,
)
from market_api.catalog.sorting import OrderTerm, SortDirection
from market_api.catalog.store import CatalogStore

_PRODUCT_COLUMNS = {
    "id": Product.id,
    "slug": Product.slug,
    "name": Product.name,
    "description": Product.description,
    "author": Product.author,
    "author_id": Product.author_id,
    "platform_id": Product.platform_id,
    "category_id": Product.category_id,
    "price": Product.price,
    "original_price": Product.original_price,
    "discount": Product.discount,
    "rating": Product.rating,
    "review_count": Product.review_count,
    "sold": Product.sold,
    "is_featured": Product.is_featured,
    "is_new": Product.is_new,
    "tags": Product.tags,
    "created_at": Product.created_at,
    "updated_at": Product.updated_at,
    "deleted_at": Product.deleted_at,
}


def _column(field: str) -> Any:
    try:
        return _PRODUCT_COLUMNS[field]
    except KeyError:
        raise ValueError(f"Unknown product field: {field}") from None


# ============================================================================
# Predicate / Ordering Rendering
# ============================================================================


def to_sql(clause: Clause) -> ColumnElement[bool]:
    """Render a predicate clause as a SQLAlchemy boolean expression.

    Args:
        clause: Compiled clause.

    Returns:
        SQLAlchemy expression.
    """
    if isinstance(clause, And):
        if not clause.clauses:
            return true()
        return and_(*(to_sql(c) for c in clause.clauses))

    if isinstance(clause, Or):
        return or_(*(to_sql(c) for c in clause.clauses))

    if isinstance(clause, Not):
        return not_(to_sql(clause.clause))

    if isinstance(clause, IsNull):
        return _column(clause.field).is_(None)

    if isinstance(clause, Equals):
        return _column(clause.field) == clause.value

    if isinstance(clause, TextSearch):
        needle = clause.query.lower()
        return or_(
            *(
                func.lower(_column(field)).contains(needle, autoescape=True)
                for field in clause.fields
            )
        )

    if isinstance(clause, NumericRange):
        column = _column(clause.field)
        bounds = []
        if clause.minimum is not None:
            bounds.append(column >= clause.minimum)
        if clause.maximum is not None:
            bounds.append(column <= clause.maximum)
        return and_(*bounds) if bounds else true()

    if isinstance(clause, BooleanFlag):
        column = _column(clause.field)
        if isinstance(column.expression.type, Boolean):
            return column.is_(True)
        return column > 0

    if isinstance(clause, TagIntersect):
        return Product.tags.overlap(list(clause.tags))

    raise TypeError(f"Unsupported clause: {type(clause).__name__}")


def order_by_terms(ordering: tuple[OrderTerm, ...]) -> list[Any]:
    """Render ordering terms as ``ORDER BY`` expressions."""
    return [
        _column(term.field).desc()
        if term.direction is SortDirection.DESC
        else _column(term.field).asc()
        for term in ordering
    ]


def build_product_query(
    predicate: And,
    ordering: tuple[OrderTerm, ...],
    limit: int,
    offset: int,
) -> Select[Any]:
    """Build the product page query.

    Platform and category names come from outer joins; the category join
    uses the composite ``(platform_id, id)`` key so a category id shared by
    two platforms never fans out rows.
    """
    return (
        select(
            Product,
            Platform.name.label("platform_name"),
            Category.name.label("category_name"),
        )
        .outerjoin(Platform, Product.platform_id == Platform.id)
        .outerjoin(
            Category,
            and_(
                Category.platform_id == Product.platform_id,
                Category.id == Product.category_id,
            ),
        )
        .where(to_sql(predicate))
        .order_by(*order_by_terms(ordering))
        .limit(limit)
        .offset(offset)
    )


def build_category_count_query(predicate: And) -> Select[Any]:
    """Build the per-category live count query."""
    return (
        select(
            Product.platform_id,
            Product.category_id,
            func.count(Product.id).label("product_count"),
        )
        .where(to_sql(predicate))
        .group_by(Product.platform_id, Product.category_id)
    )


def build_tag_query(predicate: And) -> Select[Any]:
    """Build the distinct tag query."""
    return select(func.unnest(Product.tags).label("tag")).where(to_sql(predicate)).distinct()


def build_price_bounds_query(predicate: And) -> Select[Any]:
    """Build the min/max price query."""
    return select(
        func.min(Product.price).label("min_price"),
        func.max(Product.price).label("max_price"),
    ).where(to_sql(predicate))


def _to_record(product: Product, platform_name: str | None, category_name: str | None) -> ProductRecord:
    return ProductRecord(
        id=str(product.id),
        slug=product.slug,
        name=product.name,
        description=product.description,
        content=product.content,
        price=product.price,
        original_price=product.original_price,
        discount=product.discount,
        platform_id=product.platform_id,
        category_id=product.category_id,
        rating=product.rating,
        review_count=product.review_count,
        sold=product.sold,
        image=product.image,
        author=product.author,
        author_id=product.author_id,
        is_featured=product.is_featured,
        is_new=product.is_new,
        tags=product.tags,
        created_at=product.created_at,
        updated_at=product.updated_at,
        deleted_at=product.deleted_at,
        platform_name=platform_name,
        category_name=category_name,
    )


# ============================================================================
# Store
# ============================================================================


class SqlCatalogStore(CatalogStore):
    """Catalog store backed by PostgreSQL.

    Example usage:
        engine = create_engine(settings.database_url)
        store = SqlCatalogStore(create_session_factory(engine))
        rows = await store.fetch_products(
            compile_filter(spec), ordering_for(spec.sort_by), spec.limit, spec.offset
        )
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize store with a session factory.

        Args:
            session_factory: Factory used to open one session per query.
        """
        self.session_factory = session_factory

    async def fetch_products(
        self,
        predicate: And,
        ordering: tuple[OrderTerm, ...],
        limit: int,
        offset: int,
    ) -> list[ProductRecord]:
        query = build_product_query(predicate, ordering, limit, offset)
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [
                _to_record(row.Product, row.platform_name, row.category_name)
                for row in result.all()
            ]

    async def fetch_tags(self, predicate: And) -> list[str]:
        async with self.session_factory() as session:
            result = await session.execute(build_tag_query(predicate))
            return [tag for tag in result.scalars().all() if tag is not None]

    async def count_by_category(self, predicate: And) -> list[CategoryCount]:
        async with self.session_factory() as session:
            result = await session.execute(build_category_count_query(predicate))
            return [
                CategoryCount(
                    platform_id=row.platform_id,
                    category_id=row.category_id,
                    count=row.product_count,
                )
                for row in result.all()
            ]

    async def fetch_categories(self, platform_id: str | None = None) -> list[CategoryRecord]:
        query = select(Category).where(Category.id != ALL)
        if platform_id is not None:
            query = query.where(Category.platform_id == platform_id)
        query = query.order_by(Category.platform_id, Category.name)

        async with self.session_factory() as session:
            result = await session.execute(query)
            return [
                CategoryRecord(
                    platform_id=category.platform_id,
                    id=category.id,
                    name=category.name,
                    cached_count=category.cached_count,
                    description=category.description,
                )
                for category in result.scalars().all()
            ]

    async def price_bounds(self, predicate: And) -> tuple[Decimal, Decimal] | None:
        async with self.session_factory() as session:
            result = await session.execute(build_price_bounds_query(predicate))
            row = result.one()
            if row.min_price is None or row.max_price is None:
                return None
            return Decimal(row.min_price), Decimal(row.max_price)

    async def fetch_platforms(self, limit: int = 50) -> list[PlatformRecord]:
        query = select(Platform).order_by(Platform.name).limit(limit)
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [
                PlatformRecord(id=p.id, name=p.name, description=p.description)
                for p in result.scalars().all()
            ]

    async def ping(self) -> None:
        async with self.session_factory() as session:
            await session.execute(select(1))
