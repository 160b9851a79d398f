"""Predicate compiler.

A compiled filter is an ``And`` of independent clauses drawn from a small
closed set of clause types. Each clause can evaluate itself against a
ProductRecord (used by the in-memory store) and is rendered to SQL by
``market_api.catalog.repository``. ``describe()`` gives a log-safe
rendering that never includes the free-text search term.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from market_api.catalog.filters import FilterSpec
from market_api.catalog.records import ProductRecord

SEARCH_FIELDS = ("name", "description", "author")


class Clause(ABC):
    """One boolean condition over a product row."""

    @abstractmethod
    def matches(self, record: ProductRecord) -> bool:
        """Evaluate the clause against a row."""

    @abstractmethod
    def describe(self) -> str:
        """Return a log-safe rendering of the clause."""


def _numeric_value(record: ProductRecord, field: str) -> Decimal | int | float | None:
    if field == "price":
        return record.money.amount
    return getattr(record, field)


# ============================================================================
# Clause Types
# ============================================================================


@dataclass(frozen=True)
class TextSearch(Clause):
    """Case-insensitive substring match on any of several text fields."""

    fields: tuple[str, ...]
    query: str

    def matches(self, record: ProductRecord) -> bool:
        needle = self.query.lower()
        return any(needle in (getattr(record, field) or "").lower() for field in self.fields)

    def describe(self) -> str:
        return f"text_search({','.join(self.fields)})"


@dataclass(frozen=True)
class Equals(Clause):
    """Exact match on a field."""

    field: str
    value: Any

    def matches(self, record: ProductRecord) -> bool:
        return getattr(record, self.field) == self.value

    def describe(self) -> str:
        return f"equals({self.field}={self.value!r})"


@dataclass(frozen=True)
class NumericRange(Clause):
    """Inclusive numeric bounds; either side may be open.

    The ``price`` field is compared on its parsed Money amount, never on
    the stored string.
    """

    field: str
    minimum: Decimal | None = None
    maximum: Decimal | None = None

    def matches(self, record: ProductRecord) -> bool:
        value = _numeric_value(record, self.field)
        if value is None:
            return False
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True

    def describe(self) -> str:
        return f"numeric_range({self.field}, min={self.minimum}, max={self.maximum})"


@dataclass(frozen=True)
class BooleanFlag(Clause):
    """Field is set: true for flags, greater than zero for counters."""

    field: str

    def matches(self, record: ProductRecord) -> bool:
        value = getattr(record, self.field)
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return value > 0

    def describe(self) -> str:
        return f"flag({self.field})"


@dataclass(frozen=True)
class TagIntersect(Clause):
    """Row has at least one of the requested tags."""

    tags: tuple[str, ...]

    def matches(self, record: ProductRecord) -> bool:
        return not record.tag_set.isdisjoint(self.tags)

    def describe(self) -> str:
        return f"tag_intersect(count={len(self.tags)})"


@dataclass(frozen=True)
class IsNull(Clause):
    """Field holds no value."""

    field: str

    def matches(self, record: ProductRecord) -> bool:
        return getattr(record, self.field) is None

    def describe(self) -> str:
        return f"is_null({self.field})"


@dataclass(frozen=True)
class Not(Clause):
    """Negation of one clause."""

    clause: Clause

    def matches(self, record: ProductRecord) -> bool:
        return not self.clause.matches(record)

    def describe(self) -> str:
        return f"NOT({self.clause.describe()})"


@dataclass(frozen=True)
class Or(Clause):
    """Disjunction of clauses."""

    clauses: tuple[Clause, ...]

    def matches(self, record: ProductRecord) -> bool:
        return any(clause.matches(record) for clause in self.clauses)

    def describe(self) -> str:
        return f"OR({', '.join(clause.describe() for clause in self.clauses)})"


@dataclass(frozen=True)
class And(Clause):
    """Conjunction of clauses. An empty And matches every row."""

    clauses: tuple[Clause, ...] = ()

    def matches(self, record: ProductRecord) -> bool:
        return all(clause.matches(record) for clause in self.clauses)

    def describe(self) -> str:
        return f"AND({', '.join(clause.describe() for clause in self.clauses)})"


NOT_DELETED = IsNull("deleted_at")


# ============================================================================
# Compilers
# ============================================================================


def compile_filter(spec: FilterSpec) -> And:
    """Compile a FilterSpec into the product list predicate.

    The soft-delete exclusion is always the first clause; every other
    clause is present only when its FilterSpec field is set.

    Args:
        spec: Validated filter.

    Returns:
        Conjunction of clauses.
    """
    clauses: list[Clause] = [NOT_DELETED]

    if spec.search:
        clauses.append(TextSearch(SEARCH_FIELDS, spec.search))

    if spec.platform_id is not None:
        clauses.append(Equals("platform_id", spec.platform_id))

    if spec.category_id is not None:
        clauses.append(Equals("category_id", spec.category_id))

    if spec.min_price is not None or spec.max_price is not None:
        clauses.append(NumericRange("price", spec.min_price, spec.max_price))

    if spec.show_discounted:
        clauses.append(BooleanFlag("discount"))

    if spec.tags:
        clauses.append(TagIntersect(spec.tags))

    return And(tuple(clauses))


def compile_platform_scope(platform_id: str | None) -> And:
    """Predicate for facets scoped to a platform (or to every platform)."""
    if platform_id is None:
        return And((NOT_DELETED,))
    return And((NOT_DELETED, Equals("platform_id", platform_id)))


def compile_catalog_scope() -> And:
    """Predicate covering the whole live catalog."""
    return And((NOT_DELETED,))


def compile_lookup(field: str, value: str) -> And:
    """Predicate for a single live product by id or slug."""
    return And((NOT_DELETED, Equals(field, value)))


def compile_related(product_id: str | None, platform_id: str, category_id: str) -> And:
    """Predicate for products sharing a category or a platform with a product."""
    clauses: list[Clause] = [
        NOT_DELETED,
        Or((Equals("category_id", category_id), Equals("platform_id", platform_id))),
    ]
    if product_id is not None:
        clauses.append(Not(Equals("id", product_id)))
    return And(tuple(clauses))


def compile_author(author_id: str) -> And:
    """Predicate for one seller's live listings."""
    return And((NOT_DELETED, Equals("author_id", author_id)))
