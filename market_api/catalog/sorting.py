"""Sort strategies for product lists.

Every ordering ends with an ``id`` tie-break so that the order is total
and pagination is stable when leading fields tie.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from market_api.catalog.filters import SortKey
from market_api.catalog.records import ProductRecord


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class OrderTerm:
    """One ``ORDER BY`` term."""

    field: str
    direction: SortDirection

    def describe(self) -> str:
        return f"{self.field} {self.direction.value}"


ASC = SortDirection.ASC
DESC = SortDirection.DESC

# Leading field of the "popular" ordering. The storefront listing orders
# by review count while the seller dashboard used units sold; review
# count is the canonical choice. Switch to "sold" here if that changes.
POPULAR_SORT_FIELD = "review_count"

SORT_STRATEGIES: dict[SortKey, tuple[OrderTerm, ...]] = {
    SortKey.FEATURED: (
        OrderTerm("is_featured", DESC),
        OrderTerm("rating", DESC),
        OrderTerm("id", DESC),
    ),
    SortKey.NEWEST: (
        OrderTerm("created_at", DESC),
        OrderTerm("id", DESC),
    ),
    SortKey.OLDEST: (
        OrderTerm("created_at", ASC),
        OrderTerm("id", ASC),
    ),
    SortKey.PRICE_LOW: (
        OrderTerm("price", ASC),
        OrderTerm("id", ASC),
    ),
    SortKey.PRICE_HIGH: (
        OrderTerm("price", DESC),
        OrderTerm("id", DESC),
    ),
    SortKey.RATING: (
        OrderTerm("rating", DESC),
        OrderTerm("review_count", DESC),
        OrderTerm("id", DESC),
    ),
    SortKey.POPULAR: (
        OrderTerm(POPULAR_SORT_FIELD, DESC),
        OrderTerm("rating", DESC),
        OrderTerm("id", DESC),
    ),
}

RELATED_ORDERING: tuple[OrderTerm, ...] = (
    OrderTerm("is_featured", DESC),
    OrderTerm("rating", DESC),
    OrderTerm("review_count", DESC),
    OrderTerm("id", DESC),
)

LOOKUP_ORDERING: tuple[OrderTerm, ...] = (OrderTerm("id", ASC),)


def ordering_for(sort_key: SortKey) -> tuple[OrderTerm, ...]:
    """Get the ordering for a sort key.

    Args:
        sort_key: Requested sort key.

    Returns:
        Ordered terms, always ending in an ``id`` tie-break.
    """
    return SORT_STRATEGIES[sort_key]


def _sort_value(record: ProductRecord, field: str) -> tuple[bool, Any]:
    if field == "price":
        return (True, record.money.amount)
    value = getattr(record, field)
    # Missing values sort below every present value.
    return (value is not None, value)


def sort_records(
    records: Iterable[ProductRecord],
    ordering: tuple[OrderTerm, ...],
) -> list[ProductRecord]:
    """Sort rows in memory by a multi-term ordering.

    Applies one stable sort per term, last term first, which yields the
    same order as a SQL ``ORDER BY`` over the same terms.

    Args:
        records: Rows to sort.
        ordering: Terms to sort by.

    Returns:
        New sorted list.
    """
    result = list(records)
    for term in reversed(ordering):
        result.sort(
            key=lambda record: _sort_value(record, term.field),
            reverse=term.direction is SortDirection.DESC,
        )
    return result
