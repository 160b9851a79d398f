"""Domain layer - value objects and exceptions.

Example usage:
    from market_api.domain import Money

    price = Money.parse("19.99")
    assert price > Money.parse("9.99")
"""

from market_api.domain.base import ValueObject
from market_api.domain.exceptions import (
    CatalogError,
    InvalidMoneyError,
    MoneyError,
    ProductNotFoundError,
    QueryFailure,
    QueryTimeout,
    ValidationError,
)
from market_api.domain.value_objects import Money

__all__ = [
    "CatalogError",
    "InvalidMoneyError",
    "Money",
    "MoneyError",
    "ProductNotFoundError",
    "QueryFailure",
    "QueryTimeout",
    "ValidationError",
    "ValueObject",
]
