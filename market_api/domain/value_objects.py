"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Self

from market_api.domain.base import ValueObject
from market_api.domain.exceptions import InvalidMoneyError

CENT = Decimal("0.01")


# ============================================================================
# Money Value Object
# ============================================================================


@dataclass(frozen=True, order=True)
class Money(ValueObject):
    """Fixed-point price with two fraction digits.

    Prices are stored as exact decimal strings (``"19.99"``). A Money is
    built once per row from that string and used for every comparison,
    so no comparison ever happens on the string or on a binary float.

    Attributes:
        amount: Non-negative amount with at most two fraction digits,
            normalized to exactly two.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        """Validate and normalize the amount."""
        if not self.amount.is_finite():
            raise InvalidMoneyError(self.amount, "amount must be finite")
        if self.amount < 0:
            raise InvalidMoneyError(self.amount, "amount cannot be negative")
        normalized = self.amount.quantize(CENT)
        if normalized != self.amount:
            raise InvalidMoneyError(self.amount, "more than two fraction digits")
        object.__setattr__(self, "amount", normalized)

    @classmethod
    def zero(cls) -> Self:
        """Create zero amount money.

        Returns:
            Money with zero amount.
        """
        return cls(amount=Decimal("0"))

    @classmethod
    def from_decimal(cls, amount: Decimal) -> Self:
        """Create money from a decimal amount.

        Args:
            amount: Decimal amount in major units.

        Returns:
            Money instance.
        """
        return cls(amount=amount)

    @classmethod
    def parse(cls, raw: str | Decimal | int | float) -> Self:
        """Parse a stored price value.

        Accepts the decimal string form used by the store, a ``Decimal``
        returned by a NUMERIC column, or a plain number from a request.

        Args:
            raw: Value to parse.

        Returns:
            Money instance.

        Raises:
            InvalidMoneyError: If the value is not a non-negative number.
        """
        if isinstance(raw, Decimal):
            return cls(amount=raw)
        if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
            raise InvalidMoneyError(raw, "unsupported type")
        try:
            # str() keeps float inputs from dragging binary noise into the Decimal
            amount = Decimal(raw.strip() if isinstance(raw, str) else str(raw))
        except InvalidOperation as e:
            raise InvalidMoneyError(raw, "not a decimal number") from e
        return cls(amount=amount)

    def to_decimal(self) -> Decimal:
        """Return the amount as a Decimal."""
        return self.amount

    def to_float(self) -> float:
        """Return the amount as a float for JSON output."""
        return float(self.amount)

    def is_zero(self) -> bool:
        """Check if amount is zero.

        Returns:
            True if amount is zero.
        """
        return self.amount == 0

    def __str__(self) -> str:
        """Return the canonical two-digit string form."""
        return f"{self.amount:.2f}"
