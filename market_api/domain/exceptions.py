"""Domain exceptions.

All errors the catalog engine surfaces to its callers. Validation errors
are caller-correctable and raised before any store access; query failures
wrap store-level problems (connectivity, timeouts, malformed rows) and are
opaque to the caller.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions.

    All catalog errors inherit from this class to allow catching
    engine-specific errors at the API layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Input Errors
# ============================================================================


class ValidationError(CatalogError):
    """Raised when a filter request is malformed.

    Reports the first offending field and the constraint it violated.
    When several fields are invalid, all of them are listed under
    ``details["errors"]``.
    """

    def __init__(
        self,
        field: str,
        reason: str,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        """Initialize validation error.

        Args:
            field: Name of the offending request field.
            reason: Constraint that was violated.
            errors: Every offending field as ``{"field", "reason"}`` pairs.
        """
        self.field = field
        self.reason = reason
        super().__init__(
            f"Invalid value for '{field}': {reason}",
            details={
                "field": field,
                "reason": reason,
                "errors": errors or [{"field": field, "reason": reason}],
            },
        )


# ============================================================================
# Query Errors
# ============================================================================


class QueryFailure(CatalogError):
    """Raised when a catalog store query fails.

    The original exception is kept as ``cause`` (and chained via
    ``raise ... from``) but never exposed to API clients.
    """

    def __init__(
        self,
        cause: BaseException | str,
        operation: str | None = None,
        message: str | None = None,
    ) -> None:
        """Initialize query failure.

        Args:
            cause: Underlying exception or a short description.
            operation: Name of the sub-query that failed.
            message: Override for the default message.
        """
        self.cause = cause
        self.operation = operation
        if message is None:
            message = (
                f"Catalog query '{operation}' failed" if operation else "Catalog query failed"
            )
        cause_name = type(cause).__name__ if isinstance(cause, BaseException) else cause
        super().__init__(
            message,
            details={"operation": operation, "cause": cause_name},
        )


class QueryTimeout(QueryFailure):
    """Raised when a catalog store query exceeds its time budget."""

    def __init__(self, operation: str | None, timeout_seconds: float) -> None:
        """Initialize query timeout.

        Args:
            operation: Name of the sub-query that timed out.
            timeout_seconds: Budget that was exceeded.
        """
        self.timeout_seconds = timeout_seconds
        target = f"Catalog query '{operation}'" if operation else "Catalog query"
        super().__init__(
            "timeout",
            operation=operation,
            message=f"{target} timed out after {timeout_seconds}s",
        )


class ProductNotFoundError(CatalogError):
    """Raised when a product lookup matches no live product."""

    def __init__(self, product_ref: str) -> None:
        """Initialize product not found error.

        Args:
            product_ref: Product ID or slug that was requested.
        """
        super().__init__(
            f"Product {product_ref} not found",
            details={"product": product_ref},
        )


# ============================================================================
# Money Errors
# ============================================================================


class MoneyError(CatalogError):
    """Base class for money-related errors."""

    pass


class InvalidMoneyError(MoneyError):
    """Raised when a stored price cannot be parsed or is negative."""

    def __init__(self, raw: object, reason: str) -> None:
        """Initialize invalid money error.

        Args:
            raw: The value that failed to parse.
            reason: Why the value is invalid.
        """
        super().__init__(
            f"Invalid money amount {raw!r}: {reason}",
            details={"raw": repr(raw), "reason": reason},
        )
