"""Tests for the predicate compiler."""

from datetime import datetime, timezone
from decimal import Decimal

from market_api.catalog.filters import FilterSpec, parse_filter_spec
from market_api.catalog.predicates import (
    NOT_DELETED,
    And,
    BooleanFlag,
    Equals,
    Not,
    NumericRange,
    TagIntersect,
    TextSearch,
    compile_catalog_scope,
    compile_filter,
    compile_platform_scope,
    compile_related,
)


class TestCompileFilter:
    """Tests for compile_filter."""

    def test_empty_spec_only_excludes_deleted(self) -> None:
        """An empty filter compiles to the soft-delete clause alone."""
        assert compile_filter(FilterSpec()) == And((NOT_DELETED,))

    def test_clause_per_set_field(self) -> None:
        """Each set field adds exactly one clause after the soft-delete one."""
        spec = parse_filter_spec(
            {
                "search": "farm",
                "platformId": "roblox",
                "categoryId": "scripts",
                "minPrice": "1",
                "showDiscounted": True,
                "tags": ["auto"],
            }
        )
        predicate = compile_filter(spec)
        assert predicate.clauses[0] == NOT_DELETED
        assert [type(c) for c in predicate.clauses[1:]] == [
            TextSearch,
            Equals,
            Equals,
            NumericRange,
            BooleanFlag,
            TagIntersect,
        ]

    def test_describe_omits_search_text(self) -> None:
        """Log rendering never contains the buyer's search term."""
        spec = parse_filter_spec({"search": "secret phrase", "platformId": "steam"})
        described = compile_filter(spec).describe()
        assert "secret phrase" not in described
        assert "text_search" in described
        assert "platform_id='steam'" in described

    def test_deleted_rows_never_match(self, product_factory) -> None:
        """Soft-deleted rows fail every compiled filter."""
        deleted = product_factory("d", deleted_at=datetime(2024, 5, 1, tzinfo=timezone.utc))
        assert not compile_filter(FilterSpec()).matches(deleted)


class TestClauses:
    """Tests for in-memory clause evaluation."""

    def test_text_search_is_case_insensitive_substring(self, product_factory) -> None:
        """Search matches a substring of name, description or author."""
        clause = TextSearch(("name", "description", "author"), "auto farm")
        assert clause.matches(product_factory("a", name="Roblox Script - Auto Farm"))
        assert not clause.matches(
            product_factory("b", name="Other", description="automated farming is fun")
        )
        assert clause.matches(product_factory("c", name="x", author="AUTO FARM Studio"))

    def test_numeric_range_compares_numbers(self, product_factory) -> None:
        """Price bounds compare decimals, not strings."""
        clause = NumericRange("price", Decimal("9"), Decimal("20"))
        assert clause.matches(product_factory("a", price="10"))
        assert clause.matches(product_factory("b", price="20.00"))
        assert not clause.matches(product_factory("c", price="100"))
        assert not clause.matches(product_factory("d", price="8.99"))

    def test_discount_flag(self, product_factory) -> None:
        """Discount flag requires a positive discount."""
        clause = BooleanFlag("discount")
        assert clause.matches(product_factory("a", discount=10))
        assert not clause.matches(product_factory("b", discount=0))
        assert not clause.matches(product_factory("c", discount=None))

    def test_tag_intersect_is_or(self, product_factory) -> None:
        """A row matches if it has any requested tag."""
        clause = TagIntersect(("rpg", "puzzle"))
        assert clause.matches(product_factory("a", tags=["rpg"]))
        assert clause.matches(product_factory("b", tags=["puzzle", "rpg"]))
        assert not clause.matches(product_factory("c", tags=["strategy"]))
        assert not clause.matches(product_factory("d", tags=None))

    def test_not(self, product_factory) -> None:
        """Not inverts its clause."""
        clause = Not(Equals("id", "a"))
        assert not clause.matches(product_factory("a"))
        assert clause.matches(product_factory("b"))


class TestScopes:
    """Tests for facet and related-product scopes."""

    def test_platform_scope(self) -> None:
        """Facet scope is soft-delete plus an optional platform."""
        assert compile_platform_scope(None) == And((NOT_DELETED,))
        assert compile_platform_scope("steam") == And(
            (NOT_DELETED, Equals("platform_id", "steam"))
        )

    def test_catalog_scope(self) -> None:
        """Catalog scope ignores every filter."""
        assert compile_catalog_scope() == And((NOT_DELETED,))

    def test_related_excludes_self(self, product_factory) -> None:
        """Related products share a category or platform but not the id."""
        predicate = compile_related("a", "roblox", "scripts")
        assert not predicate.matches(product_factory("a"))
        assert predicate.matches(product_factory("b", category_id="accounts"))
        assert predicate.matches(product_factory("c", platform_id="steam"))
        assert not predicate.matches(
            product_factory("d", platform_id="steam", category_id="rpg")
        )
