"""Tests for filter request validation."""

from decimal import Decimal

import pytest

from market_api.catalog.filters import (
    DEFAULT_LIMIT,
    FilterSpec,
    SortKey,
    normalize_scope,
    parse_author_request,
    parse_filter_spec,
    parse_related_request,
)
from market_api.domain.exceptions import ValidationError


class TestParseFilterSpec:
    """Tests for parse_filter_spec."""

    def test_empty_request_uses_defaults(self) -> None:
        """An empty request is valid and yields the default spec."""
        assert parse_filter_spec({}) == FilterSpec()
        assert parse_filter_spec(None) == FilterSpec()

    def test_defaults(self) -> None:
        """Defaults are featured ordering, first page of 50."""
        spec = parse_filter_spec({})
        assert spec.sort_by is SortKey.FEATURED
        assert spec.limit == DEFAULT_LIMIT
        assert spec.offset == 0
        assert spec.show_discounted is False
        assert spec.tags == ()

    def test_wire_names(self) -> None:
        """camelCase wire names are accepted."""
        spec = parse_filter_spec(
            {
                "platformId": "steam",
                "categoryId": "rpg",
                "minPrice": "10",
                "maxPrice": "49.99",
                "showDiscounted": "true",
                "sortBy": "price-low",
                "limit": "20",
                "offset": "40",
            }
        )
        assert spec.platform_id == "steam"
        assert spec.category_id == "rpg"
        assert spec.min_price == Decimal("10")
        assert spec.max_price == Decimal("49.99")
        assert spec.show_discounted is True
        assert spec.sort_by is SortKey.PRICE_LOW
        assert spec.limit == 20
        assert spec.offset == 40

    def test_snake_case_names(self) -> None:
        """Python field names are accepted too."""
        spec = parse_filter_spec({"platform_id": "steam", "sort_by": "rating"})
        assert spec.platform_id == "steam"
        assert spec.sort_by is SortKey.RATING

    def test_all_sentinel_means_unset(self) -> None:
        """"all" and blank ids mean no platform or category constraint."""
        spec = parse_filter_spec({"platformId": "all", "categoryId": "  "})
        assert spec.platform_id is None
        assert spec.category_id is None

    def test_blank_search_is_unset(self) -> None:
        """Whitespace-only search is treated as no search."""
        assert parse_filter_spec({"search": "   "}).search is None
        assert parse_filter_spec({"search": " auto farm "}).search == "auto farm"

    def test_tags_deduplicated_in_order(self) -> None:
        """Repeated and blank tags are dropped."""
        spec = parse_filter_spec({"tags": ["rpg", "puzzle", "rpg", " "]})
        assert spec.tags == ("rpg", "puzzle")

    @pytest.mark.parametrize(
        "raw, field",
        [
            ({"limit": 0}, "limit"),
            ({"limit": 101}, "limit"),
            ({"offset": -1}, "offset"),
            ({"minPrice": "-1"}, "minPrice"),
            ({"maxPrice": "abc"}, "maxPrice"),
            ({"sortBy": "cheapest"}, "sortBy"),
            ({"search": "x" * 201}, "search"),
            ({"platformId": "p" * 65}, "platformId"),
        ],
    )
    def test_out_of_range_fields(self, raw: dict, field: str) -> None:
        """Each invalid field is reported by its wire name."""
        with pytest.raises(ValidationError) as exc_info:
            parse_filter_spec(raw)
        assert exc_info.value.field == field

    def test_min_above_max(self) -> None:
        """minPrice above maxPrice is rejected on minPrice."""
        with pytest.raises(ValidationError) as exc_info:
            parse_filter_spec({"minPrice": "50", "maxPrice": "10"})
        assert exc_info.value.field == "minPrice"

    def test_min_equal_max_allowed(self) -> None:
        """Equal bounds select an exact price."""
        spec = parse_filter_spec({"minPrice": "9.99", "maxPrice": "9.99"})
        assert spec.min_price == spec.max_price

    def test_unknown_field_rejected(self) -> None:
        """Unknown fields are not silently ignored."""
        with pytest.raises(ValidationError) as exc_info:
            parse_filter_spec({"colour": "red"})
        assert exc_info.value.field == "colour"

    def test_non_mapping_rejected(self) -> None:
        """A request must be an object."""
        with pytest.raises(ValidationError) as exc_info:
            parse_filter_spec(["limit", 5])  # type: ignore[arg-type]
        assert exc_info.value.field == "request"

    def test_multiple_errors_listed(self) -> None:
        """Every invalid field is listed in details."""
        with pytest.raises(ValidationError) as exc_info:
            parse_filter_spec({"limit": 0, "offset": -5})
        fields = {e["field"] for e in exc_info.value.details["errors"]}
        assert fields == {"limit", "offset"}


class TestNormalizeScope:
    """Tests for normalize_scope."""

    def test_values(self) -> None:
        """Sentinels collapse to None; real ids are trimmed."""
        assert normalize_scope(None) is None
        assert normalize_scope("all") is None
        assert normalize_scope("") is None
        assert normalize_scope(" steam ") == "steam"


class TestAuthorAndRelatedRequests:
    """Tests for the seller and related-product requests."""

    def test_author_default_sort_is_newest(self) -> None:
        """Seller pages default to newest first."""
        assert parse_author_request({}).sort_by is SortKey.NEWEST

    def test_author_rejects_storefront_only_sorts(self) -> None:
        """featured and popular are not seller-page orderings."""
        with pytest.raises(ValidationError) as exc_info:
            parse_author_request({"sortBy": "featured"})
        assert exc_info.value.field == "sortBy"

    def test_related_limit_bounds(self) -> None:
        """Related limit defaults to 8 and is capped at 20."""
        assert parse_related_request({}).limit == 8
        assert parse_related_request({"limit": "20"}).limit == 20
        with pytest.raises(ValidationError):
            parse_related_request({"limit": "21"})
