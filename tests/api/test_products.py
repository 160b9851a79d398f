"""Tests for product API endpoints."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from market_api.catalog.store import InMemoryCatalogStore
from market_api.infrastructure.config import settings


class BrokenProductStore(InMemoryCatalogStore):
    """Store whose product query fails."""

    async def fetch_products(self, predicate, ordering, limit, offset):
        raise ConnectionError("server closed the connection unexpectedly")


class HangingProductStore(InMemoryCatalogStore):
    """Store whose product query never returns."""

    async def fetch_products(self, predicate, ordering, limit, offset):
        await asyncio.sleep(10)


def ids(body: dict) -> list[str]:
    return [item["id"] for item in body["items"]]


class TestListProducts:
    """Tests for GET /products."""

    def test_default_listing(self, client: TestClient) -> None:
        """No parameters lists live products in featured order."""
        response = client.get("/products")
        assert response.status_code == 200
        data = response.json()
        assert ids(data) == ["p-001", "p-004", "p-002", "p-003"]
        assert data["count"] == 4
        assert data["limit"] == 50
        assert data["offset"] == 0

    def test_wire_format(self, client: TestClient) -> None:
        """Products use camelCase keys and numeric prices."""
        item = client.get("/products", params={"search": "auto farm"}).json()["items"][0]
        assert item["id"] == "p-001"
        assert item["price"] == 19.99
        assert item["originalPrice"] == 29.99
        assert item["reviewCount"] == 10
        assert item["platformName"] == "Roblox"
        assert item["categoryName"] == "Scripts"
        assert item["isFeatured"] is True
        assert item["image"] == "/img/p-001.png"

    def test_filters(self, client: TestClient) -> None:
        """Filters combine with AND; tags combine with OR."""
        response = client.get(
            "/products",
            params={"platformId": "steam", "tags": ["rpg", "puzzle"]},
        )
        assert ids(response.json()) == ["p-003"]

    def test_price_bounds(self, client: TestClient) -> None:
        """Price bounds are inclusive and numeric."""
        response = client.get(
            "/products",
            params={"minPrice": "9.99", "maxPrice": "19.99", "sortBy": "price-low"},
        )
        assert ids(response.json()) == ["p-004", "p-001"]

    def test_pagination(self, client: TestClient) -> None:
        """limit and offset page through the ordering."""
        response = client.get("/products", params={"limit": 2, "offset": 1})
        data = response.json()
        assert ids(data) == ["p-004", "p-002"]
        assert data["limit"] == 2
        assert data["offset"] == 1

    def test_offset_past_end(self, client: TestClient) -> None:
        """Paging past the end returns an empty page, not an error."""
        response = client.get("/products", params={"offset": 500})
        assert response.status_code == 200
        assert response.json()["items"] == []

    @pytest.mark.parametrize(
        "params, field",
        [
            ({"limit": "0"}, "limit"),
            ({"limit": "101"}, "limit"),
            ({"offset": "-1"}, "offset"),
            ({"sortBy": "cheapest"}, "sortBy"),
            ({"minPrice": "50", "maxPrice": "10"}, "minPrice"),
            ({"colour": "red"}, "colour"),
        ],
    )
    def test_invalid_filter(self, client: TestClient, params: dict, field: str) -> None:
        """Invalid filters are rejected with the offending field."""
        response = client.get("/products", params=params)
        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"][0]["field"] == field

    def test_store_failure(self, make_client) -> None:
        """A failing store is reported as 503, not an empty list."""
        client = make_client(BrokenProductStore())
        response = client.get("/products")
        assert response.status_code == 503
        data = response.json()
        assert data["error_code"] == "QUERY_FAILURE"
        assert "server closed" not in data["message"]

    def test_store_timeout(self, make_client, monkeypatch) -> None:
        """A slow store is reported as 504."""
        monkeypatch.setattr(settings, "query_timeout_seconds", 0.05)
        client = make_client(HangingProductStore())
        response = client.get("/products")
        assert response.status_code == 504
        assert response.json()["error_code"] == "QUERY_TIMEOUT"


class TestFacets:
    """Tests for GET /products/facets."""

    def test_platform_facets(self, client: TestClient) -> None:
        """Facets are scoped to the platform; price covers everything."""
        response = client.get("/products/facets", params={"platformId": "steam"})
        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data["categories"]] == ["empty", "rpg", "strategy"]
        assert data["categories"][1]["platformId"] == "steam"
        assert data["tags"] == ["puzzle", "rpg", "strategy"]
        assert data["priceRange"] == {"min": 0.0, "max": 49.99}
        assert data["errors"] == []

    def test_all_platforms(self, client: TestClient) -> None:
        """"all" and no parameter both mean every platform."""
        everything = client.get("/products/facets").json()
        sentinel = client.get("/products/facets", params={"platformId": "all"}).json()
        assert everything == sentinel
        assert "all" not in [c["id"] for c in everything["categories"]]


class TestBrowse:
    """Tests for GET /products/browse."""

    def test_products_and_facets(self, client: TestClient) -> None:
        """Browse returns a page and facets together."""
        response = client.get(
            "/products/browse", params={"platformId": "steam", "categoryId": "rpg"}
        )
        assert response.status_code == 200
        data = response.json()
        assert ids(data["products"]) == ["p-003"]
        assert data["productsError"] is None
        assert data["facets"]["tags"] == ["puzzle", "rpg", "strategy"]

    def test_product_failure_keeps_facets(self, make_client, platforms, categories) -> None:
        """A failed product list still returns facets."""
        client = make_client(BrokenProductStore(platforms, categories))
        response = client.get("/products/browse")
        assert response.status_code == 200
        data = response.json()
        assert data["products"] is None
        assert data["productsError"]["errorCode"] == "QUERY_FAILURE"
        assert data["productsError"]["source"] == "products"
        assert data["facets"]["categories"] is not None

    def test_invalid_filter(self, client: TestClient) -> None:
        """Browse validates before querying."""
        response = client.get("/products/browse", params={"limit": "abc"})
        assert response.status_code == 422


class TestGetProduct:
    """Tests for GET /products/{product_ref} and related products."""

    def test_by_id(self, client: TestClient) -> None:
        """Products can be fetched by id."""
        response = client.get("/products/p-002")
        assert response.status_code == 200
        assert response.json()["name"] == "Roblox Account Level 100"

    def test_by_slug(self, client: TestClient) -> None:
        """Products can be fetched by slug."""
        response = client.get("/products/slug-p-004")
        assert response.status_code == 200
        assert response.json()["id"] == "p-004"

    def test_not_found(self, client: TestClient) -> None:
        """Unknown and deleted products are 404."""
        for ref in ("nope", "p-005"):
            response = client.get(f"/products/{ref}")
            assert response.status_code == 404
            assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"

    def test_related(self, client: TestClient) -> None:
        """Related products exclude the product itself."""
        response = client.get("/products/p-001/related")
        assert response.status_code == 200
        data = response.json()
        assert ids(data) == ["p-002"]
        assert data["limit"] == 8

    def test_related_limit_capped(self, client: TestClient) -> None:
        """Related limit is capped at 20."""
        response = client.get("/products/p-001/related", params={"limit": 21})
        assert response.status_code == 422

    def test_related_by_scope(self, client: TestClient) -> None:
        """Related products can be listed by category and platform alone."""
        response = client.get(
            "/products/related", params={"platformId": "roblox", "categoryId": "scripts"}
        )
        assert response.status_code == 200
        data = response.json()
        assert ids(data) == ["p-001", "p-002"]
        assert data["limit"] == 8

    def test_related_by_scope_excludes_id(self, client: TestClient) -> None:
        """excludeId drops one product from the scope."""
        response = client.get(
            "/products/related",
            params={"platformId": "roblox", "categoryId": "scripts", "excludeId": "p-001"},
        )
        assert response.status_code == 200
        assert ids(response.json()) == ["p-002"]

    def test_related_by_scope_requires_platform(self, client: TestClient) -> None:
        """A missing platform is rejected, not treated as a product id."""
        response = client.get("/products/related", params={"categoryId": "scripts"})
        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "platformId"
