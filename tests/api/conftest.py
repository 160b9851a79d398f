"""Shared fixtures for API tests."""

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from market_api.catalog.store import CatalogStore
from market_api.main import app


@pytest.fixture
def make_client() -> Iterator[Callable[[CatalogStore], TestClient]]:
    """Create test clients serving the app over a given store."""

    def build(store: CatalogStore) -> TestClient:
        app.state.catalog_store = store
        return TestClient(app)

    yield build
    if hasattr(app.state, "catalog_store"):
        del app.state.catalog_store


@pytest.fixture
def client(make_client, store: CatalogStore) -> TestClient:
    """Create test client over the sample catalog."""
    return make_client(store)
