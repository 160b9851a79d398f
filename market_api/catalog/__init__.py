"""Catalog query engine.

Validates filter requests, compiles them into predicates and orderings,
runs them against a catalog store, projects rows into public products
and aggregates sidebar facets.
"""

from market_api.catalog.facets import CategoryFacet, FacetAggregator, FacetResult, PriceRange
from market_api.catalog.filters import FilterSpec, SortKey, parse_filter_spec
from market_api.catalog.predicates import compile_filter, compile_platform_scope
from market_api.catalog.projector import ProductView, ResultProjector
from market_api.catalog.records import CategoryRecord, PlatformRecord, ProductRecord
from market_api.catalog.sorting import ordering_for
from market_api.catalog.store import CatalogStore, InMemoryCatalogStore

__all__ = [
    # Validation
    "FilterSpec",
    "SortKey",
    "parse_filter_spec",
    # Compilation
    "compile_filter",
    "compile_platform_scope",
    "ordering_for",
    # Storage
    "CatalogStore",
    "InMemoryCatalogStore",
    "CategoryRecord",
    "PlatformRecord",
    "ProductRecord",
    # Results
    "ProductView",
    "ResultProjector",
    "CategoryFacet",
    "FacetAggregator",
    "FacetResult",
    "PriceRange",
]
