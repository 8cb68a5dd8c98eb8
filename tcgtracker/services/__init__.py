"""
TCG Tracker services.

Catalog sync, catalog matching and filtered search over both stores.
"""

from tcgtracker.services.card_search import (
    CatalogFilters,
    CollectionFilters,
    PageParams,
    catalog_filter_options,
    collection_filter_options,
    json_list_contains,
    search_catalog,
    search_collection,
)
from tcgtracker.services.catalog_matcher import PRICE_COMPLETENESS_RANK, find_match
from tcgtracker.services.catalog_sync import (
    SyncOptions,
    SyncStats,
    compute_total_pages,
    run_sync,
    start_sync,
)

__all__ = [
    "PRICE_COMPLETENESS_RANK",
    "CatalogFilters",
    "CollectionFilters",
    "PageParams",
    "SyncOptions",
    "SyncStats",
    "catalog_filter_options",
    "collection_filter_options",
    "compute_total_pages",
    "find_match",
    "json_list_contains",
    "run_sync",
    "search_catalog",
    "search_collection",
    "start_sync",
]
