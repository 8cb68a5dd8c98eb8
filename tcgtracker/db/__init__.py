from tcgtracker.db.database import get_session, get_session_factory, init_db
from tcgtracker.db.operations import (
    create_card,
    delete_card,
    get_card,
    get_catalog_card,
    get_catalog_stats,
    get_collection_totals,
    update_card,
    upsert_catalog_card,
)

__all__ = [
    "create_card",
    "delete_card",
    "get_card",
    "get_catalog_card",
    "get_catalog_stats",
    "get_collection_totals",
    "get_session",
    "get_session_factory",
    "init_db",
    "update_card",
    "upsert_catalog_card",
]
