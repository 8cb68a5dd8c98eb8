from tcgtracker.api.cards import router as cards_router
from tcgtracker.api.catalog import router as catalog_router
from tcgtracker.api.health import router as health_router
from tcgtracker.api.search import router as search_router
from tcgtracker.api.sync import router as sync_router

__all__ = [
    "cards_router",
    "catalog_router",
    "health_router",
    "search_router",
    "sync_router",
]
