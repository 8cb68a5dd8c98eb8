"""
Shared FastAPI dependencies.

Process-wide state (the sync register, the search cache) lives on
`app.state` and is reached through these functions, so tests can swap any
of them with `app.dependency_overrides`.
"""

from collections.abc import Callable

from fastapi import Request

from tcgtracker.clients.pokemon_tcg import PokemonTCGClient, SearchCache
from tcgtracker.config import Settings, settings
from tcgtracker.models.sync_status import SyncStatusRegister
from tcgtracker.services.card_search import PageParams


def get_settings() -> Settings:
    return settings


def get_sync_register(request: Request) -> SyncStatusRegister:
    register: SyncStatusRegister = request.app.state.sync_register
    return register


def get_search_cache(request: Request) -> SearchCache:
    cache: SearchCache = request.app.state.search_cache
    return cache


def get_client_factory() -> Callable[[], PokemonTCGClient]:
    """Factory for catalog source clients; each caller owns the client it gets."""
    return lambda: PokemonTCGClient.from_settings(settings)


def get_page_params(page: str | None = None, limit: str | None = None) -> PageParams:
    """
    Pagination from query parameters.

    Taken as strings so junk like ?page=abc falls back to defaults rather
    than failing validation.
    """
    return PageParams.from_raw(
        page,
        limit,
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )
