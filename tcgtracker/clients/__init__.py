from tcgtracker.clients.pokemon_tcg import (
    MAX_PAGE_SIZE,
    CardPage,
    CatalogSourceError,
    PokemonTCGClient,
    SearchCache,
    build_search_query,
)

__all__ = [
    "MAX_PAGE_SIZE",
    "CardPage",
    "CatalogSourceError",
    "PokemonTCGClient",
    "SearchCache",
    "build_search_query",
]
