"""
Proxy search of the external catalog source.

Lets the frontend look up cards that are not yet mirrored locally. Results
are cached briefly in process memory.
"""

import logging
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from tcgtracker.api.dependencies import get_client_factory, get_search_cache
from tcgtracker.clients.pokemon_tcg import (
    DEFAULT_SEARCH_PAGE_SIZE,
    MAX_PAGE_SIZE,
    CatalogSourceError,
    PokemonTCGClient,
    SearchCache,
)
from tcgtracker.models.failure import FailureKind, KnownError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pokemon", tags=["search"])


class SearchResponse(BaseModel):
    """Source response passed through with its own camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[dict[str, Any]] = Field(default_factory=list)
    page: int = 1
    page_size: int = Field(0, alias="pageSize")
    count: int = 0
    total_count: int = Field(0, alias="totalCount")


@router.get("/search", response_model=SearchResponse)
async def search_cards(
    client_factory: Annotated[Callable[[], PokemonTCGClient], Depends(get_client_factory)],
    cache: Annotated[SearchCache, Depends(get_search_cache)],
    q: str | None = None,
    name: str | None = None,
    set_name: Annotated[str | None, Query(alias="set")] = None,
    number: str | None = None,
    rarity: str | None = None,
    page: Annotated[int | None, Query(ge=1)] = None,
    page_size: Annotated[
        int, Query(alias="pageSize", ge=1, le=MAX_PAGE_SIZE)
    ] = DEFAULT_SEARCH_PAGE_SIZE,
) -> SearchResponse:
    """
    Search the source by free text or by field.

    A plain `q` is an exact name search that falls back to a name prefix
    search when nothing matches. A `q` containing source query syntax is
    passed through as is.
    """
    try:
        async with client_factory() as client:
            result = await client.search(
                q=q,
                name=name,
                set_name=set_name,
                number=number,
                rarity=rarity,
                page=page,
                page_size=page_size,
                cache=cache,
            )
    except CatalogSourceError as e:
        logger.error("Catalog source search failed: %s", e)
        raise KnownError(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message="Failed to search cards",
            detail=str(e),
            suggestion="The card source may be down or rate limiting. Try again shortly.",
            status_code=500,
        ) from e

    return SearchResponse(**result.to_json())
