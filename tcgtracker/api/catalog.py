"""
Catalog API endpoints.

Read access to the local mirror of the reference catalog, and a shortcut
for copying a catalog card into the collection.
"""

import logging
from decimal import Decimal
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.api.dependencies import get_page_params
from tcgtracker.api.schemas import (
    CardResponse,
    CatalogCardResponse,
    CatalogListResponse,
    Pagination,
)
from tcgtracker.db import create_card, get_catalog_card
from tcgtracker.db.database import get_session
from tcgtracker.models.card import DEFAULT_CONDITION, first_price
from tcgtracker.models.failure import NotFoundError
from tcgtracker.parsers.card_input import parse_condition, parse_decimal, parse_quantity
from tcgtracker.services.card_search import (
    CatalogFilters,
    PageParams,
    catalog_filter_options,
    search_catalog,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tcg-catalog", tags=["catalog"])


class CatalogFilterOptions(BaseModel):
    sets: list[str] = Field(default_factory=list)
    rarities: list[str] = Field(default_factory=list)
    series: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)


class CollectRequest(BaseModel):
    """Options for adding a catalog card to the collection."""

    quantity: Any = None
    condition: str | None = None
    value: Any = Field(
        default=None,
        description="Defaults to the best catalog price, or 0 when the card has none",
    )


@router.get("", response_model=CatalogListResponse)
async def list_catalog(
    session: Annotated[AsyncSession, Depends(get_session)],
    page: Annotated[PageParams, Depends(get_page_params)],
    search: str | None = None,
    set_name: Annotated[str | None, Query(alias="set")] = None,
    rarity: str | None = None,
    series: str | None = None,
    card_type: Annotated[str | None, Query(alias="type")] = None,
) -> CatalogListResponse:
    """
    Browse the catalog.

    Ordered by name, set and number. `type` matches one of the card's
    energy types exactly.
    """
    filters = CatalogFilters(
        search=search or None,
        set_name=set_name or None,
        rarity=rarity or None,
        series=series or None,
        card_type=card_type or None,
    )
    cards, total = await search_catalog(session, filters, page)

    return CatalogListResponse(
        data=[CatalogCardResponse.from_db(card) for card in cards],
        pagination=Pagination(
            page=page.page,
            limit=page.limit,
            total=total,
            total_pages=page.total_pages(total),
        ),
    )


@router.get("/filters", response_model=CatalogFilterOptions)
async def get_catalog_filter_options(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogFilterOptions:
    options = await catalog_filter_options(session)
    return CatalogFilterOptions(**options)


@router.get("/{card_id}", response_model=CatalogCardResponse)
async def get_one_catalog_card(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogCardResponse:
    card = await get_catalog_card(session, card_id)
    if card is None:
        raise NotFoundError("Card not found in catalog")
    return CatalogCardResponse.from_db(card)


@router.post(
    "/{card_id}/collect",
    response_model=CardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def collect_catalog_card(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    request: CollectRequest | None = None,
) -> CardResponse:
    """
    Add a catalog card to the collection.

    Name, set, number, rarity and image are copied from the catalog. The
    value is taken from the request, else the best available catalog price.
    """
    request = request or CollectRequest()

    catalog_card = await get_catalog_card(session, card_id)
    if catalog_card is None:
        raise NotFoundError("Card not found in catalog")

    if request.value is not None:
        value = parse_decimal(request.value)
    else:
        value = first_price(
            catalog_card.price_normal_market,
            catalog_card.price_normal_mid,
            catalog_card.price_normal_low,
            catalog_card.price_holofoil_market,
            catalog_card.price_holofoil_mid,
        ) or Decimal("0")

    card = await create_card(
        session,
        name=catalog_card.name,
        set_name=catalog_card.set_name,
        value=value,
        quantity=parse_quantity(request.quantity),
        condition=(
            parse_condition(request.condition) if request.condition else DEFAULT_CONDITION
        ),
        number=catalog_card.number,
        rarity=catalog_card.rarity,
        image_url=catalog_card.images_large or catalog_card.images_small,
    )
    logger.info("Collected catalog card %s as %s", catalog_card.id, card.id)
    return CardResponse.from_db(card)
