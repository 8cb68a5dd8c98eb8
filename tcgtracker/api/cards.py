"""
Collection API endpoints.

CRUD over the user's owned cards, plus filter options, collection totals
and the catalog price lookup used to offer a price refresh.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.api.dependencies import get_page_params
from tcgtracker.api.schemas import (
    CardListResponse,
    CardResponse,
    CatalogPrices,
    Pagination,
)
from tcgtracker.db import (
    create_card,
    delete_card,
    get_card,
    get_collection_totals,
    update_card,
)
from tcgtracker.db.database import get_session
from tcgtracker.models.card import DEFAULT_CONDITION
from tcgtracker.models.failure import (
    InvalidFieldError,
    MissingFieldsError,
    NotFoundError,
)
from tcgtracker.parsers.card_input import (
    optional_text,
    parse_condition,
    parse_decimal,
    parse_psa_rating,
    parse_quantity,
)
from tcgtracker.services.card_search import (
    CollectionFilters,
    PageParams,
    collection_filter_options,
    search_collection,
)
from tcgtracker.services.catalog_matcher import find_match

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cards", tags=["cards"])


class CardCreateRequest(BaseModel):
    """
    Request model for adding a card.

    Numbers are accepted as numbers or strings; see the card_input parsers.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    set_name: str | None = Field(default=None, alias="set")
    number: Any = None
    rarity: str | None = None
    condition: str | None = None
    value: Any = Field(default=None, examples=[50.0, "12.99"])
    quantity: Any = Field(default=None, description="Defaults to 1 when missing or non-numeric")
    image_url: str | None = None
    is_psa: bool | None = None
    psa_rating: Any = Field(default=None, description="1-10, only kept for PSA graded cards")


class CardUpdateRequest(CardCreateRequest):
    """Request model for a partial update. Only fields present are changed."""

    pass


class DeleteResponse(BaseModel):
    id: str
    deleted: bool


class CollectionFilterOptions(BaseModel):
    sets: list[str] = Field(default_factory=list)
    rarities: list[str] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)


class CollectionStatsResponse(BaseModel):
    total_cards: int = Field(0, description="Copies owned, summing quantities")
    unique_cards: int = Field(0, description="Distinct collection records")
    total_value: float = Field(0.0, description="Sum of value * quantity")


class CatalogMatchSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    set_name: str = Field(alias="set")
    number: str | None = None


class CatalogPriceResponse(BaseModel):
    catalog_card: CatalogMatchSummary
    prices: CatalogPrices
    current_value: float


def _required_text(raw: str | None, field: str) -> str:
    text = optional_text(raw)
    if text is None:
        raise InvalidFieldError(field, f"{field} cannot be empty")
    return text


def _update_changes(request: CardUpdateRequest) -> dict[str, Any]:
    """Translate the fields present in an update request into column changes."""
    present = request.model_fields_set
    changes: dict[str, Any] = {}

    if "name" in present:
        changes["name"] = _required_text(request.name, "name")
    if "set_name" in present:
        changes["set"] = _required_text(request.set_name, "set")
    if "number" in present:
        changes["number"] = optional_text(request.number)
    if "rarity" in present:
        changes["rarity"] = optional_text(request.rarity)
    if "condition" in present:
        changes["condition"] = parse_condition(request.condition)
    if "value" in present:
        changes["value"] = parse_decimal(request.value)
    if "quantity" in present:
        changes["quantity"] = parse_quantity(request.quantity)
    if "image_url" in present:
        changes["image_url"] = optional_text(request.image_url)
    if "is_psa" in present and request.is_psa is not None:
        changes["is_psa"] = request.is_psa
    if "psa_rating" in present:
        changes["psa_rating"] = parse_psa_rating(request.psa_rating)

    return changes


@router.get("", response_model=CardListResponse)
async def list_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    page: Annotated[PageParams, Depends(get_page_params)],
    search: str | None = None,
    set_name: Annotated[str | None, Query(alias="set")] = None,
    rarity: str | None = None,
    condition: str | None = None,
    card_type: Annotated[str | None, Query(alias="type")] = None,
) -> CardListResponse:
    """
    List owned cards, newest first.

    All filters are optional and combine with AND. `search` matches name,
    set or rarity as a case-insensitive substring.
    """
    filters = CollectionFilters(
        search=search or None,
        set_name=set_name or None,
        rarity=rarity or None,
        condition=condition or None,
        card_type=card_type or None,
    )
    cards, total = await search_collection(session, filters, page)

    return CardListResponse(
        data=[CardResponse.from_db(card) for card in cards],
        pagination=Pagination(
            page=page.page,
            limit=page.limit,
            total=total,
            total_pages=page.total_pages(total),
        ),
    )


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def add_card(
    request: CardCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """
    Add a card to the collection.

    name, set and value are required. quantity defaults to 1 and condition
    to "Near Mint".
    """
    required = (("name", request.name), ("set", request.set_name), ("value", request.value))
    missing = [
        field
        for field, raw in required
        if raw is None or (isinstance(raw, str) and not raw.strip())
    ]
    if missing:
        raise MissingFieldsError(missing)

    is_psa = bool(request.is_psa)
    card = await create_card(
        session,
        name=_required_text(request.name, "name"),
        set_name=_required_text(request.set_name, "set"),
        value=parse_decimal(request.value),
        quantity=parse_quantity(request.quantity),
        condition=(
            parse_condition(request.condition) if request.condition else DEFAULT_CONDITION
        ),
        number=optional_text(request.number),
        rarity=optional_text(request.rarity),
        image_url=optional_text(request.image_url),
        is_psa=is_psa,
        psa_rating=parse_psa_rating(request.psa_rating) if is_psa else None,
    )
    logger.info("Added %s (%s) x%d", card.name, card.set, card.quantity)
    return CardResponse.from_db(card)


@router.get("/filters", response_model=CollectionFilterOptions)
async def get_filter_options(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionFilterOptions:
    """Distinct values available for each collection filter."""
    options = await collection_filter_options(session)
    return CollectionFilterOptions(**options)


@router.get("/stats", response_model=CollectionStatsResponse)
async def get_collection_stats(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionStatsResponse:
    """Copies owned, distinct records and total value of the collection."""
    total_cards, unique_cards, total_value = await get_collection_totals(session)
    return CollectionStatsResponse(
        total_cards=total_cards,
        unique_cards=unique_cards,
        total_value=float(total_value),
    )


@router.get("/{card_id}", response_model=CardResponse)
async def get_one_card(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    card = await get_card(session, card_id)
    if card is None:
        raise NotFoundError()
    return CardResponse.from_db(card)


@router.put("/{card_id}", response_model=CardResponse)
async def update_one_card(
    card_id: str,
    request: CardUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """
    Partially update a card.

    Fields left out of the body keep their stored values, so repeating the
    same update is harmless. Setting is_psa to false clears psa_rating.
    """
    card = await update_card(session, card_id, _update_changes(request))
    if card is None:
        raise NotFoundError()
    return CardResponse.from_db(card)


@router.delete("/{card_id}", response_model=DeleteResponse)
async def delete_one_card(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    deleted = await delete_card(session, card_id)
    if not deleted:
        raise NotFoundError()
    return DeleteResponse(id=card_id, deleted=True)


@router.get("/{card_id}/catalog-price", response_model=CatalogPriceResponse)
async def get_catalog_price(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogPriceResponse:
    """
    Look up current catalog prices for an owned card.

    Returns the matched catalog card, its five prices and the card's stored
    value so the caller can offer to update it. Nothing is written.
    """
    card = await get_card(session, card_id)
    if card is None:
        raise NotFoundError()

    match = await find_match(session, card.name, card.set, card.number, card.rarity)
    if match is None:
        raise NotFoundError("Card not found in catalog")

    return CatalogPriceResponse(
        catalog_card=CatalogMatchSummary(
            id=match.id,
            name=match.name,
            set_name=match.set_name,
            number=match.number,
        ),
        prices=CatalogPrices.from_db(match),
        current_value=float(card.value),
    )
