"""
Response models shared by the collection and catalog endpoints.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tcgtracker.models.db import CatalogCardDB, CollectionCardDB


def _money(amount: Decimal | None) -> float | None:
    return float(amount) if amount is not None else None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class CardResponse(BaseModel):
    """An owned card. `total_value` is value * quantity, computed per response."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    set_name: str = Field(alias="set")
    number: str | None = None
    rarity: str | None = None
    condition: str
    value: float
    quantity: int
    total_value: float
    image_url: str | None = None
    is_psa: bool = False
    psa_rating: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_db(cls, card: CollectionCardDB) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            set_name=card.set,
            number=card.number,
            rarity=card.rarity,
            condition=card.condition,
            value=float(card.value),
            quantity=card.quantity,
            total_value=float(card.total_value),
            image_url=card.image_url,
            is_psa=card.is_psa,
            psa_rating=card.psa_rating,
            created_at=card.created_at,
            updated_at=card.updated_at,
        )


class CardListResponse(BaseModel):
    data: list[CardResponse] = Field(default_factory=list)
    pagination: Pagination


class CatalogPrices(BaseModel):
    """The five TCGplayer prices mirrored for a catalog card."""

    market: float | None = None
    mid: float | None = None
    low: float | None = None
    holofoil_market: float | None = None
    holofoil_mid: float | None = None

    @classmethod
    def from_db(cls, card: CatalogCardDB) -> "CatalogPrices":
        return cls(
            market=_money(card.price_normal_market),
            mid=_money(card.price_normal_mid),
            low=_money(card.price_normal_low),
            holofoil_market=_money(card.price_holofoil_market),
            holofoil_mid=_money(card.price_holofoil_mid),
        )


class CatalogCardResponse(BaseModel):
    """A mirrored reference card."""

    id: str
    name: str
    supertype: str | None = None
    subtypes: list[str] = Field(default_factory=list)
    hp: str | None = None
    types: list[str] = Field(default_factory=list)
    set_id: str
    set_name: str
    set_series: str | None = None
    number: str | None = None
    artist: str | None = None
    rarity: str | None = None
    flavor_text: str | None = None
    national_pokedex_numbers: list[int] = Field(default_factory=list)
    images_small: str | None = None
    images_large: str | None = None
    tcgplayer_url: str | None = None
    cardmarket_url: str | None = None
    prices: CatalogPrices
    last_synced_at: datetime | None = None

    @classmethod
    def from_db(cls, card: CatalogCardDB) -> "CatalogCardResponse":
        return cls(
            id=card.id,
            name=card.name,
            supertype=card.supertype,
            subtypes=card.subtypes or [],
            hp=card.hp,
            types=card.types or [],
            set_id=card.set_id,
            set_name=card.set_name,
            set_series=card.set_series,
            number=card.number,
            artist=card.artist,
            rarity=card.rarity,
            flavor_text=card.flavor_text,
            national_pokedex_numbers=card.national_pokedex_numbers or [],
            images_small=card.images_small,
            images_large=card.images_large,
            tcgplayer_url=card.tcgplayer_url,
            cardmarket_url=card.cardmarket_url,
            prices=CatalogPrices.from_db(card),
            last_synced_at=card.last_synced_at,
        )


class CatalogListResponse(BaseModel):
    data: list[CatalogCardResponse] = Field(default_factory=list)
    pagination: Pagination
