"""
SQLAlchemy ORM models for persistent storage.

Two independent tables: the mirrored reference catalog and the user's
owned cards. Owned cards are matched to the catalog by name/set/number at
query time; there is deliberately no foreign key between them, so a card
can be owned without existing in the catalog.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _new_card_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CatalogCardDB(Base):
    """
    One reference card mirrored from the external catalog source.

    Keyed by the source's own identifier. Rows are created and updated only
    by the catalog sync; nothing deletes them.
    """

    __tablename__ = "tcg_catalog"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    supertype: Mapped[str | None] = mapped_column(String(50), nullable=True)
    subtypes: Mapped[list[str]] = mapped_column(JSON, default=list)
    hp: Mapped[str | None] = mapped_column(String(20), nullable=True)
    types: Mapped[list[str]] = mapped_column(JSON, default=list)

    set_id: Mapped[str] = mapped_column(String(64), index=True)
    set_name: Mapped[str] = mapped_column(String(255), index=True)
    set_series: Mapped[str | None] = mapped_column(String(255), nullable=True)
    number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    artist: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rarity: Mapped[str | None] = mapped_column(String(100), nullable=True)
    flavor_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    national_pokedex_numbers: Mapped[list[int]] = mapped_column(JSON, default=list)

    images_small: Mapped[str | None] = mapped_column(Text, nullable=True)
    images_large: Mapped[str | None] = mapped_column(Text, nullable=True)
    tcgplayer_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    cardmarket_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    price_normal_market: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    price_normal_mid: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    price_normal_low: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    price_holofoil_market: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    price_holofoil_mid: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    last_synced_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<CatalogCardDB(id={self.id}, name={self.name}, set={self.set_name})>"


class CollectionCardDB(Base):
    """
    A physical card (or stack of identical copies) the user owns.

    `value` is per copy; the stack's worth is value * quantity and is
    never stored.
    """

    __tablename__ = "pokemon_cards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_card_id)
    name: Mapped[str] = mapped_column(String(255), index=True)
    set: Mapped[str] = mapped_column(String(255), index=True)
    number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    rarity: Mapped[str | None] = mapped_column(String(100), nullable=True)
    condition: Mapped[str] = mapped_column(String(20), default="Near Mint")
    value: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_psa: Mapped[bool] = mapped_column(Boolean, default=False)
    psa_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    @property
    def total_value(self) -> Decimal:
        """Worth of the whole stack."""
        return self.value * self.quantity

    def __repr__(self) -> str:
        return f"<CollectionCardDB(name={self.name}, set={self.set}, qty={self.quantity})>"
