"""
Database CRUD operations.

Provides async functions for the collection (create, read, partial update,
delete) and for the catalog mirror (upsert, lookup, freshness stats).
"""

from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.models.card import DEFAULT_CONDITION, CatalogRecord
from tcgtracker.models.db import CatalogCardDB, CollectionCardDB, utcnow

CENTS = Decimal("0.01")

# Columns a partial update may touch
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "set",
        "number",
        "rarity",
        "condition",
        "value",
        "quantity",
        "image_url",
        "is_psa",
        "psa_rating",
    }
)

# --- Collection Operations ---


async def get_card(session: AsyncSession, card_id: str) -> CollectionCardDB | None:
    """
    Get an owned card by id.

    Returns None if no such card exists.
    """
    return await session.get(CollectionCardDB, card_id)


async def create_card(
    session: AsyncSession,
    *,
    name: str,
    set_name: str,
    value: Decimal,
    quantity: int = 1,
    condition: str = DEFAULT_CONDITION,
    number: str | None = None,
    rarity: str | None = None,
    image_url: str | None = None,
    is_psa: bool = False,
    psa_rating: int | None = None,
) -> CollectionCardDB:
    """Add a card to the collection."""
    card = CollectionCardDB(
        name=name,
        set=set_name,
        number=number,
        rarity=rarity,
        condition=condition,
        value=value,
        quantity=quantity,
        image_url=image_url,
        is_psa=is_psa,
        psa_rating=psa_rating if is_psa else None,
    )
    session.add(card)
    await session.flush()
    return card


async def update_card(
    session: AsyncSession,
    card_id: str,
    changes: dict[str, Any],
) -> CollectionCardDB | None:
    """
    Apply a partial update to an owned card.

    Only keys present in `changes` are written; everything else keeps its
    stored value. Clearing `is_psa` also clears the rating.

    Returns None if the card does not exist.
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    card = await get_card(session, card_id)
    if card is None:
        return None

    if not changes:
        return card

    for field, value in changes.items():
        setattr(card, field, value)

    if not card.is_psa:
        card.psa_rating = None

    card.updated_at = utcnow()
    await session.flush()
    return card


async def delete_card(session: AsyncSession, card_id: str) -> bool:
    """
    Delete an owned card.

    Returns True if deleted, False if not found.
    """
    card = await get_card(session, card_id)
    if card is None:
        return False

    await session.delete(card)
    await session.flush()
    return True


async def get_collection_totals(session: AsyncSession) -> tuple[int, int, Decimal]:
    """
    Summarize the collection.

    Returns:
        Tuple of (total copies, distinct records, total value)
    """
    result = await session.execute(
        select(
            func.coalesce(func.sum(CollectionCardDB.quantity), 0),
            func.count(CollectionCardDB.id),
            func.coalesce(func.sum(CollectionCardDB.value * CollectionCardDB.quantity), 0),
        )
    )
    total_cards, unique_cards, total_value = result.one()
    return int(total_cards), int(unique_cards), Decimal(str(total_value)).quantize(CENTS)


# --- Catalog Operations ---


async def get_catalog_card(session: AsyncSession, card_id: str) -> CatalogCardDB | None:
    """Get a catalog card by its source id."""
    return await session.get(CatalogCardDB, card_id)


async def upsert_catalog_card(session: AsyncSession, record: CatalogRecord) -> bool:
    """
    Insert or update a catalog card.

    Every mirrored field is replaced and last_synced_at advances, whether the
    row is new or not.

    Returns:
        True if the card was inserted, False if an existing row was updated.
    """
    fields = asdict(record)
    now = utcnow()
    existing = await get_catalog_card(session, record.id)

    if existing:
        for field, value in fields.items():
            setattr(existing, field, value)
        existing.last_synced_at = now
        existing.updated_at = now
        await session.flush()
        return False

    session.add(CatalogCardDB(**fields, last_synced_at=now, updated_at=now))
    await session.flush()
    return True


async def get_catalog_stats(session: AsyncSession) -> tuple[int, datetime | None]:
    """
    Return the number of catalog rows and the most recent sync time.

    The time is None while the catalog is empty.
    """
    result = await session.execute(
        select(func.count(CatalogCardDB.id), func.max(CatalogCardDB.last_synced_at))
    )
    total, last_synced = result.one()
    return int(total), last_synced
