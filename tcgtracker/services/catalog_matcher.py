"""
Catalog matcher.

Finds the catalog card an owned card most likely corresponds to, so its
current market price can be offered. Owned cards carry free-text name and
set rather than a catalog id, and the source often lists the same nominal
card several times (reprints sharing a number, misprints, regional
variants) with prices filled in unevenly. Candidates are therefore ranked
by how useful their price data is, not taken in arbitrary order.
"""

import logging

from sqlalchemy import Select, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.models.db import CatalogCardDB

logger = logging.getLogger(__name__)

# Lower is better. Mirrors the order prices are preferred in when valuing a card.
PRICE_COMPLETENESS_RANK = case(
    (CatalogCardDB.price_normal_market.is_not(None), 1),
    (CatalogCardDB.price_normal_mid.is_not(None), 2),
    (CatalogCardDB.price_normal_low.is_not(None), 3),
    (CatalogCardDB.price_holofoil_market.is_not(None), 4),
    (CatalogCardDB.price_holofoil_mid.is_not(None), 5),
    else_=6,
)


def _same_card(name: str, set_name: str) -> Select[tuple[CatalogCardDB]]:
    return select(CatalogCardDB).where(
        func.lower(CatalogCardDB.name) == name.strip().lower(),
        func.lower(CatalogCardDB.set_name) == set_name.strip().lower(),
    )


async def find_match(
    session: AsyncSession,
    name: str,
    set_name: str,
    number: str | None = None,
    rarity: str | None = None,
) -> CatalogCardDB | None:
    """
    Find the best catalog card for an owned card.

    Tries name + set + exact number first. If that finds nothing (or no
    number was given), falls back to name + set, narrowed by rarity when one
    is given, preferring candidates that have a number and then the lowest
    number.

    Name and set compare case-insensitively. Read-only; returns None when
    nothing matches.
    """
    if number and number.strip():
        exact = await session.execute(
            _same_card(name, set_name)
            .where(CatalogCardDB.number == number.strip())
            .order_by(PRICE_COMPLETENESS_RANK, CatalogCardDB.id)
            .limit(1)
        )
        match = exact.scalar_one_or_none()
        if match is not None:
            return match
        logger.debug("No exact catalog match for %s / %s #%s", name, set_name, number)

    loose = _same_card(name, set_name)
    if rarity and rarity.strip():
        loose = loose.where(func.lower(CatalogCardDB.rarity) == rarity.strip().lower())

    result = await session.execute(
        loose.order_by(
            PRICE_COMPLETENESS_RANK,
            case((CatalogCardDB.number.is_(None), 1), else_=0),
            CatalogCardDB.number.asc(),
            CatalogCardDB.id,
        ).limit(1)
    )
    return result.scalar_one_or_none()
