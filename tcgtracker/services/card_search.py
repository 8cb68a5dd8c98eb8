"""
Filtered, paged queries over the catalog and the collection.

All facets are optional and ANDed together. Free-text search is a
case-insensitive substring match over name, set and rarity. Every page
query is paired with a count query over the same filters so callers can
show total pages.

The collection stores no type information, so its type facet is answered
by cross-referencing owned cards against catalog rows with the same
name, set and number.
"""

import json
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, Select, Text, and_, cast, distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.models.card import CardCondition
from tcgtracker.models.db import CatalogCardDB, CollectionCardDB

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50
MAX_LIMIT = 250


def _positive_int(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value > 0 else None


@dataclass(frozen=True)
class PageParams:
    """Offset pagination. Bad input falls back to defaults instead of failing."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_raw(
        cls,
        page: Any = None,
        limit: Any = None,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ) -> "PageParams":
        parsed_page = _positive_int(page) or DEFAULT_PAGE
        parsed_limit = min(_positive_int(limit) or default_limit, max_limit)
        return cls(page=parsed_page, limit=parsed_limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return -(-total // self.limit)


@dataclass(frozen=True)
class CatalogFilters:
    search: str | None = None
    set_name: str | None = None
    rarity: str | None = None
    series: str | None = None
    card_type: str | None = None


@dataclass(frozen=True)
class CollectionFilters:
    search: str | None = None
    set_name: str | None = None
    rarity: str | None = None
    condition: str | None = None
    card_type: str | None = None


def json_list_contains(column: Any, value: str) -> ColumnElement[bool]:
    """
    True where a JSON list column holds `value` as an element.

    Works on the stored JSON text so the same query runs on PostgreSQL and
    SQLite; matching the quoted, JSON-encoded element keeps "Fire" from
    matching "Fireball".
    """
    encoded = json.dumps(value)
    pattern = encoded.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return cast(column, Text).like(f"%{pattern}%", escape="\\")


def _catalog_conditions(filters: CatalogFilters) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if filters.search:
        conditions.append(
            or_(
                CatalogCardDB.name.icontains(filters.search, autoescape=True),
                CatalogCardDB.set_name.icontains(filters.search, autoescape=True),
                CatalogCardDB.rarity.icontains(filters.search, autoescape=True),
            )
        )
    if filters.set_name:
        conditions.append(CatalogCardDB.set_name == filters.set_name)
    if filters.rarity:
        conditions.append(CatalogCardDB.rarity == filters.rarity)
    if filters.series:
        conditions.append(CatalogCardDB.set_series == filters.series)
    if filters.card_type:
        conditions.append(json_list_contains(CatalogCardDB.types, filters.card_type))
    return conditions


def _owned_matches_catalog() -> ColumnElement[bool]:
    """Join condition between an owned card and catalog rows for the same printing."""
    return and_(
        func.lower(CatalogCardDB.name) == func.lower(CollectionCardDB.name),
        func.lower(CatalogCardDB.set_name) == func.lower(CollectionCardDB.set),
        or_(
            CatalogCardDB.number == CollectionCardDB.number,
            and_(CatalogCardDB.number.is_(None), CollectionCardDB.number.is_(None)),
        ),
    )


def _collection_conditions(filters: CollectionFilters) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if filters.search:
        conditions.append(
            or_(
                CollectionCardDB.name.icontains(filters.search, autoescape=True),
                CollectionCardDB.set.icontains(filters.search, autoescape=True),
                CollectionCardDB.rarity.icontains(filters.search, autoescape=True),
            )
        )
    if filters.set_name:
        conditions.append(CollectionCardDB.set == filters.set_name)
    if filters.rarity:
        conditions.append(CollectionCardDB.rarity == filters.rarity)
    if filters.condition:
        conditions.append(CollectionCardDB.condition == filters.condition)
    if filters.card_type:
        conditions.append(
            select(CatalogCardDB.id)
            .where(
                _owned_matches_catalog(),
                json_list_contains(CatalogCardDB.types, filters.card_type),
            )
            .exists()
        )
    return conditions


async def _page_and_count(
    session: AsyncSession,
    query: Select[Any],
    count_query: Select[Any],
    page: PageParams,
) -> tuple[list[Any], int]:
    rows = await session.execute(query.limit(page.limit).offset(page.offset))
    total = await session.execute(count_query)
    return list(rows.scalars().all()), int(total.scalar_one())


async def search_catalog(
    session: AsyncSession,
    filters: CatalogFilters,
    page: PageParams,
) -> tuple[list[CatalogCardDB], int]:
    """
    One page of catalog cards plus the total matching count.

    Ordered by name, then set, then number.
    """
    conditions = _catalog_conditions(filters)
    query = (
        select(CatalogCardDB)
        .where(*conditions)
        .order_by(
            CatalogCardDB.name.asc(),
            CatalogCardDB.set_name.asc(),
            CatalogCardDB.number.asc(),
            CatalogCardDB.id.asc(),
        )
    )
    count_query = select(func.count()).select_from(CatalogCardDB).where(*conditions)
    return await _page_and_count(session, query, count_query, page)


async def search_collection(
    session: AsyncSession,
    filters: CollectionFilters,
    page: PageParams,
) -> tuple[list[CollectionCardDB], int]:
    """
    One page of owned cards plus the total matching count.

    Newest first.
    """
    conditions = _collection_conditions(filters)
    query = (
        select(CollectionCardDB)
        .where(*conditions)
        .order_by(CollectionCardDB.created_at.desc(), CollectionCardDB.id.asc())
    )
    count_query = select(func.count()).select_from(CollectionCardDB).where(*conditions)
    return await _page_and_count(session, query, count_query, page)


# --- Filter options ---


async def _distinct_values(session: AsyncSession, column: Any) -> list[str]:
    result = await session.execute(
        select(distinct(column)).where(column.is_not(None), column != "").order_by(column)
    )
    return [str(value) for value in result.scalars().all()]


def _flatten_types(rows: list[list[str] | None]) -> list[str]:
    types: set[str] = set()
    for row in rows:
        if row:
            types.update(row)
    return sorted(types)


async def catalog_filter_options(session: AsyncSession) -> dict[str, list[str]]:
    """Distinct sets, rarities, series and types present in the catalog."""
    types = await session.execute(select(CatalogCardDB.types))
    return {
        "sets": await _distinct_values(session, CatalogCardDB.set_name),
        "rarities": await _distinct_values(session, CatalogCardDB.rarity),
        "series": await _distinct_values(session, CatalogCardDB.set_series),
        "types": _flatten_types(list(types.scalars().all())),
    }


def _condition_order(condition: str) -> tuple[int, str]:
    scale = CardCondition.ordered()
    return (scale.index(condition) if condition in scale else len(scale), condition)


async def collection_filter_options(session: AsyncSession) -> dict[str, list[str]]:
    """
    Distinct sets, rarities, conditions and types present in the collection.

    Conditions follow the grading scale, best first. Types come from the
    catalog rows matching owned cards.
    """
    conditions = await _distinct_values(session, CollectionCardDB.condition)
    types = await session.execute(
        select(CatalogCardDB.types).join(CollectionCardDB, _owned_matches_catalog())
    )
    return {
        "sets": await _distinct_values(session, CollectionCardDB.set),
        "rarities": await _distinct_values(session, CollectionCardDB.rarity),
        "conditions": sorted(conditions, key=_condition_order),
        "types": _flatten_types(list(types.scalars().all())),
    }
