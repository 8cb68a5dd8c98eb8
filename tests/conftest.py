from collections.abc import Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tcgtracker.api.dependencies import get_search_cache, get_sync_register
from tcgtracker.clients.pokemon_tcg import SearchCache
from tcgtracker.db.database import get_session, get_session_factory
from tcgtracker.main import app
from tcgtracker.models.db import Base
from tcgtracker.models.sync_status import SyncStatusRegister


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def sync_register() -> SyncStatusRegister:
    return SyncStatusRegister()


@pytest.fixture
async def client(session_factory, sync_register):
    """Provide an async test client with overridden database session and app state."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    cache = SearchCache(ttl=300.0)

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_sync_register] = lambda: sync_register
    app.dependency_overrides[get_search_cache] = lambda: cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_raw_card() -> Callable[..., dict[str, Any]]:
    """Build a card object shaped like the Pokemon TCG API's /cards response."""

    def _make(
        card_id: str = "base1-4",
        name: str = "Charizard",
        set_id: str = "base1",
        set_name: str = "Base",
        number: str | None = "4",
        rarity: str | None = "Rare Holo",
        types: list[str] | None = None,
        normal: dict[str, float] | None = None,
        holofoil: dict[str, float] | None = None,
    ) -> dict[str, Any]:
        prices: dict[str, Any] = {}
        if normal is not None:
            prices["normal"] = normal
        if holofoil is not None:
            prices["holofoil"] = holofoil
        return {
            "id": card_id,
            "name": name,
            "supertype": "Pokémon",
            "subtypes": ["Stage 2"],
            "hp": "120",
            "types": types if types is not None else ["Fire"],
            "set": {"id": set_id, "name": set_name, "series": "Base"},
            "number": number,
            "artist": "Mitsuhiro Arita",
            "rarity": rarity,
            "flavorText": "Spits fire that is hot enough to melt boulders.",
            "nationalPokedexNumbers": [6],
            "images": {
                "small": f"https://images.pokemontcg.io/{set_id}/{number}.png",
                "large": f"https://images.pokemontcg.io/{set_id}/{number}_hires.png",
            },
            "tcgplayer": {
                "url": f"https://prices.pokemontcg.io/tcgplayer/{card_id}",
                "prices": prices,
            },
            "cardmarket": {"url": f"https://prices.pokemontcg.io/cardmarket/{card_id}"},
        }

    return _make


@pytest.fixture
def cards_page() -> Callable[..., dict[str, Any]]:
    """Build a /cards response body."""

    def _page(
        data: list[dict[str, Any]], page: int, page_size: int, total_count: int
    ) -> dict[str, Any]:
        return {
            "data": data,
            "page": page,
            "pageSize": page_size,
            "count": len(data),
            "totalCount": total_count,
        }

    return _page
