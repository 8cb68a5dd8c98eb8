"""
Database engine and session management.

The web app and the catalog sync share one engine. Request handlers get a
session per request through `get_session`; the sync opens its own sessions
from `async_session_factory` because it outlives the request that started it.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tcgtracker.config import settings
from tcgtracker.models.db import Base

SessionFactory = async_sessionmaker[AsyncSession]


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the given URL."""
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def build_session_factory(bind: AsyncEngine) -> SessionFactory:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url, echo=settings.debug)
async_session_factory = build_session_factory(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Commits when the handler returns, rolls back if it raised a store error.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


def get_session_factory() -> SessionFactory:
    """Dependency that provides the factory background work opens sessions from."""
    return async_session_factory


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Create the catalog and collection tables if they are missing.

    Called once at application startup.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    """
    Drop all tables.

    WARNING: Destroys the collection. Use only for testing.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
