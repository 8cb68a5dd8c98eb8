"""
Catalog sync endpoints.

Starting a sync returns immediately; the run continues in the background
and reports progress through the process-wide status register, which
clients poll via GET /pokemon/sync/status.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.api.dependencies import get_client_factory, get_settings, get_sync_register
from tcgtracker.clients.pokemon_tcg import PokemonTCGClient
from tcgtracker.config import Settings
from tcgtracker.db import get_catalog_stats
from tcgtracker.db.database import SessionFactory, get_session, get_session_factory
from tcgtracker.models.failure import FailureKind, SyncConflictError, classify_store_error
from tcgtracker.models.sync_status import SyncStatus, SyncStatusRegister
from tcgtracker.services.catalog_sync import SyncOptions, start_sync

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pokemon/sync", tags=["sync"])


class SyncStartResponse(BaseModel):
    success: bool
    message: str
    status: SyncStatus


class CatalogStats(BaseModel):
    total_cards: int = 0
    last_synced: datetime | None = None


class SyncStatusResponse(SyncStatus):
    """Register snapshot plus what the catalog table currently holds."""

    catalog_stats: CatalogStats


class CatalogReadiness(BaseModel):
    status: str
    total_cards: int = 0
    last_synced: datetime | None = None
    message: str


@router.post(
    "",
    response_model=SyncStartResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={409: {"model": SyncStartResponse}},
)
async def trigger_sync(
    response: Response,
    register: Annotated[SyncStatusRegister, Depends(get_sync_register)],
    client_factory: Annotated[Callable[[], PokemonTCGClient], Depends(get_client_factory)],
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SyncStartResponse:
    """
    Start a full catalog sync in the background.

    Returns 202 as soon as the run is started. If a sync is already running
    returns 409 with the in-flight status, which is left untouched.
    """
    try:
        start_sync(
            register,
            client_factory,
            session_factory,
            SyncOptions.from_settings(settings),
        )
    except SyncConflictError as e:
        response.status_code = status.HTTP_409_CONFLICT
        return SyncStartResponse(success=False, message=e.message, status=register.snapshot())

    logger.info("Catalog sync started")
    return SyncStartResponse(
        success=True,
        message="Sync started. Check /pokemon/sync/status for progress.",
        status=register.snapshot(),
    )


@router.get("", response_model=CatalogReadiness)
async def catalog_readiness(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogReadiness:
    """
    Report whether the catalog is ready for use.

    A missing catalog table is reported as "not_initialized" instead of an
    error; any other store failure propagates.
    """
    try:
        total, last_synced = await get_catalog_stats(session)
    except SQLAlchemyError as e:
        await session.rollback()
        failure = classify_store_error(e)
        if failure.kind is not FailureKind.TABLE_MISSING:
            raise
        logger.warning("Catalog table missing: %s", e)
        return CatalogReadiness(
            status="not_initialized",
            message="Catalog table does not exist. Restart the service to create it.",
        )

    if total == 0:
        message = "Catalog is empty. Start a sync to populate it."
    else:
        message = f"Catalog has {total} cards."
    return CatalogReadiness(
        status="ready",
        total_cards=total,
        last_synced=last_synced,
        message=message,
    )


@router.get("/status", response_model=SyncStatusResponse)
async def sync_status(
    register: Annotated[SyncStatusRegister, Depends(get_sync_register)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SyncStatusResponse:
    """
    Current sync progress and catalog size.

    Catalog stats fall back to zero when the store cannot be read, so the
    progress of a running sync is always visible.
    """
    try:
        total, last_synced = await get_catalog_stats(session)
    except SQLAlchemyError as e:
        await session.rollback()
        logger.warning("Could not read catalog stats: %s", e)
        total, last_synced = 0, None

    snapshot = register.snapshot()
    return SyncStatusResponse(
        **snapshot.model_dump(),
        catalog_stats=CatalogStats(total_cards=total, last_synced=last_synced),
    )
