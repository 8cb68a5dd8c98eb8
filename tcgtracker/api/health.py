"""
Health check endpoints.

Liveness, and readiness with a database ping that also confirms the
collection and catalog tables exist.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.db.database import get_session
from tcgtracker.models.db import CatalogCardDB, CollectionCardDB
from tcgtracker.models.failure import classify_store_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    hint: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 when the database is unreachable or a table is missing,
    with a hint telling the two apart.
    """
    try:
        await session.execute(select(func.count()).select_from(CollectionCardDB))
        await session.execute(select(func.count()).select_from(CatalogCardDB))
    except SQLAlchemyError as e:
        await session.rollback()
        failure = classify_store_error(e)
        logger.warning("Readiness check failed (%s): %s", failure.kind.value, e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not ready",
            database=failure.kind.value,
            hint=failure.suggestion,
        )
    return HealthResponse(status="ready", database="connected")
