import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tcgtracker.api import (
    cards_router,
    catalog_router,
    health_router,
    search_router,
    sync_router,
)
from tcgtracker.clients.pokemon_tcg import SearchCache
from tcgtracker.config import settings
from tcgtracker.db.database import init_db
from tcgtracker.models.failure import InvalidFieldError, KnownError, classify_store_error
from tcgtracker.models.sync_status import SyncStatusRegister

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("tcgtracker"),
    lifespan=lifespan,
)

# One sync register and search cache per process
app.state.sync_register = SyncStatusRegister()
app.state.search_cache = SearchCache(ttl=settings.search_cache_ttl)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_detail().model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render wrongly typed input as a 400 naming the first bad field."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc) or "request"
    failure = InvalidFieldError(field, f"Invalid {field}: {first.get('msg', 'invalid input')}")
    return await known_error_handler(request, failure)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    failure = classify_store_error(exc)
    logger.error(
        "Store error on %s %s (%s): %s",
        request.method,
        request.url.path,
        failure.kind.value,
        exc,
    )
    return JSONResponse(
        status_code=failure.status_code,
        content=failure.to_detail().model_dump(mode="json"),
    )


app.include_router(cards_router)
app.include_router(catalog_router)
app.include_router(health_router)
app.include_router(search_router)
app.include_router(sync_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
