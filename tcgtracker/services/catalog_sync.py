"""
Catalog sync.

Mirrors the whole external catalog into the local tcg_catalog table. Pages
are fetched one after another with a short pause between them, and each
card is upserted and committed on its own so one bad record cannot sink a
run of many thousands. Progress is published only through the
SyncStatusRegister; callers that start a run in the background poll it.

There is no cancellation. A started run goes until it completes or fails,
and whatever it upserted before failing stays in the catalog.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy.exc import InterfaceError, OperationalError

from tcgtracker.clients.pokemon_tcg import (
    MAX_PAGE_SIZE,
    CardPage,
    CatalogSourceError,
    PokemonTCGClient,
)
from tcgtracker.config import Settings
from tcgtracker.db.database import SessionFactory
from tcgtracker.db.operations import upsert_catalog_card
from tcgtracker.models.failure import SyncConflictError
from tcgtracker.models.sync_status import SyncStatusRegister
from tcgtracker.parsers.pokemon_tcg import parse_catalog_record

logger = logging.getLogger(__name__)

# Strong references to detached runs; the event loop only keeps weak ones
_background_tasks: set[asyncio.Task[None]] = set()


@dataclass(frozen=True)
class SyncOptions:
    """Tuning for a sync run."""

    page_size: int = MAX_PAGE_SIZE
    page_delay: float = 0.1
    progress_interval: int = 50

    @classmethod
    def from_settings(cls, settings: Settings) -> "SyncOptions":
        return cls(
            page_size=max(1, min(settings.sync_page_size, MAX_PAGE_SIZE)),
            page_delay=max(0.0, settings.sync_page_delay),
            progress_interval=max(1, settings.sync_progress_interval),
        )


@dataclass
class SyncStats:
    """Running totals for one sync run."""

    total_count: int = 0
    total_pages: int = 0
    cards_processed: int = 0
    cards_inserted: int = 0
    cards_updated: int = 0
    errors: int = 0
    started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def counters(self) -> dict[str, int]:
        return {
            "cards_processed": self.cards_processed,
            "cards_inserted": self.cards_inserted,
            "cards_updated": self.cards_updated,
            "errors": self.errors,
        }


def compute_total_pages(total_count: int, page_size: int) -> int:
    """Pages needed to cover `total_count` cards."""
    if total_count <= 0:
        return 0
    return math.ceil(total_count / page_size)


async def run_sync(
    register: SyncStatusRegister,
    client: PokemonTCGClient,
    session_factory: SessionFactory,
    options: SyncOptions | None = None,
) -> SyncStats:
    """
    Run a full catalog sync and wait for it to finish.

    Raises:
        SyncConflictError: If a sync is already running; nothing is changed
        Exception: Whatever fault ended the run; the register is left in
            the error state with its message
    """
    if not register.try_start():
        raise SyncConflictError()
    return await _execute(register, client, session_factory, options or SyncOptions())


def start_sync(
    register: SyncStatusRegister,
    client_factory: Callable[[], PokemonTCGClient],
    session_factory: SessionFactory,
    options: SyncOptions | None = None,
) -> asyncio.Task[None]:
    """
    Start a catalog sync in the background and return at once.

    The run owns its own HTTP client and database sessions, so it outlives
    the request that triggered it.

    Raises:
        SyncConflictError: If a sync is already running
    """
    if not register.try_start():
        raise SyncConflictError()

    async def _run() -> None:
        try:
            async with client_factory() as client:
                await _execute(register, client, session_factory, options or SyncOptions())
        except Exception as e:
            # Faults outside _execute (client setup or teardown) must still end the run
            if register.is_running:
                logger.error("Catalog sync failed: %s", e)
                register.fail(f"Sync failed: {e}")
            raise

    task = asyncio.create_task(_run(), name="catalog-sync")
    _background_tasks.add(task)
    task.add_done_callback(_on_background_done)
    return task


def _on_background_done(task: asyncio.Task[None]) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        logger.warning("Background catalog sync was cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background catalog sync failed: %s", exc)


async def _execute(
    register: SyncStatusRegister,
    client: PokemonTCGClient,
    session_factory: SessionFactory,
    options: SyncOptions,
) -> SyncStats:
    stats = SyncStats()

    try:
        logger.info("Starting catalog sync...")

        stats.total_count = await client.get_total_count()
        stats.total_pages = compute_total_pages(stats.total_count, options.page_size)
        message = (
            f"Found {stats.total_count} total cards. Processing {stats.total_pages} pages..."
        )
        register.update(total_pages=stats.total_pages, message=message)
        logger.info(message)

        for page in range(1, stats.total_pages + 1):
            logger.info("Processing page %d/%d...", page, stats.total_pages)

            try:
                card_page = await client.fetch_page(page, options.page_size)
            except CatalogSourceError as e:
                # A lost page is counted and skipped; later pages may still load
                logger.error("Error fetching page %d: %s", page, e)
                stats.errors += 1
            else:
                await _process_page(card_page, register, session_factory, options, stats)

            register.update(
                current_page=page,
                progress=page * 100 // stats.total_pages,
                message=f"Processed page {page}/{stats.total_pages}",
                **stats.counters(),
            )

            if page < stats.total_pages and options.page_delay > 0:
                await asyncio.sleep(options.page_delay)

    except Exception as e:
        logger.error("Catalog sync failed: %s", e)
        register.update(**stats.counters())
        register.fail(f"Sync failed: {e}")
        raise

    summary = f"Sync completed! Processed {stats.cards_processed} cards in {stats.elapsed:.2f}s"
    logger.info(
        "%s (inserted %d, updated %d, errors %d)",
        summary,
        stats.cards_inserted,
        stats.cards_updated,
        stats.errors,
    )
    register.update(**stats.counters())
    register.complete(summary)
    return stats


async def _process_page(
    card_page: CardPage,
    register: SyncStatusRegister,
    session_factory: SessionFactory,
    options: SyncOptions,
    stats: SyncStats,
) -> None:
    """Upsert every card on one page, isolating per-card faults."""
    async with session_factory() as session:
        for raw in card_page.data:
            card_id = raw.get("id") if isinstance(raw, dict) else None
            try:
                record = parse_catalog_record(raw)
                inserted = await upsert_catalog_card(session, record)
                await session.commit()
            except (OperationalError, InterfaceError):
                # Lost the database; every remaining card would fail the same way
                raise
            except Exception as e:
                await session.rollback()
                stats.errors += 1
                logger.warning("Error processing card %s: %s", card_id, e)
                register.update(errors=stats.errors)
                continue

            stats.cards_processed += 1
            if inserted:
                stats.cards_inserted += 1
            else:
                stats.cards_updated += 1

            if stats.cards_processed % options.progress_interval == 0:
                register.update(
                    **stats.counters(),
                    message=f"Processed {stats.cards_processed} cards...",
                )
                logger.info("Processed %d cards...", stats.cards_processed)
