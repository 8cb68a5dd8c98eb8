"""
Run a full catalog sync from the command line.

Mirrors the whole external catalog into the configured database and waits
for it to finish. Useful for the initial load, or from cron, since the web
service has no scheduler of its own.
"""

import asyncio
import logging

from tcgtracker.clients.pokemon_tcg import PokemonTCGClient
from tcgtracker.config import settings
from tcgtracker.db.database import async_session_factory, init_db
from tcgtracker.models.sync_status import SyncStatus, SyncStatusRegister
from tcgtracker.services.catalog_sync import SyncOptions, run_sync

logger = logging.getLogger(__name__)


async def run_catalog_sync() -> SyncStatus:
    """
    Sync the catalog once.

    Uses its own status register; a sync running inside the web service is
    not visible here.

    Returns:
        Final status of the run
    """
    await init_db()

    register = SyncStatusRegister()
    try:
        async with PokemonTCGClient.from_settings(settings) as client:
            await run_sync(
                register,
                client,
                async_session_factory,
                SyncOptions.from_settings(settings),
            )
    except Exception as e:
        logger.error("Catalog sync failed: %s", e)
        raise

    final = register.snapshot()
    logger.info(final.message)
    return final


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_catalog_sync())


if __name__ == "__main__":
    main()
