"""Tests for catalog sync endpoints."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.db.operations import upsert_catalog_card
from tcgtracker.models.card import CatalogRecord
from tcgtracker.models.sync_status import SyncStatusRegister


class TestTriggerSync:
    async def test_accepted(self, client: AsyncClient, sync_register: SyncStatusRegister) -> None:
        """Starting a sync returns 202 at once with the running status."""

        def fake_start(register, *args, **kwargs):
            register.try_start()
            return MagicMock()

        with patch("tcgtracker.api.sync.start_sync", side_effect=fake_start) as start:
            response = await client.post("/pokemon/sync")

        assert response.status_code == 202
        body = response.json()
        assert body["success"] is True
        assert body["status"]["status"] == "running"
        assert start.call_args.args[0] is sync_register

    async def test_conflict_while_running(
        self, client: AsyncClient, sync_register: SyncStatusRegister
    ) -> None:
        """A second trigger gets 409 and the in-flight counters survive."""
        sync_register.try_start()
        sync_register.update(current_page=4, cards_processed=1000)

        response = await client.post("/pokemon/sync")

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Sync is already in progress"
        assert body["status"]["cards_processed"] == 1000
        assert sync_register.snapshot().current_page == 4


class TestSyncStatus:
    async def test_idle_status_with_empty_catalog(self, client: AsyncClient) -> None:
        response = await client.get("/pokemon/sync/status")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "idle"
        assert body["message"] == "No sync in progress"
        assert body["catalog_stats"] == {"total_cards": 0, "last_synced": None}

    async def test_merges_register_and_catalog_stats(
        self,
        client: AsyncClient,
        session: AsyncSession,
        sync_register: SyncStatusRegister,
    ) -> None:
        await upsert_catalog_card(
            session,
            CatalogRecord(
                id="base1-4",
                name="Charizard",
                set_id="base1",
                set_name="Base",
                price_normal_market=Decimal("300"),
            ),
        )
        await session.commit()
        sync_register.try_start()
        sync_register.update(total_pages=20, current_page=5, progress=25)

        response = await client.get("/pokemon/sync/status")

        body = response.json()
        assert body["status"] == "running"
        assert body["progress"] == 25
        assert body["total_pages"] == 20
        assert body["catalog_stats"]["total_cards"] == 1
        assert body["catalog_stats"]["last_synced"] is not None

    async def test_store_failure_reports_zero_stats(
        self, client: AsyncClient, async_engine, sync_register: SyncStatusRegister
    ) -> None:
        """Progress stays readable when the catalog table cannot be queried."""
        async with async_engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE tcg_catalog")
        sync_register.try_start()

        response = await client.get("/pokemon/sync/status")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "running"
        assert body["catalog_stats"] == {"total_cards": 0, "last_synced": None}


class TestCatalogReadiness:
    async def test_empty_catalog(self, client: AsyncClient) -> None:
        response = await client.get("/pokemon/sync")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["total_cards"] == 0
        assert "empty" in body["message"]

    async def test_missing_table(self, client: AsyncClient, async_engine) -> None:
        """A missing catalog table is reported, not raised."""
        async with async_engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE tcg_catalog")

        response = await client.get("/pokemon/sync")

        assert response.status_code == 200
        assert response.json()["status"] == "not_initialized"


class TestStoreErrors:
    async def test_missing_collection_table_is_500_with_hint(
        self, client: AsyncClient, async_engine
    ) -> None:
        """Store failures surface as a generic 500 that says the table is missing."""
        async with async_engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE pokemon_cards")

        response = await client.get("/cards")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Operation failed"
        assert body["kind"] == "table_missing"
