"""Tests for catalog API endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.db.operations import upsert_catalog_card
from tcgtracker.parsers.pokemon_tcg import parse_catalog_record


@pytest.fixture
async def catalog(session: AsyncSession, make_raw_card) -> None:
    raws = [
        make_raw_card(normal={"market": 310.5, "mid": 300.0}),
        make_raw_card(
            card_id="base1-2",
            name="Blastoise",
            number="2",
            types=["Water"],
            holofoil={"mid": 150.0},
        ),
        make_raw_card(
            card_id="jungle-60",
            name="Pikachu",
            set_id="jungle",
            set_name="Jungle",
            number="60",
            rarity="Common",
            types=["Lightning"],
        ),
    ]
    for raw in raws:
        await upsert_catalog_card(session, parse_catalog_record(raw))
    await session.commit()


@pytest.mark.usefixtures("catalog")
class TestListCatalog:
    async def test_list_all(self, client: AsyncClient) -> None:
        response = await client.get("/tcg-catalog")

        assert response.status_code == 200
        body = response.json()
        assert [c["name"] for c in body["data"]] == ["Blastoise", "Charizard", "Pikachu"]
        assert body["pagination"] == {"page": 1, "limit": 50, "total": 3, "total_pages": 1}

    async def test_type_filter(self, client: AsyncClient) -> None:
        response = await client.get("/tcg-catalog", params={"type": "Water"})

        assert [c["id"] for c in response.json()["data"]] == ["base1-2"]

    async def test_set_and_rarity_filters(self, client: AsyncClient) -> None:
        response = await client.get("/tcg-catalog", params={"set": "Base", "rarity": "Rare Holo"})

        assert response.json()["pagination"]["total"] == 2

    async def test_card_shape(self, client: AsyncClient) -> None:
        response = await client.get("/tcg-catalog", params={"search": "charizard"})

        card = response.json()["data"][0]
        assert card["id"] == "base1-4"
        assert card["set_name"] == "Base"
        assert card["types"] == ["Fire"]
        assert card["prices"]["market"] == 310.5
        assert card["prices"]["mid"] == 300.0
        assert card["last_synced_at"] is not None

    async def test_filter_options(self, client: AsyncClient) -> None:
        response = await client.get("/tcg-catalog/filters")

        assert response.json() == {
            "sets": ["Base", "Jungle"],
            "rarities": ["Common", "Rare Holo"],
            "series": ["Base"],
            "types": ["Fire", "Lightning", "Water"],
        }


@pytest.mark.usefixtures("catalog")
class TestGetCatalogCard:
    async def test_get_card(self, client: AsyncClient) -> None:
        response = await client.get("/tcg-catalog/jungle-60")

        assert response.status_code == 200
        assert response.json()["name"] == "Pikachu"

    async def test_missing_card(self, client: AsyncClient) -> None:
        response = await client.get("/tcg-catalog/nope-1")

        assert response.status_code == 404
        assert response.json()["error"] == "Card not found in catalog"


@pytest.mark.usefixtures("catalog")
class TestCollectCatalogCard:
    async def test_collect_uses_best_price(self, client: AsyncClient) -> None:
        """With no value given, the best catalog price becomes the value."""
        response = await client.post("/tcg-catalog/base1-4/collect")

        assert response.status_code == 201
        card = response.json()
        assert card["name"] == "Charizard"
        assert card["set"] == "Base"
        assert card["number"] == "4"
        assert card["rarity"] == "Rare Holo"
        assert card["value"] == 310.5
        assert card["quantity"] == 1
        assert card["image_url"].endswith("_hires.png")

        listed = await client.get("/cards")
        assert listed.json()["pagination"]["total"] == 1

    async def test_collect_falls_back_to_holofoil_price(self, client: AsyncClient) -> None:
        response = await client.post("/tcg-catalog/base1-2/collect")

        assert response.json()["value"] == 150.0

    async def test_collect_without_prices_is_zero(self, client: AsyncClient) -> None:
        response = await client.post("/tcg-catalog/jungle-60/collect")

        assert response.json()["value"] == 0.0

    async def test_collect_with_options(self, client: AsyncClient) -> None:
        response = await client.post(
            "/tcg-catalog/base1-4/collect",
            json={"value": "199.99", "quantity": 2, "condition": "Excellent"},
        )

        card = response.json()
        assert card["value"] == 199.99
        assert card["total_value"] == pytest.approx(399.98)
        assert card["condition"] == "Excellent"

    async def test_collect_missing_card(self, client: AsyncClient) -> None:
        response = await client.post("/tcg-catalog/nope-1/collect")

        assert response.status_code == 404

