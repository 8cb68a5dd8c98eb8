"""Tests for the proxied card search endpoint."""

import httpx
import respx
from httpx import AsyncClient

CARDS_URL = "https://api.pokemontcg.io/v2/cards"


class TestSearchCards:
    @respx.mock
    async def test_search_by_fields(self, client: AsyncClient, make_raw_card, cards_page) -> None:
        """Field searches are translated into the source's query syntax."""
        route = respx.get(CARDS_URL).mock(
            return_value=httpx.Response(200, json=cards_page([make_raw_card()], 1, 20, 1))
        )

        response = await client.get(
            "/pokemon/search", params={"name": "char", "set": "Base", "pageSize": 20}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["totalCount"] == 1
        assert body["pageSize"] == 20
        assert body["data"][0]["id"] == "base1-4"
        assert route.calls.last.request.url.params["q"] == 'name:Char* set.name:"Base"'

    @respx.mock
    async def test_repeat_search_is_cached(
        self, client: AsyncClient, make_raw_card, cards_page
    ) -> None:
        route = respx.get(CARDS_URL).mock(
            return_value=httpx.Response(200, json=cards_page([make_raw_card()], 1, 20, 1))
        )

        await client.get("/pokemon/search", params={"q": "Charizard"})
        await client.get("/pokemon/search", params={"q": "Charizard"})

        assert route.call_count == 1

    @respx.mock
    async def test_source_failure(self, client: AsyncClient) -> None:
        """An unreachable source is a 500 explaining the upstream failure."""
        respx.get(CARDS_URL).mock(return_value=httpx.Response(503))

        response = await client.get("/pokemon/search", params={"q": "Charizard"})

        assert response.status_code == 500
        body = response.json()
        assert body["kind"] == "external_api_error"
        assert body["error"] == "Failed to search cards"

    async def test_page_size_validated(self, client: AsyncClient) -> None:
        response = await client.get("/pokemon/search", params={"pageSize": 1000})

        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_input"
        assert response.json()["detail"] == "pageSize"
