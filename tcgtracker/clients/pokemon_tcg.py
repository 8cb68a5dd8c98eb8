"""
Pokemon TCG API client.

Thin async wrapper over https://api.pokemontcg.io/v2 used by the catalog
sync (paged enumeration of every card) and by the search proxy (ad-hoc
queries with a short-lived cache).

The API pages at most 250 cards per request and throttles unauthenticated
clients; an API key raises the limit and is sent when configured.
"""

import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from tcgtracker.config import Settings

USER_AGENT = "TCGTracker/1.0"
MAX_PAGE_SIZE = 250
DEFAULT_SEARCH_PAGE_SIZE = 20


class CatalogSourceError(Exception):
    """Raised when the external catalog source cannot be reached or answers badly."""

    pass


@dataclass
class CardPage:
    """One page of the /cards listing."""

    data: list[dict[str, Any]]
    page: int
    page_size: int
    count: int
    total_count: int

    @classmethod
    def from_json(cls, payload: Any) -> "CardPage":
        if not isinstance(payload, dict):
            raise CatalogSourceError("Unexpected response body from catalog source")
        data = payload.get("data") or []
        if not isinstance(data, list):
            raise CatalogSourceError("Catalog source returned a non-list 'data' field")
        return cls(
            data=data,
            page=int(payload.get("page") or 1),
            page_size=int(payload.get("pageSize") or len(data)),
            count=int(payload.get("count") or len(data)),
            total_count=int(payload.get("totalCount") or 0),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "page": self.page,
            "pageSize": self.page_size,
            "count": self.count,
            "totalCount": self.total_count,
        }


@dataclass
class SearchCache:
    """Time-bounded cache of search responses keyed by request URL."""

    ttl: float
    _entries: dict[str, tuple[float, CardPage]] = field(default_factory=dict)

    def get(self, key: str) -> CardPage | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, page = entry
        if time.monotonic() - stored_at >= self.ttl:
            del self._entries[key]
            return None
        return page

    def put(self, key: str, page: CardPage) -> None:
        now = time.monotonic()
        # Drop stale entries so one-off queries do not accumulate
        expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at >= self.ttl]
        for k in expired:
            del self._entries[k]
        self._entries[key] = (now, page)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


def _capitalize(text: str) -> str:
    """Normalize a name to the casing the source indexes ("pikachu" -> "Pikachu")."""
    return text[:1].upper() + text[1:].lower()


def build_search_query(
    q: str | None = None,
    name: str | None = None,
    set_name: str | None = None,
    number: str | None = None,
    rarity: str | None = None,
) -> str | None:
    """
    Build the source's Lucene-like `q` parameter.

    A free-text `q` is taken as an exact card name unless it already uses
    query syntax (a colon or a quote). Otherwise the individual fields are
    combined; a name there is a prefix match.
    """
    if q:
        if ":" in q or '"' in q:
            return q
        return f'name:"{_capitalize(q)}"'

    parts: list[str] = []
    if name:
        parts.append(f"name:{_capitalize(name)}*")
    if set_name:
        parts.append(f'set.name:"{set_name}"')
    if number:
        parts.append(f"number:{number}")
    if rarity:
        parts.append(f'rarity:"{rarity}"')
    return " ".join(parts) or None


class PokemonTCGClient:
    """
    Async client for the Pokemon TCG API.

    Use as an async context manager, or pass an existing httpx.AsyncClient
    (whose lifetime the caller then owns).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if api_key:
            headers["X-Api-Key"] = api_key
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PokemonTCGClient":
        return cls(
            base_url=settings.pokemon_tcg_api_url,
            api_key=settings.pokemon_tcg_api_key,
            timeout=settings.http_timeout,
        )

    async def __aenter__(self) -> "PokemonTCGClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._http.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise CatalogSourceError(
                f"API error: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise CatalogSourceError(f"Failed to reach catalog source: {e}") from e
        except ValueError as e:
            raise CatalogSourceError("Catalog source returned invalid JSON") from e

    async def fetch_page(
        self, page: int, page_size: int = MAX_PAGE_SIZE, query: str = "*"
    ) -> CardPage:
        """
        Fetch one page of cards.

        Raises:
            CatalogSourceError: If the request fails or the body is malformed
        """
        payload = await self._get(
            "/cards",
            params={"q": query, "page": page, "pageSize": min(page_size, MAX_PAGE_SIZE)},
        )
        return CardPage.from_json(payload)

    async def get_total_count(self, query: str = "*") -> int:
        """Number of cards matching `query`, from a single-card page."""
        first = await self.fetch_page(page=1, page_size=1, query=query)
        return first.total_count

    async def search(
        self,
        q: str | None = None,
        name: str | None = None,
        set_name: str | None = None,
        number: str | None = None,
        rarity: str | None = None,
        page: int | None = None,
        page_size: int = DEFAULT_SEARCH_PAGE_SIZE,
        cache: SearchCache | None = None,
    ) -> CardPage:
        """
        Search the source.

        An exact-name `q` that finds nothing is retried once as a name
        prefix match.
        """
        params: dict[str, Any] = {"pageSize": min(page_size, MAX_PAGE_SIZE)}
        query = build_search_query(q, name, set_name, number, rarity)
        if query:
            params["q"] = query
        if page:
            params["page"] = page

        result = await self._cached_search(params, cache)

        if q and ":" not in q and '"' not in q and not result.data:
            wildcard = {"q": f"name:{_capitalize(q)}*", "pageSize": params["pageSize"]}
            result = await self._cached_search(wildcard, cache)

        return result

    async def _cached_search(self, params: dict[str, Any], cache: SearchCache | None) -> CardPage:
        key = str(httpx.URL("/cards", params=params))
        if cache is not None:
            cached = cache.get(key)
            if cached is not None:
                return cached

        result = CardPage.from_json(await self._get("/cards", params=params))
        if cache is not None:
            cache.put(key, result)
        return result
