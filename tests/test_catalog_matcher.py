"""Tests for matching owned cards to catalog cards."""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.db.operations import upsert_catalog_card
from tcgtracker.models.card import CatalogRecord
from tcgtracker.services.catalog_matcher import find_match


async def _add(session: AsyncSession, card_id: str, **fields) -> None:
    values = {"name": "Charizard", "set_id": "base1", "set_name": "Base", "number": "4"}
    values.update(fields)
    await upsert_catalog_card(session, CatalogRecord(id=card_id, **values))


class TestExactMatch:
    async def test_matches_name_set_number_case_insensitively(
        self, session: AsyncSession
    ) -> None:
        """Name and set compare without regard to case."""
        await _add(session, "base1-4", price_normal_market=Decimal("300"))
        await _add(session, "base1-4b", number="104", price_normal_market=Decimal("5"))
        await session.commit()

        match = await find_match(session, "charizard", "BASE", "4")

        assert match is not None
        assert match.id == "base1-4"

    async def test_prefers_most_complete_price(self, session: AsyncSession) -> None:
        """A candidate with a normal market price beats one with only a mid price."""
        await _add(session, "a-mid-only", price_normal_mid=Decimal("20"))
        await _add(session, "b-market", price_normal_market=Decimal("25"))
        await session.commit()

        match = await find_match(session, "Charizard", "Base", "4")

        assert match.id == "b-market"

    async def test_holofoil_prices_rank_below_normal(self, session: AsyncSession) -> None:
        await _add(session, "a-holo", price_holofoil_market=Decimal("500"))
        await _add(session, "b-low", price_normal_low=Decimal("1"))
        await _add(session, "c-none")
        await session.commit()

        match = await find_match(session, "Charizard", "Base", "4")

        assert match.id == "b-low"


class TestLooseMatch:
    async def test_falls_back_when_number_does_not_match(self, session: AsyncSession) -> None:
        """A wrong number still finds the card by name and set."""
        await _add(session, "base1-4", price_normal_market=Decimal("300"))
        await session.commit()

        match = await find_match(session, "Charizard", "Base", "999")

        assert match is not None
        assert match.id == "base1-4"

    async def test_without_number_prefers_numbered_then_lowest(
        self, session: AsyncSession
    ) -> None:
        """Among equally priced candidates, numbered cards come first, lowest number first."""
        await _add(session, "x-unnumbered", number=None)
        await _add(session, "x-7", number="7")
        await _add(session, "x-3", number="3")
        await session.commit()

        match = await find_match(session, "Charizard", "Base")

        assert match.id == "x-3"

    async def test_rarity_narrows_candidates(self, session: AsyncSession) -> None:
        await _add(session, "holo", rarity="Rare Holo", price_normal_market=Decimal("300"))
        await _add(session, "promo", rarity="Promo", number="99")
        await session.commit()

        match = await find_match(session, "Charizard", "Base", None, "promo")

        assert match.id == "promo"

    async def test_no_match_returns_none(self, session: AsyncSession) -> None:
        """An unknown card is not an error."""
        await _add(session, "base1-4")
        await session.commit()

        assert await find_match(session, "Mewtwo", "Base", "10") is None
        assert await find_match(session, "Charizard", "Jungle") is None
