"""Tests for source record parsing and request field coercion."""

from decimal import Decimal

import pytest

from tcgtracker.models.failure import InvalidFieldError
from tcgtracker.parsers.card_input import (
    optional_text,
    parse_condition,
    parse_decimal,
    parse_psa_rating,
    parse_quantity,
)
from tcgtracker.parsers.pokemon_tcg import (
    RecordParseError,
    parse_catalog_record,
    parse_price,
)


class TestParseCatalogRecord:
    def test_parses_full_record(self, make_raw_card) -> None:
        """Reads identity, set, images and the five TCGplayer prices."""
        raw = make_raw_card(
            normal={"low": 1.5, "mid": 2.25, "market": 2.0},
            holofoil={"mid": 10.0, "market": 12.5},
        )

        record = parse_catalog_record(raw)

        assert record.id == "base1-4"
        assert record.name == "Charizard"
        assert record.set_id == "base1"
        assert record.set_name == "Base"
        assert record.set_series == "Base"
        assert record.number == "4"
        assert record.hp == "120"
        assert record.subtypes == ["Stage 2"]
        assert record.types == ["Fire"]
        assert record.national_pokedex_numbers == [6]
        assert record.flavor_text.startswith("Spits fire")
        assert record.images_large.endswith("_hires.png")
        assert record.tcgplayer_url.endswith("/tcgplayer/base1-4")
        assert record.cardmarket_url.endswith("/cardmarket/base1-4")
        assert record.price_normal_market == Decimal("2.0")
        assert record.price_normal_mid == Decimal("2.25")
        assert record.price_normal_low == Decimal("1.5")
        assert record.price_holofoil_market == Decimal("12.5")
        assert record.price_holofoil_mid == Decimal("10.0")

    def test_missing_prices_are_none(self, make_raw_card) -> None:
        record = parse_catalog_record(make_raw_card())

        assert record.price_normal_market is None
        assert record.price_holofoil_mid is None
        assert record.best_price() is None

    def test_best_price_follows_completeness_order(self, make_raw_card) -> None:
        record = parse_catalog_record(
            make_raw_card(normal={"low": 1.0}, holofoil={"market": 30.0})
        )

        assert record.best_price() == Decimal("1.0")

    def test_minimal_record(self) -> None:
        """Only id, name and set are required."""
        record = parse_catalog_record(
            {"id": "xy1-1", "name": "Venusaur-EX", "set": {"id": "xy1", "name": "XY"}}
        )

        assert record.number is None
        assert record.types == []
        assert record.images_small is None

    @pytest.mark.parametrize(
        "raw",
        [
            {"name": "No Id", "set": {"id": "s", "name": "S"}},
            {"id": "no-name", "set": {"id": "s", "name": "S"}},
            {"id": "no-set", "name": "Card"},
            {"id": "bad-set", "name": "Card", "set": "Base"},
            {"id": "bad-types", "name": "Card", "set": {"id": "s", "name": "S"}, "types": "Fire"},
            "not a card",
        ],
    )
    def test_rejects_malformed_records(self, raw) -> None:
        with pytest.raises(RecordParseError):
            parse_catalog_record(raw)


class TestParsePrice:
    def test_zero_means_no_price(self) -> None:
        assert parse_price(0) is None
        assert parse_price(0.0) is None

    def test_numbers_and_strings(self) -> None:
        assert parse_price(4.99) == Decimal("4.99")
        assert parse_price("12.50") == Decimal("12.50")

    def test_invalid(self) -> None:
        with pytest.raises(RecordParseError, match="Invalid price"):
            parse_price("cheap")


class TestParseDecimal:
    def test_accepts_numbers_and_numeric_strings(self) -> None:
        assert parse_decimal(50) == Decimal("50")
        assert parse_decimal("12.99") == Decimal("12.99")
        assert parse_decimal(" 3.5 ") == Decimal("3.5")

    def test_rounds_to_cents(self) -> None:
        """Amounts are kept at the two decimal places the store holds."""
        assert parse_decimal("12.345") == Decimal("12.35")
        assert parse_decimal(0.125) == Decimal("0.13")
        assert str(parse_decimal("7")) == "7.00"

    @pytest.mark.parametrize("raw", [None, True, "abc", "NaN", "Infinity", ""])
    def test_rejects_non_numbers(self, raw) -> None:
        with pytest.raises(InvalidFieldError, match="value must be a number"):
            parse_decimal(raw)

    def test_rejects_negative(self) -> None:
        with pytest.raises(InvalidFieldError, match="cannot be negative"):
            parse_decimal("-1")


class TestParseQuantity:
    def test_missing_or_non_numeric_means_one(self) -> None:
        """Missing, null and non-numeric quantities default to a single copy."""
        assert parse_quantity(None) == 1
        assert parse_quantity("") == 1
        assert parse_quantity("lots") == 1

    def test_leading_integer(self) -> None:
        assert parse_quantity(3) == 3
        assert parse_quantity("3") == 3
        assert parse_quantity("3 copies") == 3
        assert parse_quantity(2.9) == 2

    @pytest.mark.parametrize("raw", [0, -2, "0"])
    def test_rejects_below_one(self, raw) -> None:
        with pytest.raises(InvalidFieldError, match="at least 1"):
            parse_quantity(raw)


class TestOtherFields:
    def test_psa_rating(self) -> None:
        assert parse_psa_rating(None) is None
        assert parse_psa_rating("") is None
        assert parse_psa_rating("10") == 10
        with pytest.raises(InvalidFieldError):
            parse_psa_rating(11)
        with pytest.raises(InvalidFieldError):
            parse_psa_rating("gem mint")

    def test_condition(self) -> None:
        assert parse_condition("Near Mint") == "Near Mint"
        with pytest.raises(InvalidFieldError, match="condition must be one of"):
            parse_condition("Pristine")

    def test_optional_text(self) -> None:
        assert optional_text(None) is None
        assert optional_text("   ") is None
        assert optional_text(" 4 ") == "4"
        assert optional_text(4) == "4"
