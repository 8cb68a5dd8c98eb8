"""
Pokemon TCG API record parser.

Turns one raw card object from https://api.pokemontcg.io/v2/cards into a
CatalogRecord. Only the fields the catalog mirrors are read; everything
else in the payload (attacks, legalities, cardmarket prices) is ignored.

API docs: https://docs.pokemontcg.io/
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from tcgtracker.models.card import CatalogRecord


class RecordParseError(ValueError):
    """Raised when a source record is missing required data or is malformed."""

    pass


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _str_list(value: Any, field: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise RecordParseError(f"{field} must be a list, got {type(value).__name__}")
    return [str(v) for v in value]


def _int_list(value: Any, field: str) -> list[int]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise RecordParseError(f"{field} must be a list, got {type(value).__name__}")
    try:
        return [int(v) for v in value]
    except (TypeError, ValueError) as e:
        raise RecordParseError(f"{field} must contain integers") from e


def parse_price(value: Any) -> Decimal | None:
    """
    Parse a price from the source.

    Missing and zero prices are both treated as "no price".
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation as e:
        raise RecordParseError(f"Invalid price: {value!r}") from e
    if not price.is_finite():
        raise RecordParseError(f"Invalid price: {value!r}")
    return price or None


def parse_catalog_record(raw: dict[str, Any]) -> CatalogRecord:
    """
    Parse one card object from the source.

    Raises:
        RecordParseError: If id, name or set is missing, or a field has the
            wrong shape
    """
    if not isinstance(raw, dict):
        raise RecordParseError(f"Card record must be an object, got {type(raw).__name__}")

    card_id = raw.get("id")
    name = raw.get("name")
    card_set = raw.get("set")
    if not card_id or not name:
        raise RecordParseError("Card record is missing id or name")
    if not isinstance(card_set, dict) or not card_set.get("id") or not card_set.get("name"):
        raise RecordParseError(f"Card {card_id} is missing set information")

    images = raw.get("images") or {}
    tcgplayer = raw.get("tcgplayer") or {}
    cardmarket = raw.get("cardmarket") or {}
    prices = tcgplayer.get("prices") or {}
    normal = prices.get("normal") or {}
    holofoil = prices.get("holofoil") or {}

    return CatalogRecord(
        id=str(card_id),
        name=str(name),
        set_id=str(card_set["id"]),
        set_name=str(card_set["name"]),
        supertype=_optional_str(raw.get("supertype")),
        subtypes=_str_list(raw.get("subtypes"), "subtypes"),
        hp=_optional_str(raw.get("hp")),
        types=_str_list(raw.get("types"), "types"),
        set_series=_optional_str(card_set.get("series")),
        number=_optional_str(raw.get("number")),
        artist=_optional_str(raw.get("artist")),
        rarity=_optional_str(raw.get("rarity")),
        flavor_text=_optional_str(raw.get("flavorText")),
        national_pokedex_numbers=_int_list(
            raw.get("nationalPokedexNumbers"), "nationalPokedexNumbers"
        ),
        images_small=_optional_str(images.get("small")),
        images_large=_optional_str(images.get("large")),
        tcgplayer_url=_optional_str(tcgplayer.get("url")),
        cardmarket_url=_optional_str(cardmarket.get("url")),
        price_normal_market=parse_price(normal.get("market")),
        price_normal_mid=parse_price(normal.get("mid")),
        price_normal_low=parse_price(normal.get("low")),
        price_holofoil_market=parse_price(holofoil.get("market")),
        price_holofoil_mid=parse_price(holofoil.get("mid")),
    )
