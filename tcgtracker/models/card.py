from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class CardCondition(str, Enum):
    """Physical condition of an owned card, best first."""

    MINT = "Mint"
    NEAR_MINT = "Near Mint"
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"

    @classmethod
    def ordered(cls) -> list[str]:
        return [c.value for c in cls]


DEFAULT_CONDITION = CardCondition.NEAR_MINT.value


@dataclass(frozen=True, slots=True)
class CatalogRecord:
    """
    A catalog card parsed from the external source, ready to upsert.

    Attributes:
        id: Source identifier (e.g. "base1-4")
        number: Collector number; text such as "TG12" or "SWSH001" is common
        hp: Hit points as printed, may be non-numeric
        price_*: TCGplayer prices for the normal and holofoil printings
    """

    id: str
    name: str
    set_id: str
    set_name: str
    supertype: str | None = None
    subtypes: list[str] = field(default_factory=list)
    hp: str | None = None
    types: list[str] = field(default_factory=list)
    set_series: str | None = None
    number: str | None = None
    artist: str | None = None
    rarity: str | None = None
    flavor_text: str | None = None
    national_pokedex_numbers: list[int] = field(default_factory=list)
    images_small: str | None = None
    images_large: str | None = None
    tcgplayer_url: str | None = None
    cardmarket_url: str | None = None
    price_normal_market: Decimal | None = None
    price_normal_mid: Decimal | None = None
    price_normal_low: Decimal | None = None
    price_holofoil_market: Decimal | None = None
    price_holofoil_mid: Decimal | None = None

    def best_price(self) -> Decimal | None:
        """First populated price in completeness order."""
        return first_price(
            self.price_normal_market,
            self.price_normal_mid,
            self.price_normal_low,
            self.price_holofoil_market,
            self.price_holofoil_mid,
        )


def first_price(*prices: Decimal | None) -> Decimal | None:
    for price in prices:
        if price:
            return price
    return None
