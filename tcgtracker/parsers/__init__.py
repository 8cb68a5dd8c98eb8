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

__all__ = [
    "RecordParseError",
    "optional_text",
    "parse_catalog_record",
    "parse_condition",
    "parse_decimal",
    "parse_price",
    "parse_psa_rating",
    "parse_quantity",
]
