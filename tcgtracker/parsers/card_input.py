"""
Coercion of user-submitted collection card fields.

Form clients send numbers as strings as often as not, so value, quantity
and PSA rating are accepted loosely and normalized here.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from tcgtracker.models.card import CardCondition
from tcgtracker.models.failure import InvalidFieldError

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

MIN_PSA_RATING = 1
MAX_PSA_RATING = 10

# Money is stored with two decimal places
CENTS = Decimal("0.01")


def parse_decimal(raw: Any, field: str = "value") -> Decimal:
    """
    Parse a monetary amount given as a number or numeric string. Extra
    precision is rounded half-up to whole cents, matching what is stored.

    Raises:
        InvalidFieldError: If the value is not a finite, non-negative number
    """
    if isinstance(raw, bool) or raw is None:
        raise InvalidFieldError(field, f"{field} must be a number")
    try:
        amount = Decimal(str(raw).strip())
        if amount.is_finite():
            amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise InvalidFieldError(field, f"{field} must be a number") from e
    if not amount.is_finite():
        raise InvalidFieldError(field, f"{field} must be a number")
    if amount < 0:
        raise InvalidFieldError(field, f"{field} cannot be negative")
    return amount


def _leading_int(raw: Any) -> int | None:
    """Integer prefix of raw ("3", 3, 3.7, "3 copies" -> 3), or None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw == raw else None
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else None


def parse_quantity(raw: Any) -> int:
    """
    Parse a copy count.

    Missing or non-numeric input means a single copy. An explicit count
    below one is rejected.
    """
    quantity = _leading_int(raw)
    if quantity is None:
        return 1
    if quantity < 1:
        raise InvalidFieldError("quantity", "quantity must be at least 1")
    return quantity


def parse_psa_rating(raw: Any) -> int | None:
    """Parse a PSA grade; empty input means ungraded."""
    if raw is None or raw == "":
        return None
    rating = _leading_int(raw)
    if rating is None or not MIN_PSA_RATING <= rating <= MAX_PSA_RATING:
        raise InvalidFieldError(
            "psa_rating",
            f"psa_rating must be between {MIN_PSA_RATING} and {MAX_PSA_RATING}",
        )
    return rating


def parse_condition(raw: Any) -> str:
    """Validate a condition against the grading scale."""
    allowed = CardCondition.ordered()
    if raw not in allowed:
        raise InvalidFieldError(
            "condition",
            f"condition must be one of: {', '.join(allowed)}",
        )
    return str(raw)


def optional_text(raw: Any) -> str | None:
    """Empty strings are stored as NULL."""
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None
