"""Shared utilities used across the pricing engine and the workflow."""

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")

Number = Union[int, float, str, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Convert a user supplied number to ``Decimal`` without float artefacts.

    Examples:
        >>> to_decimal(5.5)
        Decimal('5.5')
        >>> to_decimal("3")
        Decimal('3')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round_currency(value: Decimal) -> Decimal:
    """Round half-up to cents.

    Examples:
        >>> round_currency(Decimal("46.6666"))
        Decimal('46.67')
    """
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_key(value: str) -> str:
    """Lower-case a free-form identifier and fold ``-`` and spaces into ``_``.

    Examples:
        >>> normalize_key(" Live-In ")
        'live_in'
        >>> normalize_key("Family Hub")
        'family_hub'
    """
    return value.strip().lower().replace("-", "_").replace(" ", "_")


def parse_booking_date(value: Union[str, date, datetime]) -> Union[date, datetime]:
    """Parse an ISO string into a ``date`` or a UTC-aware ``datetime``.

    Plain ``YYYY-MM-DD`` strings stay calendar dates; anything with a time
    part becomes an aware datetime. Naive datetimes are taken as UTC, which
    is what the booking UI sends (``2025-11-20T22:00:00.000Z``).
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
