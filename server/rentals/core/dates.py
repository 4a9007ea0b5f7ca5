"""Calendar-date normalization.

Every date that enters the service passes through ``to_utc_date`` exactly
once, at the request boundary. Past that point only ``datetime.date`` values
are handled, so no comparison ever mixes time-of-day or timezone offsets.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Iterator

ONE_DAY = timedelta(days=1)


def to_utc_date(value: date | datetime | str) -> date:
    """
    Normalize a wall-clock or calendar value to its UTC calendar date.

    Args:
        value: A ``date``, a ``datetime`` (naive values are taken as UTC) or
            an ISO-8601 string such as ``2025-11-10`` or
            ``2025-11-10T23:30:00-05:00``

    Returns:
        The calendar date at UTC midnight

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return to_utc_date(datetime.fromisoformat(text))

    raise ValueError(f"Cannot interpret {value!r} as a calendar date")


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from ``start`` to ``end``, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += ONE_DAY


def days_in_range(start: date, end: date) -> int:
    """Number of calendar days in the inclusive range (0 when end < start)."""
    return max((end - start).days + 1, 0)
