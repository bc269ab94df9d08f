"""Time helpers.

SQLite stores naive datetimes, so the whole app works in naive UTC.
Services take a ``clock`` callable defaulting to :func:`utcnow` so tests
can pin time.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Normalise an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def epoch_ms(value: datetime) -> int:
    """Milliseconds since the Unix epoch for a naive-UTC or aware datetime."""
    aware = as_naive_utc(value).replace(tzinfo=timezone.utc)
    return int(aware.timestamp() * 1000)
