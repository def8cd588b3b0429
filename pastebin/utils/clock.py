"""Time helpers.

This module provides:
- utcnow: the default clock, an aware UTC datetime
- to_db: formats a datetime for a TEXT column
- from_db: parses a TEXT column back into an aware datetime
- to_json: formats a datetime for API responses
"""

from collections.abc import Callable
from datetime import UTC, datetime

from ..constants import TIMESTAMP_FORMAT

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Returns the current time in UTC, truncated to seconds."""
    return datetime.now(UTC).replace(microsecond=0)


def to_db(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    return moment.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def from_db(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=UTC)


def to_json(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
