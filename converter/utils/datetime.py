"""UTC helpers shared by providers, the ledger and the HTTP layer."""

from __future__ import annotations

from datetime import UTC, datetime


def ensure_utc(value: datetime) -> datetime:
    """Return a timezone-aware datetime in UTC; naive values are assumed UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def from_unix(seconds: int | float) -> datetime:
    """Convert a unix epoch value (as sent by rate APIs) into an aware UTC datetime."""

    return datetime.fromtimestamp(float(seconds), tz=UTC)
