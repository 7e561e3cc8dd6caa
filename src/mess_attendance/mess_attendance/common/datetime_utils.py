from __future__ import annotations

from datetime import datetime, time, timezone


def parse_hhmm(value: str) -> time:
    """Parse 'HH:MM' (as used in mess settings) into a time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing 'Z' is accepted for UTC."""
    value = value.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(value))


def ensure_aware(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)
