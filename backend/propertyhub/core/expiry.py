"""Token Expiry — parse "<N><unit>" duration strings into absolute expiry datetimes.

Invariants:
    - Valid units: d (days), h (hours), m (minutes), s (seconds)
    - calculate_expiry_date(duration, now) == now + N * unit exactly
    - Malformed strings raise ValidationError; there is no silent default
    - All returned datetimes are timezone-aware UTC
"""

import re
from datetime import datetime, timedelta, timezone

from propertyhub.core.errors import ValidationError

_DURATION_PATTERN = re.compile(r"^(\d+)([dhms])$")

_UNIT_SECONDS = {
    "d": 86_400,
    "h": 3_600,
    "m": 60,
    "s": 1,
}


def parse_duration(duration: str) -> timedelta:
    """Parse "7d" / "12h" / "15m" / "30s" into a timedelta."""
    if not isinstance(duration, str):
        raise ValidationError(
            f"Invalid duration: expected a string like '7d', got {type(duration).__name__}",
            field="duration",
        )
    match = _DURATION_PATTERN.match(duration.strip())
    if not match:
        raise ValidationError(
            f"Invalid duration format '{duration}': expected <number><unit> "
            "where unit is one of d, h, m, s",
            field="duration",
        )
    amount, unit = int(match.group(1)), match.group(2)
    return timedelta(seconds=amount * _UNIT_SECONDS[unit])


def calculate_expiry_date(duration: str, now: datetime | None = None) -> datetime:
    """Return now + duration. `now` defaults to the current UTC time."""
    start = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    return start + parse_duration(duration)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    current = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    return ensure_utc(expires_at) <= current
