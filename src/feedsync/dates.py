"""Date parsing for feed timestamps.

ISO-8601 (Atom) is tried first, then RFC-822 (RSS). Every result is an
aware UTC datetime; values without an offset are taken as UTC.
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime


def parse_date(value: str) -> datetime | None:
    """Parse ``value`` into a UTC datetime, or return None if no format matches."""
    value = value.strip()
    if not value:
        return None

    parsed = _parse_iso8601(value) or _parse_rfc822(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # The offset shifts the value past datetime.min or datetime.max
        return None


def parse_date_or_now(value: str) -> datetime:
    """Like :func:`parse_date`, falling back to the current time."""
    return parse_date(value) or datetime.now(timezone.utc)


def _parse_iso8601(value: str) -> datetime | None:
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _parse_rfc822(value: str) -> datetime | None:
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError, OverflowError):
        return None
