# catalog-it Timestamp Utilities
# UTC timestamps stored as ISO strings in the catalog

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """
    Format a datetime as an ISO-8601 UTC string.

    Naive datetimes are assumed to already be UTC. Microseconds are dropped
    so equal instants always format identically.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).replace(microsecond=0).isoformat()


def parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an HTTP date header (RFC 7231) or an ISO-8601 string.

    Args:
        value: Header value, e.g. ``"Wed, 21 Oct 2015 07:28:00 GMT"``.

    Returns:
        Aware UTC datetime, or None if the value is missing or unparseable.
    """
    if not value:
        return None

    value = value.strip()
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def run_stamp(moment: Optional[datetime] = None) -> str:
    """
    Timestamp used to name one archive run, e.g. ``2024-01-01T00:00:00Z``.
    """
    moment = moment or utc_now()
    return to_iso(moment).replace("+00:00", "Z")


def from_unix(value: object) -> Optional[str]:
    """ISO string for a unix time in seconds, or None if it is not a number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return to_iso(datetime.fromtimestamp(value, timezone.utc))
    except (OverflowError, OSError, ValueError):
        return None
