from datetime import date, datetime, timezone
import uuid


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    """ISO-8601 timestamp with millisecond precision and a Z suffix."""
    return utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_match_id() -> str:
    return str(uuid.uuid4())


def parse_match_date(value: str | date | None) -> date | None:
    """Parse a stored match date into a calendar date.

    Match dates are normally plain ``YYYY-MM-DD`` strings, but records that
    came from hand edits or the agent endpoint may carry a full ISO datetime.
    Anything unparseable yields None so callers can drop the record from
    date-based views instead of failing the whole request.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def local_today() -> date:
    """Server-local calendar date; match dates carry no timezone."""
    return datetime.now().date()
