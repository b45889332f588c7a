"""Parsing of user-supplied date range bounds."""

from datetime import datetime, time, timedelta

from sceneit_engine.common.exceptions import InvalidQueryError
from sceneit_engine.common.models import as_utc


def parse_date_bound(value: str | None, *, end: bool = False) -> datetime | None:
    """Parse an ISO date or datetime into an inclusive UTC bound.

    A bare date (``2024-05-01``) as an upper bound covers the whole day.
    Naive values are taken as UTC.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise InvalidQueryError(f"Invalid date: {value!r}") from exc
    if end and len(value.strip()) == 10 and parsed.time() == time.min:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return as_utc(parsed)
