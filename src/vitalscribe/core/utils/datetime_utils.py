"""
Date and time utility functions.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil import parser as dparser

# At least two numeric groups, e.g. 2024-01-15, 15/01/2024, Jan 15 2024
_DATE_SHAPE = re.compile(r"\d+\D+\d+")
_YEAR_FIRST = re.compile(r"^\s*\d{4}[-/.]")


def get_current_timestamp() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def format_date(value: Union[date, datetime, None]) -> str:
    """Format a date or timestamp as ISO day precision, empty for None."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(text: Optional[str], day_first: bool = True) -> Optional[datetime]:
    """Parse a free-text date or timestamp into an aware UTC datetime.

    ISO-8601 is tried first. Anything else goes through dateutil with
    ``day_first`` applied to ambiguous numeric dates; strings that begin with a
    four-digit year are always read year-month-day. Returns None for
    unparseable input.
    """
    if text is None:
        return None
    text = str(text).strip()
    if not text or not _DATE_SHAPE.search(text):
        return None

    try:
        return _as_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    year_first = bool(_YEAR_FIRST.match(text))
    try:
        parsed = dparser.parse(
            text,
            dayfirst=day_first and not year_first,
            yearfirst=year_first,
        )
    except (dparser.ParserError, ValueError, OverflowError):
        return None
    return _as_utc(parsed)


def parse_calendar_date(text: Optional[str], day_first: bool = True) -> Optional[date]:
    """Parse free text into a calendar date (day precision), or None."""
    parsed = parse_datetime(text, day_first=day_first)
    return parsed.date() if parsed else None
