"""Field normalizers: raw spreadsheet values to canonical typed values.

All functions here are pure; the current date/time can be injected for
deterministic results.
"""

import re
import unicodedata
from datetime import date, datetime
from typing import Any, Optional

from ...core.constants import (
    ABSENT_TEXT_SENTINELS,
    MAX_AGE_EXCLUSIVE,
    MIN_AGE_EXCLUSIVE,
    VISIT_DATE_SENTINELS,
)
from ...core.utils.datetime_utils import get_current_timestamp, parse_calendar_date, parse_datetime
from ...domain.enums.interchange import Gender

MASCULINE_TOKENS = frozenset({"m", "h", "masc", "masculino", "hombre", "varon", "male", "man"})
FEMININE_TOKENS = frozenset({"f", "fem", "femenino", "mujer", "female", "woman"})


def _fold(text: str) -> str:
    text = unicodedata.normalize("NFKD", text).lower()
    return "".join(ch for ch in text if not unicodedata.combining(ch))


def sanitize_text(value: Any) -> Optional[str]:
    """Trim a raw value; map N/A, NA, NULL, undefined and blanks to None."""
    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in ABSENT_TEXT_SENTINELS:
        return None
    return text


def parse_age(value: Any) -> Optional[int]:
    """Keep only the digits of an age value ("30 años" -> 30)."""
    text = sanitize_text(value)
    if text is None:
        return None
    digits = re.sub(r"\D", "", text)
    if not digits:
        return None
    return int(digits)


def birth_date_from_age(age: Optional[int], today: Optional[date] = None) -> Optional[date]:
    """Approximate a birth date from an age in whole years.

    The result is January 1st of ``current year - age``: an approximation,
    since day and month cannot be known from an age. Ages outside (0, 120)
    give None.
    """
    if age is None or not (MIN_AGE_EXCLUSIVE < age < MAX_AGE_EXCLUSIVE):
        return None
    year = (today or get_current_timestamp().date()).year
    return date(year - age, 1, 1)


def resolve_birth_date(
    birth_value: Any = None,
    age_value: Any = None,
    today: Optional[date] = None,
    day_first: bool = True,
) -> Optional[date]:
    """Explicit birth date if it parses, else one derived from the age, else None."""
    explicit = sanitize_text(birth_value)
    if explicit is not None:
        parsed = parse_calendar_date(explicit, day_first=day_first)
        if parsed is not None:
            return parsed
    return birth_date_from_age(parse_age(age_value), today=today)


def normalize_gender(value: Any) -> Gender:
    """Free-text gender to Male / Female / Other.

    Whole-word tokens are checked before first letters, so "mujer" reads as
    Female and "female" is never taken for "male".
    """
    text = sanitize_text(value)
    if text is None:
        return Gender.OTHER
    folded = _fold(text)
    tokens = set(re.findall(r"[a-z]+", folded))
    if tokens & MASCULINE_TOKENS:
        return Gender.MALE
    if tokens & FEMININE_TOKENS:
        return Gender.FEMALE
    if folded.startswith("m"):
        return Gender.MALE
    if folded.startswith("f"):
        return Gender.FEMALE
    return Gender.OTHER


def is_visit_sentinel(value: Any) -> bool:
    """True when a visit-date cell says "no visit" (blank, N/A, "Sin historial")."""
    if value is None:
        return True
    return str(value).strip().lower() in VISIT_DATE_SENTINELS


def normalize_visit_date(
    value: Any,
    now: Optional[datetime] = None,
    day_first: bool = True,
) -> datetime:
    """Parse a visit date; sentinels and unparseable text map to the current instant."""
    current = now or get_current_timestamp()
    if is_visit_sentinel(value):
        return current
    parsed = parse_datetime(str(value), day_first=day_first)
    return parsed if parsed is not None else current
