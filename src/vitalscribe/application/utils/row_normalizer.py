"""Builds a NormalizedRow from a raw import row and the file's column map."""

from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from ...core.utils.datetime_utils import get_current_timestamp, parse_datetime
from ...domain.enums.interchange import CanonicalField
from ..dto.interchange_dto import ImportRow, NormalizedRow
from .field_normalizers import (
    is_visit_sentinel,
    normalize_gender,
    normalize_visit_date,
    parse_age,
    resolve_birth_date,
    sanitize_text,
)


def collect_canonical_values(
    raw_row: ImportRow, column_map: Mapping[str, CanonicalField]
) -> Dict[CanonicalField, Any]:
    """Pick one raw value per canonical field.

    When several columns share a canonical field, the right-most column with
    a non-absent value wins.
    """
    values: Dict[CanonicalField, Any] = {}
    for header, canonical in column_map.items():
        value = raw_row.get(header)
        if sanitize_text(value) is None:
            continue
        values[canonical] = value
    return values


def normalize_row(
    raw_row: ImportRow,
    column_map: Mapping[str, CanonicalField],
    row_number: int,
    now: Optional[datetime] = None,
    today: Optional[date] = None,
    day_first: bool = True,
) -> NormalizedRow:
    """Run every field normalizer over one raw row."""
    current = now or get_current_timestamp()
    values = collect_canonical_values(raw_row, column_map)

    raw_gender = values.get(CanonicalField.GENDER)
    raw_visit = values.get(CanonicalField.VISIT_DATE)

    visit_date = None
    estimated = False
    if raw_visit is not None and not is_visit_sentinel(raw_visit):
        estimated = parse_datetime(str(raw_visit), day_first=day_first) is None
        visit_date = normalize_visit_date(raw_visit, now=current, day_first=day_first)

    return NormalizedRow(
        row_number=row_number,
        name=sanitize_text(values.get(CanonicalField.NAME)),
        birth_date=resolve_birth_date(
            values.get(CanonicalField.BIRTH_DATE),
            values.get(CanonicalField.AGE),
            today=today or current.date(),
            day_first=day_first,
        ),
        age=parse_age(values.get(CanonicalField.AGE)),
        gender=normalize_gender(raw_gender) if raw_gender is not None else None,
        phone=sanitize_text(values.get(CanonicalField.PHONE)),
        email=sanitize_text(values.get(CanonicalField.EMAIL)),
        narrative=sanitize_text(values.get(CanonicalField.NARRATIVE)),
        visit_date=visit_date,
        visit_date_estimated=estimated,
    )
