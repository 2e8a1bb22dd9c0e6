"""
Field normalizer tests: birth date, gender, visit date and text sanitizing.
"""

from datetime import date, datetime, timezone

import pytest

from vitalscribe.application.utils.field_normalizers import (
    birth_date_from_age,
    is_visit_sentinel,
    normalize_gender,
    normalize_visit_date,
    parse_age,
    resolve_birth_date,
    sanitize_text,
)
from vitalscribe.domain.enums.interchange import Gender

TODAY = date(2025, 6, 15)
NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


class TestBirthDate:
    @pytest.mark.parametrize("age", [1, 30, 65, 119])
    def test_age_in_range_gives_january_first(self, age):
        assert birth_date_from_age(age, today=TODAY) == date(TODAY.year - age, 1, 1)

    @pytest.mark.parametrize("age", [0, -3, 120, 150])
    def test_age_out_of_range_is_absent(self, age):
        assert birth_date_from_age(age, today=TODAY) is None

    def test_non_numeric_age_is_absent(self):
        assert resolve_birth_date(None, "desconocida", today=TODAY) is None

    def test_age_keeps_digits_only(self):
        assert parse_age("30 años") == 30
        assert resolve_birth_date(None, "30 años", today=TODAY) == date(1995, 1, 1)

    def test_explicit_birth_date_wins_over_age(self):
        assert resolve_birth_date("1990-05-20", "30", today=TODAY) == date(1990, 5, 20)

    def test_day_first_explicit_birth_date(self):
        assert resolve_birth_date("03/04/1980", None, today=TODAY) == date(1980, 4, 3)
        assert resolve_birth_date("03/04/1980", None, today=TODAY, day_first=False) == date(1980, 3, 4)

    def test_unparseable_birth_date_falls_back_to_age(self):
        assert resolve_birth_date("no sabe", "40", today=TODAY) == date(1985, 1, 1)

    def test_nothing_usable_is_absent(self):
        assert resolve_birth_date("N/A", "", today=TODAY) is None


class TestGender:
    @pytest.mark.parametrize("value", ["M", "m", "Masculino", "hombre", "Male", "Varón", "masc."])
    def test_masculine(self, value):
        assert normalize_gender(value) == Gender.MALE

    @pytest.mark.parametrize("value", ["F", "f", "Femenino", "Female", "fem", "Mujer", "woman"])
    def test_feminine(self, value):
        assert normalize_gender(value) == Gender.FEMALE

    @pytest.mark.parametrize("value", ["Otro", "X", "no binario", "?"])
    def test_other(self, value):
        assert normalize_gender(value) == Gender.OTHER

    @pytest.mark.parametrize("value", [None, "", "N/A", "null"])
    def test_absent_input_is_other(self, value):
        assert normalize_gender(value) == Gender.OTHER


class TestVisitDate:
    @pytest.mark.parametrize("value", [None, "", "   ", "Sin historial", "SIN HISTORIAL", "n/a", "N/A"])
    def test_sentinels(self, value):
        assert is_visit_sentinel(value)
        assert normalize_visit_date(value, now=NOW) == NOW

    def test_iso_date(self):
        assert normalize_visit_date("2024-01-15", now=NOW) == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_day_first_slash_date(self):
        assert normalize_visit_date("15/01/2024", now=NOW) == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_timestamp_is_kept_in_utc(self):
        parsed = normalize_visit_date("2024-01-15T10:30:00+02:00", now=NOW)
        assert parsed == datetime(2024, 1, 15, 8, 30, tzinfo=timezone.utc)

    def test_unparseable_maps_to_now(self):
        assert not is_visit_sentinel("la semana pasada")
        assert normalize_visit_date("la semana pasada", now=NOW) == NOW


class TestSanitizeText:
    @pytest.mark.parametrize("value", [None, "", "  ", "N/A", "na", "NULL", "undefined"])
    def test_sentinels_are_absent(self, value):
        assert sanitize_text(value) is None

    def test_trims(self):
        assert sanitize_text("  Ana  ") == "Ana"

    def test_non_string_values(self):
        assert sanitize_text(42) == "42"
