"""Header classification for free-form patient spreadsheets.

Maps each raw header to at most one canonical field with an ordered rule
table; the first matching rule wins. Matching is done on the lower-cased,
trimmed, accent-stripped header, by keyword substring.

Two header dialects are recognised without being told which one is in use:
ad-hoc spreadsheet headers ("Nombre", "Edad", "Teléfono", "Correo", "Notas")
and the backup export's own headers ("Nombre Completo", "Última Consulta",
"ID Sistema").
"""

import unicodedata
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ...domain.enums.interchange import CanonicalField

NAME_KEYWORDS = ("nombre", "name")
BIRTH_KEYWORDS = ("nacimiento", "birth", "dob")
AGE_KEYWORDS = ("edad", "age")
GENDER_KEYWORDS = ("genero", "sexo", "gender", "sex")
PHONE_KEYWORDS = ("telefono", "tel", "phone", "celular", "movil", "whatsapp")
EMAIL_KEYWORDS = ("email", "e-mail", "correo", "mail")
NARRATIVE_KEYWORDS = ("transcrip", "nota", "hist", "resumen")
VISIT_DATE_KEYWORDS = ("fecha", "date", "ultima")

HeaderPredicate = Callable[[str], bool]


def normalize_header(header: str) -> str:
    """Lower-case, trim and strip accents ("Última " -> "ultima")."""
    text = unicodedata.normalize("NFKD", str(header or "")).strip().lower()
    return "".join(ch for ch in text if not unicodedata.combining(ch))


def _contains_any(keywords: Tuple[str, ...]) -> HeaderPredicate:
    return lambda header: any(keyword in header for keyword in keywords)


def _is_visit_date(header: str) -> bool:
    # "fecha de nacimiento" must never be read as a visit date
    if _contains_any(BIRTH_KEYWORDS)(header):
        return False
    return _contains_any(VISIT_DATE_KEYWORDS)(header)


# Evaluated top to bottom; order is significant
CLASSIFICATION_RULES: List[Tuple[HeaderPredicate, CanonicalField]] = [
    (_contains_any(NAME_KEYWORDS), CanonicalField.NAME),
    (_contains_any(BIRTH_KEYWORDS), CanonicalField.BIRTH_DATE),
    (_contains_any(AGE_KEYWORDS), CanonicalField.AGE),
    (_contains_any(GENDER_KEYWORDS), CanonicalField.GENDER),
    (_contains_any(PHONE_KEYWORDS), CanonicalField.PHONE),
    (_contains_any(EMAIL_KEYWORDS), CanonicalField.EMAIL),
    (_contains_any(NARRATIVE_KEYWORDS), CanonicalField.NARRATIVE),
    (_is_visit_date, CanonicalField.VISIT_DATE),
]


def classify_header(header: str) -> Optional[CanonicalField]:
    """Return the canonical field for a raw header, or None to drop the column."""
    normalized = normalize_header(header)
    if not normalized:
        return None
    for predicate, canonical in CLASSIFICATION_RULES:
        if predicate(normalized):
            return canonical
    return None


def build_column_map(headers: Iterable[str]) -> Dict[str, CanonicalField]:
    """Classify every header of a file, keeping file column order.

    Unrecognised headers are left out. Several headers may map to the same
    canonical field.
    """
    column_map: Dict[str, CanonicalField] = {}
    for header in headers:
        canonical = classify_header(header)
        if canonical is not None:
            column_map[header] = canonical
    return column_map
