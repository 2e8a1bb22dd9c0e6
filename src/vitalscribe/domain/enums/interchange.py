"""
Enums shared by the import and export paths.
"""

from enum import Enum


class Gender(str, Enum):
    """Gender values stored on a patient record."""
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class ConsultationStatus(str, Enum):
    """Consultation status values. Imported consultations are always completed."""
    COMPLETED = "completed"


class Provenance(str, Enum):
    """Where a consultation's narrative came from."""
    IMPORTED = "imported"                  # Author-written narrative carried over
    SYSTEM_GENERATED = "system_generated"  # Placeholder fabricated by the importer


class CanonicalField(str, Enum):
    """Internal field names every recognised header dialect is mapped onto."""
    NAME = "name"
    BIRTH_DATE = "birthDate"
    AGE = "age"
    GENDER = "gender"
    PHONE = "phone"
    EMAIL = "email"
    NARRATIVE = "narrative"
    VISIT_DATE = "visitDate"


class RejectReason(str, Enum):
    """Why the row validator refused a row."""
    MISSING_NAME = "missing_name"
    NAME_TOO_SHORT = "name_too_short"
