"""
Domain enums package.
"""

from .interchange import CanonicalField, ConsultationStatus, Gender, Provenance, RejectReason

__all__ = [
    "CanonicalField",
    "ConsultationStatus",
    "Gender",
    "Provenance",
    "RejectReason",
]
