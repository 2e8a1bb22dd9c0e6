"""
Domain entities package.
"""

from .consultation import ConsultationRecord
from .patient import PatientRecord, PatientSnapshot

__all__ = [
    "PatientRecord",
    "PatientSnapshot",
    "ConsultationRecord",
]
