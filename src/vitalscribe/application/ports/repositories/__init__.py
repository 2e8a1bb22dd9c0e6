"""
Repository ports for the persistent store collaborator.
"""

from .consultation_repo import ConsultationRepository
from .patient_repo import PatientRepository

__all__ = [
    "PatientRepository",
    "ConsultationRepository",
]
