"""
MongoDB repository implementations.
"""

from .consultation_repository import MongoConsultationRepository
from .patient_repository import MongoPatientRepository

__all__ = [
    "MongoPatientRepository",
    "MongoConsultationRepository",
]
