"""
Beanie document models.
"""

from .patient_m import ConsultationMongo, PatientMongo

__all__ = [
    "PatientMongo",
    "ConsultationMongo",
]
