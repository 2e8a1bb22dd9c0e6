"""
MongoDB Beanie models used by the persistence layer.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from beanie import Document
from pydantic import Field
from pymongo import ASCENDING, DESCENDING, IndexModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PatientMongo(Document):
    """MongoDB model for a patient record."""

    patient_id: str = Field(..., description="Patient ID")
    owner_id: str = Field(..., description="Owning clinician ID")
    name: str = Field(..., description="Display name, trimmed")
    name_key: str = Field(..., description="Trimmed, case-folded name used for dedup")
    phone: Optional[str] = Field(None, description="Phone number as imported")
    email: Optional[str] = Field(None, description="Email address")
    birth_date: Optional[str] = Field(None, description="Birth date, ISO YYYY-MM-DD")
    gender: str = Field(default="Other", description="Male | Female | Other")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    class Settings:
        name = "patients"
        indexes = [
            # Dedup key: one patient per (owner, normalized name)
            IndexModel(
                [("owner_id", ASCENDING), ("name_key", ASCENDING)],
                unique=True,
                name="owner_name_key_unique",
            ),
            IndexModel([("patient_id", ASCENDING)], unique=True, name="patient_id_unique"),
        ]


class ConsultationMongo(Document):
    """MongoDB model for a consultation record. Insert-only."""

    consultation_id: str = Field(..., description="Consultation ID")
    owner_id: str = Field(..., description="Owning clinician ID")
    patient_id: str = Field(..., description="Patient ID reference")
    created_at: datetime = Field(default_factory=_utcnow)
    summary: str = Field(..., description="Narrative summary")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Structured payload")
    status: str = Field(default="completed")
    provenance: str = Field(..., description="imported | system_generated")

    class Settings:
        name = "consultations"
        indexes = [
            IndexModel([("consultation_id", ASCENDING)], unique=True, name="consultation_id_unique"),
            IndexModel(
                [("owner_id", ASCENDING), ("patient_id", ASCENDING), ("created_at", DESCENDING)],
                name="owner_patient_created",
            ),
        ]
