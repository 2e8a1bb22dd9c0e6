"""Consultation (visit history) entity written by the importer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..enums.interchange import ConsultationStatus, Provenance
from ..errors import DomainError


@dataclass(frozen=True)
class ConsultationRecord:
    """Append-only visit record.

    Frozen: the importer creates consultations and never revisits them.
    """

    owner_id: str
    patient_id: str
    created_at: datetime
    summary: str
    provenance: Provenance
    payload: Dict[str, Any] = field(default_factory=dict)
    status: ConsultationStatus = ConsultationStatus.COMPLETED
    consultation_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.patient_id:
            raise DomainError(
                "Consultation must reference a patient",
                "INVALID_CONSULTATION",
                {"owner_id": self.owner_id},
            )
        if not self.summary:
            raise DomainError(
                "Consultation summary cannot be empty",
                "INVALID_CONSULTATION",
                {"patient_id": self.patient_id},
            )

    @property
    def is_system_generated(self) -> bool:
        return self.provenance == Provenance.SYSTEM_GENERATED
