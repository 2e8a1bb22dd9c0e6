"""
MongoDB implementation of ConsultationRepository.
"""

from pymongo.errors import PyMongoError

from vitalscribe.application.ports.repositories.consultation_repo import ConsultationRepository
from vitalscribe.core.utils.string_utils import generate_id
from vitalscribe.domain.entities.consultation import ConsultationRecord
from vitalscribe.domain.errors import StoreWriteError

from ..models.patient_m import ConsultationMongo


class MongoConsultationRepository(ConsultationRepository):
    """MongoDB implementation of ConsultationRepository."""

    async def insert(self, consultation: ConsultationRecord) -> str:
        """Insert a consultation and return its id."""
        consultation_id = consultation.consultation_id or generate_id("con_")
        document = ConsultationMongo(
            consultation_id=consultation_id,
            owner_id=consultation.owner_id,
            patient_id=consultation.patient_id,
            created_at=consultation.created_at,
            summary=consultation.summary,
            payload=dict(consultation.payload),
            status=consultation.status.value,
            provenance=consultation.provenance.value,
        )
        try:
            await document.insert()
        except PyMongoError as e:
            raise StoreWriteError(
                "insert_consultation", str(e), {"patient_id": consultation.patient_id}
            ) from e
        return consultation_id
