"""Create-or-merge of patients against the (owner, normalized name) key."""

import logging

from ...domain.entities.patient import PatientRecord
from ...domain.errors import AuthError
from ..dto.interchange_dto import NormalizedRow, ResolvedPatient
from ..ports.repositories.patient_repo import PatientRepository

logger = logging.getLogger("vitalscribe")


def build_patient_record(row: NormalizedRow, owner_id: str) -> PatientRecord:
    """Map a validated row onto a patient record carrying only the fields present."""
    return PatientRecord(
        owner_id=owner_id,
        name=row.name or "",
        phone=row.phone,
        email=row.email,
        birth_date=row.birth_date,
        gender=row.gender,
    )


class PatientResolver:
    """Resolves a validated row to a stored patient id.

    Conflict policy is last-write-wins on every demographic field present in
    the row: a re-import overwrites stored phone, email, birth date and
    gender, including corrections made in the product. Fields absent from the
    row are left as stored.
    """

    def __init__(self, patient_repository: PatientRepository):
        self._patient_repository = patient_repository

    async def resolve(self, row: NormalizedRow, owner_id: str) -> ResolvedPatient:
        """Upsert the row's patient. Raises ``StoreWriteError`` on write failure."""
        if not owner_id:
            raise AuthError()
        patient = build_patient_record(row, owner_id)
        resolved = await self._patient_repository.upsert(patient)
        logger.debug(
            f"Row {row.row_number}: patient {resolved.patient_id} "
            f"{'created' if resolved.created else 'merged'}"
        )
        return resolved
