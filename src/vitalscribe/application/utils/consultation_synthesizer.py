"""Decides whether an import row yields a consultation, and writes it.

| narrative | visit date | result                                   |
|-----------|------------|------------------------------------------|
| yes       | any        | consultation, provenance ``imported``    |
| no        | yes        | consultation, provenance ``system_generated`` with a fixed placeholder summary |
| no        | no         | nothing                                  |

The placeholder keeps the fact of a historical visit when only its date
survived, and the provenance tag says the text was not written by a person.
"""

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ...core.constants import IMPORT_ORIGIN, SYSTEM_GENERATED_SUMMARY
from ...core.utils.datetime_utils import get_current_timestamp
from ...domain.entities.consultation import ConsultationRecord
from ...domain.enums.interchange import ConsultationStatus, Provenance
from ..dto.interchange_dto import NormalizedRow
from ..ports.repositories.consultation_repo import ConsultationRepository


def decide_consultation(row: NormalizedRow) -> Optional[Provenance]:
    """Provenance of the consultation to create for ``row``, or None for no record."""
    if row.narrative:
        return Provenance.IMPORTED
    if row.has_visit_signal:
        return Provenance.SYSTEM_GENERATED
    return None


def build_consultation(
    row: NormalizedRow,
    owner_id: str,
    patient_id: str,
    now: Optional[datetime] = None,
    imported_on: Optional[date] = None,
) -> Optional[ConsultationRecord]:
    """Build (without storing) the consultation the decision table calls for."""
    provenance = decide_consultation(row)
    if provenance is None:
        return None

    current = now or get_current_timestamp()
    summary = row.narrative if provenance == Provenance.IMPORTED else SYSTEM_GENERATED_SUMMARY
    return ConsultationRecord(
        owner_id=owner_id,
        patient_id=patient_id,
        created_at=row.visit_date or current,
        summary=summary,
        provenance=provenance,
        status=ConsultationStatus.COMPLETED,
        payload={
            "origin": IMPORT_ORIGIN,
            "imported_on": (imported_on or current.date()).isoformat(),
            "source_row": row.row_number,
            "visit_date_estimated": row.visit_date_estimated,
        },
    )


class ConsultationSynthesizer:
    """Writes the consultation, if any, for a row whose patient is resolved."""

    def __init__(self, consultation_repository: ConsultationRepository):
        self._consultation_repository = consultation_repository

    async def synthesize(
        self,
        row: NormalizedRow,
        owner_id: str,
        patient_id: str,
        now: Optional[datetime] = None,
    ) -> Optional[ConsultationRecord]:
        """Insert and return the consultation, or None when the row has no visit signal.

        Raises ``StoreWriteError`` when the insert fails.
        """
        consultation = build_consultation(row, owner_id, patient_id, now=now)
        if consultation is None:
            return None
        consultation_id = await self._consultation_repository.insert(consultation)
        return replace(consultation, consultation_id=consultation_id)
