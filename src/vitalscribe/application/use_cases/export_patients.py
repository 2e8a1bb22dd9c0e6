"""Export Patients use case: flattens an owner's patients into the backup file."""

import asyncio
import logging
from datetime import date
from typing import List, Optional

from ...core.constants import (
    EXPORT_COLUMNS,
    EXPORT_MISSING_VALUE,
    EXPORT_SUMMARY_COLUMN,
    NO_HISTORY_MARKER,
)
from ...core.utils.datetime_utils import format_date, get_current_timestamp
from ...domain.entities.patient import PatientSnapshot
from ...domain.errors import AuthError, EmptyExportError
from ..dto.interchange_dto import ExportArtifact
from ..ports.repositories.patient_repo import PatientRepository
from ..ports.services.tabular_parser import TabularWriter

logger = logging.getLogger("vitalscribe")


def flatten_patient(patient: PatientSnapshot, include_last_summary: bool = False) -> List[str]:
    """One export row: id, name, phone, email, gender, birth date, registration, last visit."""
    last_visit = patient.last_visit
    row = [
        patient.patient_id,
        patient.name,
        patient.phone or EXPORT_MISSING_VALUE,
        patient.email or "",
        patient.gender.value if patient.gender else EXPORT_MISSING_VALUE,
        format_date(patient.birth_date),
        format_date(patient.created_at),
        format_date(last_visit) if last_visit else NO_HISTORY_MARKER,
    ]
    if include_last_summary:
        row.append(patient.last_summary or "")
    return row


def export_filename(prefix: str, today: date) -> str:
    return f"{prefix}_{today.isoformat()}.csv"


class ExportPatientsUseCase:
    """Builds the whole backup in memory in one pass; there is no paging."""

    def __init__(
        self,
        patient_repository: PatientRepository,
        writer: TabularWriter,
        include_last_summary: bool = False,
        filename_prefix: str = "Respaldo_Clinico",
    ):
        self._patient_repository = patient_repository
        self._writer = writer
        self._include_last_summary = include_last_summary
        self._filename_prefix = filename_prefix

    @property
    def columns(self) -> List[str]:
        columns = list(EXPORT_COLUMNS)
        if self._include_last_summary:
            columns.append(EXPORT_SUMMARY_COLUMN)
        return columns

    async def execute(self, owner_id: str, today: Optional[date] = None) -> ExportArtifact:
        """Export every patient of ``owner_id``.

        Raises ``AuthError`` without an owner and ``EmptyExportError`` when
        the owner has no patients.
        """
        if not owner_id:
            raise AuthError()

        patients = await self._patient_repository.list_with_consultations(owner_id)
        if not patients:
            raise EmptyExportError(owner_id)

        patients = sorted(patients, key=lambda p: (p.name.casefold(), p.patient_id))
        rows = [flatten_patient(p, self._include_last_summary) for p in patients]
        # pandas serialization is blocking; keep it off the event loop
        content = await asyncio.to_thread(self._writer.write, self.columns, rows)

        filename = export_filename(self._filename_prefix, today or get_current_timestamp().date())
        logger.info(f"Exported {len(rows)} patients for owner {owner_id} as {filename}")
        return ExportArtifact(filename=filename, content=content, patient_count=len(rows))
