"""Import Patients use case: the batch orchestrator.

Rows are processed strictly one at a time. The patient upsert is keyed on
(owner, name), so a row must observe the write of any earlier row carrying
the same new patient; sequential processing guarantees that.

A batch cannot be cancelled once started: it runs to completion or stops on
a fatal error (unreadable file, no owner).
"""

import asyncio
import inspect
from datetime import datetime
from typing import Any, AsyncIterator, Callable, List, Mapping, Optional, Sequence

from ...core.structured_logger import get_logger
from ...core.utils.datetime_utils import get_current_timestamp
from ...domain.enums.interchange import CanonicalField
from ...domain.errors import AuthError, FileParseError, RowValidationError, StoreWriteError
from ..dto.interchange_dto import (
    BatchResult,
    ImportIssue,
    ImportRow,
    RowOutcome,
    RowRejected,
    RowStatus,
)
from ..ports.repositories.consultation_repo import ConsultationRepository
from ..ports.repositories.patient_repo import PatientRepository
from ..ports.services.tabular_parser import TabularParser
from ..utils.column_classifier import build_column_map
from ..utils.consultation_synthesizer import ConsultationSynthesizer
from ..utils.patient_resolver import PatientResolver
from ..utils.row_normalizer import normalize_row
from ..utils.row_validator import validate_row

logger = get_logger("vitalscribe.import")

ProgressCallback = Callable[[int, int], Any]


def _malformed_issue(row_number: int, field_count: int) -> ImportIssue:
    return ImportIssue(
        row_number,
        "malformed_row",
        f"Row has {field_count} fields, more than the header; "
        f"the extra fields were joined into the last column",
    )


def _issue_from_error(error: Exception, row_number: int) -> ImportIssue:
    if isinstance(error, RowValidationError):
        return ImportIssue(row_number, error.reason.value, error.message)
    if isinstance(error, StoreWriteError):
        return ImportIssue(row_number, f"{error.operation}_failed", error.message)
    return ImportIssue(row_number, "error", str(error))


class ImportPatientsUseCase:
    """Drives classifier, normalizers, validator, resolver and synthesizer per row."""

    def __init__(
        self,
        patient_repository: PatientRepository,
        consultation_repository: ConsultationRepository,
        parser: Optional[TabularParser] = None,
        day_first: bool = True,
    ):
        self._parser = parser
        self._resolver = PatientResolver(patient_repository)
        self._synthesizer = ConsultationSynthesizer(consultation_repository)
        self._day_first = day_first

    async def execute(
        self,
        content: bytes,
        owner_id: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchResult:
        """Import a whole file and return the batch summary.

        Raises ``AuthError`` or ``FileParseError`` before any row is touched.
        """
        if not owner_id:
            raise AuthError()
        if self._parser is None:
            raise FileParseError("No tabular parser configured")

        # pandas parsing is blocking; keep it off the event loop
        table = await asyncio.to_thread(self._parser.parse_table, content)
        return await self.execute_rows(
            table.rows,
            owner_id,
            on_progress=on_progress,
            malformed_rows=table.malformed_rows,
        )

    async def execute_rows(
        self,
        rows: Sequence[ImportRow],
        owner_id: str,
        on_progress: Optional[ProgressCallback] = None,
        now: Optional[datetime] = None,
        malformed_rows: Optional[Mapping[int, int]] = None,
    ) -> BatchResult:
        """Import already-parsed rows.

        ``malformed_rows`` maps row numbers to field counts for rows the parser
        found wider than the header; each gets a ``malformed_row`` issue.
        """
        result = BatchResult()
        total = len(rows)
        logger.info("import_started", owner_id=owner_id, rows=total)

        async for outcome in self.iter_rows(
            rows, owner_id, now=now, malformed_rows=malformed_rows
        ):
            result.record(outcome)
            if on_progress is not None:
                maybe_awaitable = on_progress(result.rows_processed, total)
                if inspect.isawaitable(maybe_awaitable):
                    await maybe_awaitable

        logger.info(
            "import_finished",
            owner_id=owner_id,
            rows_processed=result.rows_processed,
            patients_created=result.patients_created,
            patients_merged=result.patients_merged,
            consultations_created=result.consultations_created,
            rows_skipped=result.rows_skipped,
            issues=len(result.errors),
        )
        return result

    async def iter_rows(
        self,
        rows: Sequence[ImportRow],
        owner_id: str,
        now: Optional[datetime] = None,
        malformed_rows: Optional[Mapping[int, int]] = None,
    ) -> AsyncIterator[RowOutcome]:
        """Process rows in order, yielding each row's outcome as soon as it is known.

        Row numbers are 1-based positions among the data rows.
        """
        if not owner_id:
            raise AuthError()
        if not rows:
            return

        headers: List[str] = list(rows[0].keys())
        column_map = build_column_map(headers)
        if CanonicalField.NAME not in column_map.values():
            logger.warning("no_name_column", owner_id=owner_id, headers=len(headers))

        current = now or get_current_timestamp()
        malformed = malformed_rows or {}
        for index, raw_row in enumerate(rows, start=1):
            outcome = await self._process_row(raw_row, column_map, index, owner_id, current)
            if index in malformed:
                logger.warning("row_malformed", row=index, fields=malformed[index])
                outcome.issues.insert(0, _malformed_issue(index, malformed[index]))
            yield outcome

    async def _process_row(
        self,
        raw_row: ImportRow,
        column_map: Mapping[str, CanonicalField],
        row_number: int,
        owner_id: str,
        now: datetime,
    ) -> RowOutcome:
        row = normalize_row(
            raw_row, column_map, row_number, now=now, day_first=self._day_first
        )

        verdict = validate_row(row)
        if isinstance(verdict, RowRejected):
            error = RowValidationError(row_number, verdict.reason, verdict.message)
            logger.warning("row_rejected", row=row_number, reason=verdict.reason.value)
            return RowOutcome(
                row_number=row_number,
                status=RowStatus.SKIPPED,
                issues=[_issue_from_error(error, row_number)],
            )

        try:
            resolved = await self._resolver.resolve(row, owner_id)
        except StoreWriteError as e:
            logger.warning("patient_write_failed", row=row_number, error=e.message)
            return RowOutcome(
                row_number=row_number,
                status=RowStatus.FAILED,
                issues=[_issue_from_error(e, row_number)],
            )

        outcome = RowOutcome(
            row_number=row_number,
            status=RowStatus.CREATED if resolved.created else RowStatus.MERGED,
            patient_id=resolved.patient_id,
        )

        try:
            consultation = await self._synthesizer.synthesize(
                row, owner_id, resolved.patient_id, now=now
            )
        except StoreWriteError as e:
            logger.warning("consultation_write_failed", row=row_number, error=e.message)
            outcome.issues.append(_issue_from_error(e, row_number))
            return outcome

        if consultation is not None:
            outcome.consultation_id = consultation.consultation_id
            outcome.provenance = consultation.provenance
        return outcome

