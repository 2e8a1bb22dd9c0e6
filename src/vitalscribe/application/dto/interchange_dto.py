"""DTOs for the patient import/export pipeline.

Rows, validation results and batch results are ephemeral: they live for one
import or export call and are never persisted.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from ...domain.enums.interchange import Gender, Provenance, RejectReason

# Raw header -> value mapping as produced by the tabular parser
ImportRow = Mapping[str, Any]


@dataclass
class ParsedTable:
    """Rows read from an upload, plus the rows that had more fields than the header.

    ``malformed_rows`` maps a 1-based data row number to that row's field count.
    """

    rows: List[Dict[str, str]]
    malformed_rows: Dict[int, int] = field(default_factory=dict)


@dataclass
class NormalizedRow:
    """Canonical view of one import row."""

    row_number: int
    name: Optional[str] = None
    birth_date: Optional[date] = None
    age: Optional[int] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    narrative: Optional[str] = None
    visit_date: Optional[datetime] = None
    # True when a visit-date column carried a non-sentinel value that did not parse
    visit_date_estimated: bool = False

    @property
    def has_visit_signal(self) -> bool:
        return self.visit_date is not None


@dataclass(frozen=True)
class RowAccepted:
    """Validator verdict: the row may proceed to the resolver."""

    row: NormalizedRow
    accepted: bool = True


@dataclass(frozen=True)
class RowRejected:
    """Validator verdict: the row is skipped, with the reason."""

    row_number: int
    reason: RejectReason
    message: str
    accepted: bool = False


RowValidationResult = Union[RowAccepted, RowRejected]


@dataclass(frozen=True)
class ResolvedPatient:
    """Outcome of a patient upsert."""

    patient_id: str
    created: bool


class RowStatus(str, Enum):
    """Per-row result of the import pipeline."""
    CREATED = "created"
    MERGED = "merged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportIssue:
    """Non-fatal problem recorded against a row."""

    row_number: int
    code: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"row": self.row_number, "code": self.code, "message": self.message}


@dataclass
class RowOutcome:
    """What happened to a single row."""

    row_number: int
    status: RowStatus
    patient_id: Optional[str] = None
    consultation_id: Optional[str] = None
    provenance: Optional[Provenance] = None
    issues: List[ImportIssue] = field(default_factory=list)


@dataclass
class BatchResult:
    """Counts and non-fatal error log for one import operation."""

    rows_processed: int = 0
    patients_created: int = 0
    patients_merged: int = 0
    consultations_created: int = 0
    rows_skipped: int = 0
    errors: List[ImportIssue] = field(default_factory=list)

    def record(self, outcome: RowOutcome) -> None:
        """Fold one row outcome into the totals."""
        self.rows_processed += 1
        if outcome.status == RowStatus.CREATED:
            self.patients_created += 1
        elif outcome.status == RowStatus.MERGED:
            self.patients_merged += 1
        elif outcome.status == RowStatus.SKIPPED:
            self.rows_skipped += 1
        if outcome.consultation_id:
            self.consultations_created += 1
        self.errors.extend(outcome.issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows_processed": self.rows_processed,
            "patients_created": self.patients_created,
            "patients_merged": self.patients_merged,
            "consultations_created": self.consultations_created,
            "rows_skipped": self.rows_skipped,
            "errors": [issue.to_dict() for issue in self.errors],
        }


@dataclass(frozen=True)
class ExportArtifact:
    """Serialized backup file, held entirely in memory."""

    filename: str
    content: bytes
    patient_count: int
    media_type: str = "text/csv; charset=utf-8"
