"""Structural validation of normalized rows.

Never raises: every row gets a verdict, and rejected rows carry a reason the
orchestrator records in the batch error log.
"""

from ...domain.enums.interchange import RejectReason
from ..dto.interchange_dto import NormalizedRow, RowAccepted, RowRejected, RowValidationResult

MIN_NAME_LENGTH = 2


def validate_row(row: NormalizedRow) -> RowValidationResult:
    """Accept rows with a name of at least two characters; nothing else is required."""
    name = (row.name or "").strip()
    if not name:
        return RowRejected(
            row_number=row.row_number,
            reason=RejectReason.MISSING_NAME,
            message="Row has no patient name",
        )
    if len(name) < MIN_NAME_LENGTH:
        return RowRejected(
            row_number=row.row_number,
            reason=RejectReason.NAME_TOO_SHORT,
            message=f"Patient name must be at least {MIN_NAME_LENGTH} characters, got {len(name)}",
        )
    return RowAccepted(row=row)
