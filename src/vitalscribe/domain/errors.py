"""
Domain-specific error types for the interchange engine.

Fatal errors (``FileParseError``, ``AuthError``) abort a batch before any row
is processed. Row-scoped errors (``RowValidationError``, ``StoreWriteError``)
are caught by the batch orchestrator and recorded in the batch result.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidPatientDataError(DomainError):
    """Invalid patient data."""

    def __init__(self, field: str, value: Any) -> None:
        message = f"Invalid patient data. Field: {field}, Value: {value}"
        super().__init__(
            message, "INVALID_PATIENT_DATA", {"field": field, "value": str(value)}
        )


class FileParseError(DomainError):
    """The uploaded file cannot be read as a table. Fatal."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "FILE_PARSE_ERROR", details)


class AuthError(DomainError):
    """No authenticated owner context. Fatal."""

    def __init__(self, message: str = "Authenticated owner required") -> None:
        super().__init__(message, "AUTH_ERROR")


class RowValidationError(DomainError):
    """A row failed structural validation and was skipped. Non-fatal."""

    def __init__(self, row_number: int, reason: Any, message: str) -> None:
        self.row_number = row_number
        self.reason = reason
        super().__init__(
            message,
            "ROW_VALIDATION_ERROR",
            {"row": row_number, "reason": getattr(reason, "value", reason)},
        )


class StoreWriteError(DomainError):
    """A patient or consultation write failed for one row. Non-fatal."""

    def __init__(self, operation: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        merged = {"operation": operation}
        merged.update(details or {})
        super().__init__(f"{operation} failed: {message}", "STORE_WRITE_ERROR", merged)


class EmptyExportError(DomainError):
    """The owner has no patients to export."""

    def __init__(self, owner_id: str) -> None:
        super().__init__("No patients to export", "EMPTY_EXPORT", {"owner_id": owner_id})
