"""
Schemas for the import/export endpoints.
"""

from typing import List

from pydantic import BaseModel, Field

from ...application.dto.interchange_dto import BatchResult


class ImportIssueSchema(BaseModel):
    """A non-fatal problem recorded against one row."""

    row: int = Field(..., ge=1, description="1-based data row number")
    code: str = Field(..., description="Issue code, e.g. missing_name")
    message: str = Field(..., description="Human-readable description")


class BatchResultSchema(BaseModel):
    """Summary of one import operation."""

    rows_processed: int = Field(0, ge=0)
    patients_created: int = Field(0, ge=0)
    patients_merged: int = Field(0, ge=0)
    consultations_created: int = Field(0, ge=0)
    rows_skipped: int = Field(0, ge=0)
    errors: List[ImportIssueSchema] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchResultSchema":
        return cls(**result.to_dict())
