"""Spreadsheet import and backup export endpoints."""

import logging
from pathlib import PurePath

from fastapi import APIRouter, File, Request, UploadFile, status
from fastapi.responses import Response

from ...core.config import get_settings
from ..deps import CurrentOwnerDep, ExportUseCaseDep, ImportUseCaseDep
from ..errors import PayloadTooLargeError, UnsupportedFileTypeError
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.interchange import BatchResultSchema
from ..utils.responses import ok

router = APIRouter(prefix="/patients", tags=["Patient Interchange"])
logger = logging.getLogger("vitalscribe")


def _check_extension(filename: str, allowed: list) -> None:
    suffix = PurePath(filename or "").suffix.lower().lstrip(".")
    if suffix not in allowed:
        raise UnsupportedFileTypeError(filename or "", allowed)


@router.post(
    "/import",
    response_model=ApiResponse[BatchResultSchema],
    status_code=status.HTTP_200_OK,
    summary="Import patients and visit history from a spreadsheet",
    responses={
        400: {"model": ErrorResponse, "description": "File cannot be parsed"},
        401: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
        413: {"model": ErrorResponse, "description": "File too large"},
        415: {"model": ErrorResponse, "description": "Unsupported file type"},
    },
)
async def import_patients(
    request: Request,
    owner_id: CurrentOwnerDep,
    use_case: ImportUseCaseDep,
    file: UploadFile = File(...),
):
    """
    Import a CSV/TSV export of patients.

    Rows are processed in order. Invalid rows are skipped and reported in
    ``errors``; a row whose store write fails is reported without stopping
    the batch.
    """
    settings = get_settings().interchange
    _check_extension(file.filename, settings.allowed_extensions)

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise PayloadTooLargeError(len(content), settings.max_upload_bytes)

    logger.info(f"Import requested by owner {owner_id}: {file.filename} ({len(content)} bytes)")
    result = await use_case.execute(content, owner_id)

    message = (
        f"Processed {result.rows_processed} rows: "
        f"{result.patients_created} created, {result.patients_merged} merged, "
        f"{result.rows_skipped} skipped"
    )
    return ok(request, data=BatchResultSchema.from_result(result), message=message)


@router.get(
    "/export",
    summary="Download every patient as a CSV backup",
    response_class=Response,
    responses={
        200: {"content": {"text/csv": {}}, "description": "CSV backup file"},
        401: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
        404: {"model": ErrorResponse, "description": "No patients to export"},
    },
)
async def export_patients(owner_id: CurrentOwnerDep, use_case: ExportUseCaseDep):
    """Export the owner's patients, one row each, ordered by name."""
    artifact = await use_case.execute(owner_id)
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.filename}"',
            "X-Patient-Count": str(artifact.patient_count),
        },
    )
