"""FastAPI dependency providers."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header

from ..adapters.db.mongo.repositories.consultation_repository import (
    MongoConsultationRepository,
)
from ..adapters.db.mongo.repositories.patient_repository import (
    MongoPatientRepository,
)
from ..adapters.tabular.pandas_parser import PandasTabularParser
from ..adapters.tabular.pandas_writer import PandasTabularWriter
from ..application.ports.repositories.consultation_repo import ConsultationRepository
from ..application.ports.repositories.patient_repo import PatientRepository
from ..application.ports.services.tabular_parser import TabularParser, TabularWriter
from ..application.use_cases.export_patients import ExportPatientsUseCase
from ..application.use_cases.import_patients import ImportPatientsUseCase
from ..core.auth import get_auth_service
from ..core.config import get_settings
from ..core.exceptions import AuthenticationError
from ..domain.errors import AuthError


@lru_cache()
def get_patient_repository() -> PatientRepository:
    """Get patient repository instance."""
    return MongoPatientRepository()


@lru_cache()
def get_consultation_repository() -> ConsultationRepository:
    """Get consultation repository instance."""
    return MongoConsultationRepository()


@lru_cache()
def get_tabular_parser() -> TabularParser:
    return PandasTabularParser()


@lru_cache()
def get_tabular_writer() -> TabularWriter:
    return PandasTabularWriter()


def get_current_owner(
    x_api_key: Annotated[Optional[str], Header()] = None,
    authorization: Annotated[Optional[str], Header()] = None,
) -> str:
    """
    Resolve the owner (clinician) id for the request.

    Every import and export is scoped to this id. A missing or unknown
    credential is an ``AuthError``, which aborts the operation before any
    data is read or written.
    """
    try:
        return get_auth_service().get_owner_from_headers(
            api_key=x_api_key, auth_header=authorization
        )
    except AuthenticationError as e:
        raise AuthError(e.message) from e


PatientRepositoryDep = Annotated[PatientRepository, Depends(get_patient_repository)]
ConsultationRepositoryDep = Annotated[
    ConsultationRepository, Depends(get_consultation_repository)
]
TabularParserDep = Annotated[TabularParser, Depends(get_tabular_parser)]
TabularWriterDep = Annotated[TabularWriter, Depends(get_tabular_writer)]
CurrentOwnerDep = Annotated[str, Depends(get_current_owner)]


def get_import_use_case(
    patient_repo: PatientRepositoryDep,
    consultation_repo: ConsultationRepositoryDep,
    parser: TabularParserDep,
) -> ImportPatientsUseCase:
    settings = get_settings()
    return ImportPatientsUseCase(
        patient_repo,
        consultation_repo,
        parser=parser,
        day_first=settings.interchange.day_first,
    )


def get_export_use_case(
    patient_repo: PatientRepositoryDep,
    writer: TabularWriterDep,
) -> ExportPatientsUseCase:
    settings = get_settings()
    return ExportPatientsUseCase(
        patient_repo,
        writer,
        include_last_summary=settings.interchange.export_include_last_summary,
        filename_prefix=settings.interchange.export_filename_prefix,
    )


ImportUseCaseDep = Annotated[ImportPatientsUseCase, Depends(get_import_use_case)]
ExportUseCaseDep = Annotated[ExportPatientsUseCase, Depends(get_export_use_case)]
