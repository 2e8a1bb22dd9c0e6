"""
Shared fixtures: in-memory store doubles and wired use cases.
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

import pytest

from vitalscribe.adapters.tabular.pandas_parser import PandasTabularParser
from vitalscribe.adapters.tabular.pandas_writer import PandasTabularWriter
from vitalscribe.application.dto.interchange_dto import ResolvedPatient
from vitalscribe.application.ports.repositories.consultation_repo import ConsultationRepository
from vitalscribe.application.ports.repositories.patient_repo import PatientRepository
from vitalscribe.application.use_cases.export_patients import ExportPatientsUseCase
from vitalscribe.application.use_cases.import_patients import ImportPatientsUseCase
from vitalscribe.domain.entities.consultation import ConsultationRecord
from vitalscribe.domain.entities.patient import PatientRecord, PatientSnapshot
from vitalscribe.domain.enums.interchange import Gender
from vitalscribe.domain.errors import StoreWriteError
from vitalscribe.domain.value_objects.dedup_key import normalize_name_key

OWNER = "doctor_1"
FIXED_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


class InMemoryConsultationRepository(ConsultationRepository):
    """Insert-only consultation store that can be told to fail for given patients."""

    def __init__(self):
        self.records: List[ConsultationRecord] = []
        self.fail_for_patient_ids: Set[str] = set()

    async def insert(self, consultation: ConsultationRecord) -> str:
        if consultation.patient_id in self.fail_for_patient_ids:
            raise StoreWriteError("insert_consultation", "simulated timeout")
        consultation_id = f"con_{len(self.records) + 1}"
        self.records.append(replace(consultation, consultation_id=consultation_id))
        return consultation_id

    def for_patient(self, patient_id: str) -> List[ConsultationRecord]:
        return [c for c in self.records if c.patient_id == patient_id]


class InMemoryPatientRepository(PatientRepository):
    """Patient store enforcing the unique (owner_id, name_key) constraint."""

    def __init__(self, consultations: Optional[InMemoryConsultationRepository] = None):
        self.patients: Dict[Tuple[str, str], PatientSnapshot] = {}
        self.consultations = consultations or InMemoryConsultationRepository()
        self.fail_for_names: Set[str] = set()
        self.upsert_calls = 0

    async def upsert(self, patient: PatientRecord) -> ResolvedPatient:
        self.upsert_calls += 1
        if patient.name_key in {normalize_name_key(n) for n in self.fail_for_names}:
            raise StoreWriteError("upsert_patient", "simulated network error")

        key = (patient.owner_id, patient.name_key)
        stored = self.patients.get(key)
        if stored is None:
            stored = PatientSnapshot(
                patient_id=f"pat_{len(self.patients) + 1}",
                owner_id=patient.owner_id,
                name=patient.name,
                gender=Gender.OTHER,
                created_at=datetime.now(timezone.utc),
            )
            self.patients[key] = stored
            created = True
        else:
            created = False

        stored.name = patient.name
        if patient.phone:
            stored.phone = patient.phone
        if patient.email:
            stored.email = patient.email
        if patient.birth_date is not None:
            stored.birth_date = patient.birth_date
        if patient.gender is not None:
            stored.gender = patient.gender
        return ResolvedPatient(patient_id=stored.patient_id, created=created)

    async def list_with_consultations(self, owner_id: str) -> List[PatientSnapshot]:
        result = []
        for (owner, _), stored in self.patients.items():
            if owner != owner_id:
                continue
            history = sorted(
                self.consultations.for_patient(stored.patient_id),
                key=lambda c: c.created_at,
                reverse=True,
            )
            result.append(
                replace(
                    stored,
                    consultation_dates=[c.created_at for c in history],
                    last_summary=history[0].summary if history else None,
                )
            )
        return result

    async def count(self, owner_id: str) -> int:
        return sum(1 for owner, _ in self.patients if owner == owner_id)

    def get(self, name: str, owner_id: str = OWNER) -> Optional[PatientSnapshot]:
        return self.patients.get((owner_id, normalize_name_key(name)))


@pytest.fixture
def consultation_repo():
    return InMemoryConsultationRepository()


@pytest.fixture
def patient_repo(consultation_repo):
    return InMemoryPatientRepository(consultation_repo)


@pytest.fixture
def parser():
    return PandasTabularParser()


@pytest.fixture
def writer():
    return PandasTabularWriter()


@pytest.fixture
def import_use_case(patient_repo, consultation_repo, parser):
    return ImportPatientsUseCase(patient_repo, consultation_repo, parser=parser)


@pytest.fixture
def export_use_case(patient_repo, writer):
    return ExportPatientsUseCase(patient_repo, writer)


def csv_bytes(text: str, encoding: str = "utf-8") -> bytes:
    """File bytes from an indented literal, one row per line."""
    lines = [line.strip() for line in text.strip().splitlines()]
    return ("\n".join(lines) + "\n").encode(encoding)
