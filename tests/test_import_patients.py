"""
Batch orchestrator tests: the import use case end to end over in-memory stores.
"""

import threading
from datetime import date, datetime, timezone

import pytest

from vitalscribe.adapters.tabular.pandas_parser import PandasTabularParser
from vitalscribe.application.dto.interchange_dto import RowStatus
from vitalscribe.application.use_cases.import_patients import ImportPatientsUseCase
from vitalscribe.core.constants import SYSTEM_GENERATED_SUMMARY
from vitalscribe.domain.enums.interchange import Gender, Provenance
from vitalscribe.domain.errors import AuthError, FileParseError

from conftest import FIXED_NOW, OWNER, csv_bytes


async def test_scenario_name_and_age_only(import_use_case, patient_repo, consultation_repo):
    result = await import_use_case.execute_rows(
        [{"Nombre": "Ana Ruiz", "Edad": "30"}], OWNER, now=FIXED_NOW
    )

    assert result.patients_created == 1
    assert result.consultations_created == 0
    stored = patient_repo.get("Ana Ruiz")
    assert stored.gender == Gender.OTHER
    assert stored.birth_date == date(FIXED_NOW.year - 30, 1, 1)
    assert consultation_repo.records == []


async def test_scenario_backup_dialect_visit_date(import_use_case, patient_repo, consultation_repo):
    result = await import_use_case.execute_rows(
        [{"Nombre Completo": "Juan Pérez", "Última Consulta": "2024-01-15"}], OWNER, now=FIXED_NOW
    )

    assert result.patients_created == 1
    assert result.consultations_created == 1
    [consultation] = consultation_repo.records
    assert consultation.provenance == Provenance.SYSTEM_GENERATED
    assert consultation.summary == SYSTEM_GENERATED_SUMMARY
    assert consultation.created_at == datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert consultation.patient_id == patient_repo.get("Juan Pérez").patient_id


async def test_scenario_blank_name_is_skipped(import_use_case, patient_repo):
    result = await import_use_case.execute_rows([{"Nombre": "", "Edad": "40"}], OWNER)

    assert result.rows_processed == 1
    assert result.patients_created == 0
    assert result.rows_skipped == 1
    assert len(result.errors) == 1
    assert result.errors[0].code == "missing_name"
    assert result.errors[0].row_number == 1
    assert await patient_repo.count(OWNER) == 0


async def test_short_name_counts_as_processed_not_created(import_use_case):
    result = await import_use_case.execute_rows(
        [{"Nombre": "J"}, {"Nombre": "Ana"}], OWNER
    )

    assert result.rows_processed == 2
    assert result.patients_created == 1
    assert [e.code for e in result.errors] == ["name_too_short"]


async def test_reimport_is_idempotent_on_patient_count(import_use_case, patient_repo):
    content = csv_bytes("""
        Nombre,Edad,Teléfono
        Ana Ruiz,30,111
        Juan Pérez,45,222
    """)

    first = await import_use_case.execute(content, OWNER)
    second = await import_use_case.execute(content, OWNER)

    assert first.patients_created == 2
    assert second.patients_created == 0
    assert second.patients_merged == 2
    assert await patient_repo.count(OWNER) == 2


async def test_duplicate_names_in_one_file_merge(import_use_case, patient_repo):
    result = await import_use_case.execute_rows(
        [
            {"Nombre": "Ana Ruiz", "Teléfono": "111"},
            {"Nombre": "ana ruiz", "Teléfono": "222"},
        ],
        OWNER,
    )

    assert result.patients_created == 1
    assert result.patients_merged == 1
    assert patient_repo.get("Ana Ruiz").phone == "222"


async def test_patient_store_failure_does_not_abort_batch(import_use_case, patient_repo):
    patient_repo.fail_for_names.add("Juan Pérez")

    result = await import_use_case.execute_rows(
        [{"Nombre": "Ana"}, {"Nombre": "Juan Pérez"}, {"Nombre": "Luis"}], OWNER
    )

    assert result.rows_processed == 3
    assert result.patients_created == 2
    assert [(e.row_number, e.code) for e in result.errors] == [(2, "upsert_patient_failed")]


async def test_consultation_failure_keeps_patient(import_use_case, patient_repo, consultation_repo):
    consultation_repo.fail_for_patient_ids.add("pat_1")

    result = await import_use_case.execute_rows(
        [{"Nombre": "Ana", "Notas": "Control"}, {"Nombre": "Luis", "Notas": "Gripe"}], OWNER
    )

    assert result.patients_created == 2
    assert result.consultations_created == 1
    assert [e.code for e in result.errors] == ["insert_consultation_failed"]


async def test_missing_owner_is_fatal_before_parsing(patient_repo, consultation_repo):
    class ExplodingParser:
        def parse(self, content):
            raise AssertionError("parser must not run")

    use_case = ImportPatientsUseCase(patient_repo, consultation_repo, parser=ExplodingParser())
    with pytest.raises(AuthError):
        await use_case.execute(b"Nombre\nAna\n", "")
    assert patient_repo.upsert_calls == 0


async def test_unreadable_file_is_fatal(import_use_case, patient_repo):
    with pytest.raises(FileParseError):
        await import_use_case.execute(b"", OWNER)
    assert patient_repo.upsert_calls == 0


async def test_iter_rows_yields_outcomes_in_order(import_use_case):
    rows = [{"Nombre": "Ana", "Notas": "Control"}, {"Nombre": ""}, {"Nombre": "Ana"}]

    outcomes = [o async for o in import_use_case.iter_rows(rows, OWNER, now=FIXED_NOW)]

    assert [o.row_number for o in outcomes] == [1, 2, 3]
    assert [o.status for o in outcomes] == [RowStatus.CREATED, RowStatus.SKIPPED, RowStatus.MERGED]
    assert outcomes[0].provenance == Provenance.IMPORTED
    assert outcomes[0].consultation_id is not None
    assert outcomes[2].patient_id == outcomes[0].patient_id


async def test_progress_callback_sync_and_async(import_use_case):
    seen = []
    await import_use_case.execute_rows(
        [{"Nombre": "Ana"}, {"Nombre": "Luis"}], OWNER, on_progress=lambda done, total: seen.append((done, total))
    )
    assert seen == [(1, 2), (2, 2)]

    async def record(done, total):
        seen.append(("async", done, total))

    await import_use_case.execute_rows([{"Nombre": "Ana"}], OWNER, on_progress=record)
    assert seen[-1] == ("async", 1, 1)


async def test_file_without_name_column_skips_every_row(import_use_case):
    result = await import_use_case.execute(csv_bytes("""
        Edad,Teléfono
        30,111
    """), OWNER)

    assert result.rows_processed == 1
    assert result.rows_skipped == 1


async def test_batch_result_to_dict(import_use_case):
    result = await import_use_case.execute_rows([{"Nombre": "Ana"}, {"Nombre": ""}], OWNER)

    assert result.to_dict() == {
        "rows_processed": 2,
        "patients_created": 1,
        "patients_merged": 0,
        "consultations_created": 0,
        "rows_skipped": 1,
        "errors": [{"row": 2, "code": "missing_name", "message": "Row has no patient name"}],
    }


async def test_row_wider_than_header_is_imported_with_an_issue(import_use_case, consultation_repo):
    result = await import_use_case.execute(csv_bytes("""
        Nombre,Edad,Notas
        Luis Gomez,40,dolor, fiebre
    """), OWNER)

    assert result.patients_created == 1
    assert result.consultations_created == 1
    assert [issue.code for issue in result.errors] == ["malformed_row"]
    assert result.errors[0].row_number == 1
    [consultation] = consultation_repo.records
    assert consultation.summary == "dolor, fiebre"


async def test_malformed_issue_is_kept_for_skipped_rows(import_use_case):
    result = await import_use_case.execute_rows(
        [{"Nombre": "", "Notas": "a,b"}], OWNER, malformed_rows={1: 3}
    )

    assert result.rows_skipped == 1
    assert [issue.code for issue in result.errors] == ["malformed_row", "missing_name"]


async def test_file_parsing_runs_off_the_event_loop(patient_repo, consultation_repo):
    calls = []

    class RecordingParser(PandasTabularParser):
        def parse_table(self, content):
            calls.append(threading.get_ident())
            return super().parse_table(content)

    use_case = ImportPatientsUseCase(patient_repo, consultation_repo, parser=RecordingParser())
    await use_case.execute(b"Nombre\nAna\n", OWNER)

    assert calls and calls[0] != threading.get_ident()
