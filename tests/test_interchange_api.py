"""
HTTP tests for the import and export endpoints.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from vitalscribe.api import deps
from vitalscribe.app import create_app
from vitalscribe.core import auth
from vitalscribe.core.auth import AuthService
from vitalscribe.core.config import get_settings

from conftest import csv_bytes

API_KEY = "test-key"
HEADERS = {"X-API-Key": API_KEY}

PATIENTS_CSV = csv_bytes("""
    Nombre;Edad;Teléfono;Notas
    Ana Ruiz;30;111;Control anual
    ;40;;
    Juan Pérez;45;222;
""")


@pytest.fixture
def client(monkeypatch, patient_repo, consultation_repo):
    """Create a test client wired to in-memory stores."""
    monkeypatch.setattr(auth, "_auth_service", AuthService(f"{API_KEY}:doctor_1"))
    app = create_app()
    app.dependency_overrides[deps.get_patient_repository] = lambda: patient_repo
    app.dependency_overrides[deps.get_consultation_repository] = lambda: consultation_repo
    return TestClient(app)


def _upload(client, content=PATIENTS_CSV, filename="pacientes.csv", headers=HEADERS):
    return client.post(
        "/patients/import",
        files={"file": (filename, content, "text/csv")},
        headers=headers,
    )


def test_import_returns_batch_summary(client, patient_repo):
    response = _upload(client)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"] == {
        "rows_processed": 3,
        "patients_created": 2,
        "patients_merged": 0,
        "consultations_created": 1,
        "rows_skipped": 1,
        "errors": [{"row": 2, "code": "missing_name", "message": "Row has no patient name"}],
    }
    assert response.headers["X-Request-ID"]
    assert patient_repo.get("Ana Ruiz") is not None


def test_import_accepts_bearer_token(client):
    response = _upload(client, headers={"Authorization": f"Bearer {API_KEY}"})
    assert response.status_code == 200


@pytest.mark.parametrize("headers", [{}, {"X-API-Key": "wrong"}])
def test_import_requires_owner(client, patient_repo, headers):
    response = _upload(client, headers=headers)

    assert response.status_code == 401
    assert response.json()["error"] == "AUTH_ERROR"
    assert patient_repo.upsert_calls == 0


def test_unparseable_file_is_400(client):
    response = _upload(client, content=b"Nombre,Edad\n")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "FILE_PARSE_ERROR"


def test_unsupported_extension_is_415(client):
    response = _upload(client, filename="pacientes.xlsx")

    assert response.status_code == 415
    assert response.json()["error"] == "UNSUPPORTED_FILE_TYPE"


def test_oversized_upload_is_413(client, monkeypatch):
    monkeypatch.setattr(get_settings().interchange, "max_upload_mb", 1)
    content = b"Nombre\n" + b"Ana Ruiz\n" * (1024 * 1024 // 9 + 10)

    response = _upload(client, content=content)

    assert response.status_code == 413
    assert response.json()["error"] == "FILE_TOO_LARGE"


def test_missing_file_field_is_422(client):
    response = client.post("/patients/import", headers=HEADERS)

    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_INPUT"


def test_export_returns_csv_attachment(client):
    _upload(client)

    response = client.get("/patients/export", headers=HEADERS)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    expected_name = f"Respaldo_Clinico_{datetime.now(timezone.utc).date().isoformat()}.csv"
    assert response.headers["content-disposition"] == f'attachment; filename="{expected_name}"'
    assert response.headers["x-patient-count"] == "2"
    assert response.content.startswith(b"\xef\xbb\xbf")
    lines = response.content.decode("utf-8-sig").splitlines()
    assert lines[0].startswith('"ID Sistema","Nombre Completo"')
    assert len(lines) == 3


def test_export_without_patients_is_404(client):
    response = client.get("/patients/export", headers=HEADERS)

    assert response.status_code == 404
    assert response.json()["error"] == "EMPTY_EXPORT"


def test_export_requires_owner(client):
    assert client.get("/patients/export").status_code == 401
