"""
MongoDB implementation of PatientRepository.

The upsert is a single ``find_one_and_update`` keyed on the unique
(owner_id, name_key) index, so two concurrent imports of the same name
converge on one document.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from vitalscribe.application.dto.interchange_dto import ResolvedPatient
from vitalscribe.application.ports.repositories.patient_repo import PatientRepository
from vitalscribe.core.utils.string_utils import generate_id
from vitalscribe.domain.entities.patient import PatientRecord, PatientSnapshot
from vitalscribe.domain.enums.interchange import Gender
from vitalscribe.domain.errors import StoreWriteError

from ..models.patient_m import ConsultationMongo, PatientMongo

logger = logging.getLogger("vitalscribe")

UPSERT_ATTEMPTS = 2


def build_upsert_update(
    patient: PatientRecord, new_patient_id: str, now: datetime
) -> Dict[str, Dict[str, Any]]:
    """Build the update document for a last-write-wins upsert.

    Only fields present on the incoming record are written; absent fields
    keep whatever the stored patient already has. ``$set`` and
    ``$setOnInsert`` never share a key.
    """
    to_set: Dict[str, Any] = {"name": patient.name, "updated_at": now}
    if patient.phone:
        to_set["phone"] = patient.phone
    if patient.email:
        to_set["email"] = patient.email
    if patient.birth_date is not None:
        to_set["birth_date"] = patient.birth_date.isoformat()
    if patient.gender is not None:
        to_set["gender"] = patient.gender.value

    on_insert: Dict[str, Any] = {
        "patient_id": new_patient_id,
        "owner_id": patient.owner_id,
        "name_key": patient.name_key,
        "created_at": now,
    }
    if patient.gender is None:
        on_insert["gender"] = Gender.OTHER.value

    return {"$set": to_set, "$setOnInsert": on_insert}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Motor returns naive datetimes unless the client is tz_aware
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_birth_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning(f"Ignoring malformed stored birth_date: {value!r}")
        return None


def _parse_gender(value: Optional[str]) -> Optional[Gender]:
    if not value:
        return None
    try:
        return Gender(value)
    except ValueError:
        return Gender.OTHER


class MongoPatientRepository(PatientRepository):
    """MongoDB implementation of PatientRepository."""

    def _collection(self):
        return PatientMongo.get_motor_collection()

    async def upsert(self, patient: PatientRecord) -> ResolvedPatient:
        """Insert or update the patient identified by (owner_id, name_key)."""
        now = datetime.now(timezone.utc)
        new_patient_id = generate_id("pat_")
        update = build_upsert_update(patient, new_patient_id, now)
        key = patient.dedup_key
        query = {"owner_id": key.owner_id, "name_key": key.name_key}

        previous = None
        for attempt in range(1, UPSERT_ATTEMPTS + 1):
            try:
                previous = await self._collection().find_one_and_update(
                    query,
                    update,
                    upsert=True,
                    projection={"patient_id": 1},
                    return_document=ReturnDocument.BEFORE,
                )
                break
            except DuplicateKeyError as e:
                # A concurrent upsert inserted the same key first; retrying matches it
                if attempt == UPSERT_ATTEMPTS:
                    raise StoreWriteError(
                        "upsert_patient", str(e), {"name_key": patient.name_key}
                    ) from e
                logger.debug(f"Duplicate key on upsert for {patient.name_key!r}, retrying")
            except PyMongoError as e:
                raise StoreWriteError(
                    "upsert_patient", str(e), {"name_key": patient.name_key}
                ) from e

        if previous is None:
            return ResolvedPatient(patient_id=new_patient_id, created=True)
        return ResolvedPatient(patient_id=previous["patient_id"], created=False)

    async def list_with_consultations(self, owner_id: str) -> List[PatientSnapshot]:
        """List the owner's patients, each with its consultation dates."""
        pipeline = [
            {"$match": {"owner_id": owner_id}},
            {
                "$lookup": {
                    "from": ConsultationMongo.Settings.name,
                    "let": {"pid": "$patient_id"},
                    "pipeline": [
                        {
                            "$match": {
                                "$expr": {
                                    "$and": [
                                        {"$eq": ["$patient_id", "$$pid"]},
                                        {"$eq": ["$owner_id", owner_id]},
                                    ]
                                }
                            }
                        },
                        {"$sort": {"created_at": -1}},
                        {"$project": {"_id": 0, "created_at": 1, "summary": 1}},
                    ],
                    "as": "consultations",
                }
            },
            {"$sort": {"name_key": 1, "patient_id": 1}},
        ]
        try:
            cursor = self._collection().aggregate(pipeline)
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StoreWriteError("list_patients", str(e), {"owner_id": owner_id}) from e

        return [self._snapshot_from_document(doc) for doc in documents]

    async def count(self, owner_id: str) -> int:
        try:
            return await PatientMongo.find(PatientMongo.owner_id == owner_id).count()
        except PyMongoError as e:
            raise StoreWriteError("count_patients", str(e), {"owner_id": owner_id}) from e

    def _snapshot_from_document(self, doc: Dict[str, Any]) -> PatientSnapshot:
        consultations = doc.get("consultations") or []
        dates = [
            _as_utc(item["created_at"])
            for item in consultations
            if item.get("created_at") is not None
        ]
        # Consultations arrive newest first
        last_summary = consultations[0].get("summary") if consultations else None

        return PatientSnapshot(
            patient_id=doc["patient_id"],
            owner_id=doc["owner_id"],
            name=doc["name"],
            phone=doc.get("phone"),
            email=doc.get("email"),
            birth_date=_parse_birth_date(doc.get("birth_date")),
            gender=_parse_gender(doc.get("gender")),
            created_at=_as_utc(doc.get("created_at")),
            consultation_dates=dates,
            last_summary=last_summary,
        )
