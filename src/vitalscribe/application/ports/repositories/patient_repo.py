"""
Patient repository interface for data access abstraction.
"""

from abc import ABC, abstractmethod
from typing import List

from ....domain.entities.patient import PatientRecord, PatientSnapshot
from ...dto.interchange_dto import ResolvedPatient


class PatientRepository(ABC):
    """Abstract repository for patient data access.

    Implementations must enforce a unique constraint on (owner_id, name_key)
    and raise ``StoreWriteError`` for any failed write, including network
    and timeout failures.
    """

    @abstractmethod
    async def upsert(self, patient: PatientRecord) -> ResolvedPatient:
        """Atomically create or update the patient identified by its dedup key.

        Only fields present on ``patient`` are written; absent fields leave
        stored values untouched.
        """
        pass

    @abstractmethod
    async def list_with_consultations(self, owner_id: str) -> List[PatientSnapshot]:
        """All of an owner's patients, each with its consultation timestamps."""
        pass

    @abstractmethod
    async def count(self, owner_id: str) -> int:
        """Number of patients stored for an owner."""
        pass
