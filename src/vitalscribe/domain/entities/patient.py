"""Patient domain entity as seen by the interchange engine."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..enums.interchange import Gender
from ..errors import InvalidPatientDataError
from ..value_objects.dedup_key import DedupKey, normalize_name_key


@dataclass
class PatientRecord:
    """Patient demographics keyed by (owner, normalized name).

    ``gender`` is ``None`` when the source carried no gender value; the store
    then keeps whatever it already has (``Other`` for a new patient).
    """

    owner_id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    patient_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate patient data."""
        self.name = (self.name or "").strip()
        if len(self.name) < 2:
            raise InvalidPatientDataError("name", self.name)
        # A birth date must never be a raw age string or a timestamp
        if self.birth_date is not None:
            if isinstance(self.birth_date, datetime) or not isinstance(self.birth_date, date):
                raise InvalidPatientDataError("birth_date", self.birth_date)

    @property
    def name_key(self) -> str:
        return normalize_name_key(self.name)

    @property
    def dedup_key(self) -> DedupKey:
        return DedupKey(owner_id=self.owner_id, name_key=self.name_key)


@dataclass
class PatientSnapshot:
    """A stored patient together with the creation timestamps of its consultations.

    This is the read model consumed by the export path.
    """

    patient_id: str
    owner_id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    created_at: Optional[datetime] = None
    consultation_dates: List[datetime] = field(default_factory=list)
    last_summary: Optional[str] = None

    @property
    def last_visit(self) -> Optional[datetime]:
        """Most recent consultation timestamp, if any."""
        return max(self.consultation_dates) if self.consultation_dates else None
