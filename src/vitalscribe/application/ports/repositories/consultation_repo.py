"""
Consultation repository interface. Insert-only.
"""

from abc import ABC, abstractmethod

from ....domain.entities.consultation import ConsultationRecord


class ConsultationRepository(ABC):
    """Abstract repository for consultation records."""

    @abstractmethod
    async def insert(self, consultation: ConsultationRecord) -> str:
        """Insert a new consultation and return its id.

        Raises ``StoreWriteError`` on failure.
        """
        pass
