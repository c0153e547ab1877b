"""Prescription repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Set

from ....domain.entities.prescription import Prescription
from ....domain.value_objects.prescription_id import PrescriptionId


class PrescriptionRepository(ABC):
    """Abstract repository for prescription data access."""

    @abstractmethod
    async def create(self, prescription: Prescription) -> Prescription:
        """Insert a new prescription."""
        pass

    @abstractmethod
    async def update(self, prescription: Prescription) -> Prescription:
        """Replace the stored copy of an existing prescription."""
        pass

    @abstractmethod
    async def find_by_id(self, prescription_id: PrescriptionId) -> Optional[Prescription]:
        """Find a prescription by ID."""
        pass

    @abstractmethod
    async def find_by_patient(self, patient_id: str) -> List[Prescription]:
        """Prescriptions for one patient, newest first."""
        pass

    @abstractmethod
    async def find_recent(self, limit: int = 5) -> List[Prescription]:
        """Most recently created prescriptions."""
        pass

    @abstractmethod
    async def find_created_between(
        self, start: datetime, end: Optional[datetime] = None
    ) -> List[Prescription]:
        """Prescriptions with ``start <= created_at < end``, newest first."""
        pass

    @abstractmethod
    async def count_created_between(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> int:
        """Count prescriptions with ``start <= created_at < end``; open bounds allowed."""
        pass

    @abstractmethod
    async def distinct_patient_ids_since(self, since: datetime) -> Set[str]:
        """Patient ids with at least one prescription created since ``since``."""
        pass
