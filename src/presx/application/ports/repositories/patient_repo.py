"""Patient repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ....domain.entities.patient import Patient
from ....domain.value_objects.patient_id import PatientId


class PatientRepository(ABC):
    """Abstract repository for patient data access."""

    @abstractmethod
    async def create(self, patient: Patient) -> Patient:
        """Insert a new patient."""
        pass

    @abstractmethod
    async def update(self, patient: Patient) -> Patient:
        """Replace the stored copy of an existing patient."""
        pass

    @abstractmethod
    async def find_by_id(self, patient_id: PatientId) -> Optional[Patient]:
        """Find a patient by ID."""
        pass

    @abstractmethod
    async def list_active(
        self, after: Optional[PatientId] = None, limit: int = 20
    ) -> Tuple[List[Patient], bool]:
        """
        Page through active patients, most recently updated first.

        Args:
            after: Cursor; the last patient of the previous page
            limit: Page size

        Returns:
            Tuple of (patients, has_more)
        """
        pass

    @abstractmethod
    async def list_active_by_name(self) -> List[Patient]:
        """All active patients ordered by name."""
        pass

    @abstractmethod
    async def count_active(self) -> int:
        """Number of active patients."""
        pass
