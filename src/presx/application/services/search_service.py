"""Patient search."""

from typing import List

from ...domain.entities.patient import Patient
from ..ports.repositories.patient_repo import PatientRepository


class SearchService:
    """Name search over active patients.

    Matching is a case-insensitive substring test done in process; the
    patients collection is small enough per clinic that no text index is used.
    """

    def __init__(self, patient_repository: PatientRepository):
        self._patient_repository = patient_repository

    async def search_patients_by_name(self, search_term: str) -> List[Patient]:
        term = (search_term or "").strip().lower()
        if not term:
            return []
        patients = await self._patient_repository.list_active_by_name()
        return [p for p in patients if term in p.personal_info.name.lower()]
