"""Patient operations of the data access facade."""

import logging
from datetime import datetime
from typing import Optional

from ...domain.entities.activity import RecentActivity
from ...domain.entities.patient import MedicalInfo, Patient, PersonalInfo
from ...domain.errors import PatientNotFoundError
from ...domain.value_objects.patient_id import PatientId
from ..dto.patient_dto import PatientPage, PatientUpdate
from ..ports.repositories.activity_repo import ActivityRepository
from ..ports.repositories.patient_repo import PatientRepository

logger = logging.getLogger(__name__)


class PatientService:
    """Create, read, update and soft-delete patients."""

    def __init__(
        self,
        patient_repository: PatientRepository,
        activity_repository: ActivityRepository,
    ):
        self._patient_repository = patient_repository
        self._activity_repository = activity_repository

    async def create_patient(
        self,
        personal_info: PersonalInfo,
        medical_info: Optional[MedicalInfo] = None,
        is_active: bool = True,
    ) -> Patient:
        """Insert a patient and log a ``patient_added`` activity."""
        now = datetime.utcnow()
        patient = Patient(
            patient_id=PatientId.generate(),
            personal_info=personal_info,
            medical_info=medical_info if medical_info and not medical_info.is_empty() else None,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        saved = await self._patient_repository.create(patient)

        await self._activity_repository.append(
            RecentActivity.patient_added(saved.patient_id.value, saved.name, now)
        )
        logger.info("Patient created", extra={"patient_id": saved.patient_id.value})
        return saved

    async def get_patient_by_id(self, patient_id: str) -> Optional[Patient]:
        return await self._patient_repository.find_by_id(PatientId(patient_id))

    async def require_patient(self, patient_id: str) -> Patient:
        patient = await self.get_patient_by_id(patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id)
        return patient

    async def get_all_patients(
        self, after: Optional[str] = None, page_size: int = 20
    ) -> PatientPage:
        """Active patients, most recently updated first, cursor-paginated."""
        cursor = PatientId(after) if after else None
        patients, has_more = await self._patient_repository.list_active(
            after=cursor, limit=page_size
        )
        return PatientPage(
            patients=patients,
            last_patient_id=patients[-1].patient_id.value if patients else None,
            has_more=has_more,
        )

    async def update_patient(self, patient_id: str, changes: PatientUpdate) -> Patient:
        """Apply a partial update; ``updated_at`` is re-stamped, ``created_at`` kept."""
        patient = await self.require_patient(patient_id)
        patient.update_details(
            name=changes.name,
            age=changes.age,
            gender=changes.gender,
            phone=changes.phone,
            email=changes.email,
            address=changes.address,
        )
        patient.update_medical_info(
            blood_group=changes.blood_group,
            allergies=changes.allergies,
            chronic_conditions=changes.chronic_conditions,
            current_medications=changes.current_medications,
        )
        if changes.is_active is not None:
            patient.is_active = changes.is_active
        patient.updated_at = datetime.utcnow()
        return await self._patient_repository.update(patient)

    async def deactivate_patient(self, patient_id: str) -> Patient:
        """Soft delete."""
        patient = await self.require_patient(patient_id)
        patient.deactivate()
        saved = await self._patient_repository.update(patient)
        logger.info("Patient deactivated", extra={"patient_id": patient_id})
        return saved
