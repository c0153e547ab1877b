"""Prescription operations of the data access facade."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ...domain.entities.activity import RecentActivity
from ...domain.entities.prescription import Prescription
from ...domain.errors import PatientNotFoundError, PrescriptionNotFoundError
from ...domain.value_objects.patient_id import PatientId
from ...domain.value_objects.prescription_id import PrescriptionId
from ..dto.prescription_dto import PrescriptionUpdate
from ..ports.repositories.activity_repo import ActivityRepository
from ..ports.repositories.patient_repo import PatientRepository
from ..ports.repositories.prescription_repo import PrescriptionRepository

logger = logging.getLogger(__name__)

_ONE_MICROSECOND = timedelta(microseconds=1)


class PrescriptionService:
    """Create, read and update prescriptions."""

    def __init__(
        self,
        prescription_repository: PrescriptionRepository,
        patient_repository: PatientRepository,
        activity_repository: ActivityRepository,
    ):
        self._prescription_repository = prescription_repository
        self._patient_repository = patient_repository
        self._activity_repository = activity_repository

    async def create_prescription(self, prescription: Prescription) -> Prescription:
        """
        Insert a prescription for an existing patient.

        The activity entry is appended only after the prescription is written.

        Raises:
            PatientNotFoundError: if the referenced patient does not exist.
        """
        patient = await self._patient_repository.find_by_id(
            PatientId(prescription.patient_id)
        )
        if patient is None:
            raise PatientNotFoundError(prescription.patient_id)

        now = datetime.utcnow()
        prescription.created_at = now
        prescription.updated_at = now
        saved = await self._prescription_repository.create(prescription)

        await self._activity_repository.append(
            RecentActivity.prescription_created(
                patient_id=patient.patient_id.value,
                patient_name=patient.name,
                prescription_id=saved.prescription_id.value,
                timestamp=now,
            )
        )
        logger.info(
            "Prescription created",
            extra={
                "prescription_id": saved.prescription_id.value,
                "patient_id": patient.patient_id.value,
            },
        )
        return saved

    async def get_prescription_by_id(self, prescription_id: str) -> Optional[Prescription]:
        return await self._prescription_repository.find_by_id(
            PrescriptionId(prescription_id)
        )

    async def require_prescription(self, prescription_id: str) -> Prescription:
        prescription = await self.get_prescription_by_id(prescription_id)
        if prescription is None:
            raise PrescriptionNotFoundError(prescription_id)
        return prescription

    async def get_prescriptions_by_patient(self, patient_id: str) -> List[Prescription]:
        return await self._prescription_repository.find_by_patient(patient_id)

    async def get_recent_prescriptions(self, limit: int = 5) -> List[Prescription]:
        return await self._prescription_repository.find_recent(limit)

    async def get_prescriptions_by_date_range(
        self, start: datetime, end: datetime
    ) -> List[Prescription]:
        """Prescriptions created within ``[start, end]``, newest first."""
        if end < start:
            raise ValueError("End date must not be before start date")
        # repository upper bound is exclusive
        return await self._prescription_repository.find_created_between(
            start, end + _ONE_MICROSECOND
        )

    async def update_prescription(
        self, prescription_id: str, changes: PrescriptionUpdate
    ) -> Prescription:
        """Apply a partial update; ``updated_at`` is re-stamped, ``created_at`` kept."""
        prescription = await self.require_prescription(prescription_id)

        if changes.status is not None:
            prescription.status = changes.status
        if changes.pdf_url is not None:
            prescription.document.pdf_url = changes.pdf_url
        if changes.pdf_file_name is not None:
            prescription.document.pdf_file_name = changes.pdf_file_name
        if changes.expires_at is not None:
            prescription.document.expires_at = changes.expires_at
        if changes.notes is not None:
            prescription.consultation_info.notes = changes.notes or None
        if changes.test_reports is not None:
            prescription.test_reports = list(changes.test_reports) or None

        prescription.updated_at = datetime.utcnow()
        return await self._prescription_repository.update(prescription)
