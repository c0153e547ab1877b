"""Submit Prescription use case: turns a completed intake form into records."""

import logging
import re
import time
from datetime import datetime
from typing import List, Optional

from ...core.config import DoctorSettings, RecordingSettings
from ...domain.entities.intake_form import FormState
from ...domain.entities.patient import MedicalInfo, PersonalInfo
from ...domain.entities.prescription import (
    ConsultationInfo,
    ConversationRecording,
    DoctorInfo,
    Medication,
    Prescription,
    PrescriptionDocument,
    TestReport,
)
from ...domain.entities.recording import AudioBlob
from ...domain.enums import ConsultationType, PatientType, PrescriptionStatus, TestType
from ...domain.errors import PatientValidationError
from ...domain.value_objects.prescription_id import PrescriptionId
from ..dto.prescription_dto import RecordingDownload, SubmissionResult
from ..ports.services.audio_storage import AudioStorage
from ..services.patient_service import PatientService
from ..services.prescription_service import PrescriptionService

logger = logging.getLogger(__name__)

DEFAULT_CHIEF_COMPLAINT = "No specific complaint"
DEFAULT_DIAGNOSIS = "General consultation"

_WHITESPACE = re.compile(r"\s+")


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class SubmitPrescriptionUseCase:
    """Validate the form, resolve the patient and write the prescription."""

    def __init__(
        self,
        patient_service: PatientService,
        prescription_service: PrescriptionService,
        doctor: DoctorSettings,
        recording: RecordingSettings,
        audio_storage: Optional[AudioStorage] = None,
    ):
        self._patient_service = patient_service
        self._prescription_service = prescription_service
        self._doctor = doctor
        self._recording = recording
        self._audio_storage = audio_storage

    async def execute(
        self,
        form: FormState,
        audio: Optional[AudioBlob] = None,
        duration_seconds: int = 0,
    ) -> SubmissionResult:
        """
        Run the submission sequence.

        Validation happens before anything is written. The patient is resolved
        first, then the prescription is created; the facade appends the
        activity entries.

        Raises:
            PatientValidationError: required form values are missing or invalid.
            PatientNotFoundError: the selected existing patient does not exist.
        """
        personal_info = self._validate(form)

        patient_created = False
        if form.patient_kind is PatientType.NEW:
            history = form.patient_info.medical_history.strip()
            medical_info = MedicalInfo(chronic_conditions=[history]) if history else None
            patient = await self._patient_service.create_patient(
                personal_info, medical_info=medical_info, is_active=True
            )
            patient_id = patient.patient_id.value
            patient_created = True
        else:
            patient_id = form.selected_patient_id

        download = None
        conversation_recording = None
        if audio is not None and audio.chunk_count > 0:
            file_name = f"consultation_{patient_id}_{_epoch_millis()}.webm"
            download = RecordingDownload(
                file_name=file_name,
                data=audio.data,
                content_type=audio.content_type,
                duration_seconds=duration_seconds,
            )
            conversation_recording = await self._upload_recording(
                audio, file_name, duration_seconds
            )

        now = datetime.utcnow()
        symptoms = form.symptoms.strip()
        advice = form.advice.strip()
        prescription = Prescription(
            prescription_id=PrescriptionId.generate(),
            patient_id=patient_id,
            personal_info=personal_info,
            consultation_info=ConsultationInfo(
                consultation_date=now,
                consultation_type=ConsultationType.IN_PERSON,
                chief_complaint=symptoms or DEFAULT_CHIEF_COMPLAINT,
                diagnosis=symptoms or DEFAULT_DIAGNOSIS,
                notes=advice or None,
                conversation_recording=conversation_recording,
            ),
            medications=[
                Medication(
                    name=entry.name,
                    dosage=entry.dosage,
                    frequency=entry.instructions,
                    duration=entry.duration,
                    instructions=entry.instructions or None,
                )
                for entry in form.medications
            ],
            doctor_info=DoctorInfo(
                doctor_id=self._doctor.id,
                doctor_name=self._doctor.name,
                specialization=self._doctor.specialization,
                license_number=self._doctor.license_number,
            ),
            document=PrescriptionDocument(
                pdf_url="",
                pdf_file_name=f"prescription_{_epoch_millis()}.pdf",
                generated_at=now,
            ),
            test_reports=self._build_test_reports(form.tests, now),
            status=PrescriptionStatus.ACTIVE,
        )

        saved = await self._prescription_service.create_prescription(prescription)
        logger.info(
            "Consultation submitted",
            extra={
                "patient_id": patient_id,
                "prescription_id": saved.prescription_id.value,
                "patient_created": patient_created,
                "has_recording": download is not None,
            },
        )

        return SubmissionResult(
            patient_id=patient_id,
            prescription=saved,
            patient_created=patient_created,
            recording_download=download,
            recording_uploaded=conversation_recording is not None,
        )

    def _validate(self, form: FormState) -> PersonalInfo:
        info = form.patient_info
        missing = [
            name
            for name, value in (("name", info.name), ("age", info.age), ("gender", info.gender))
            if not value.strip()
        ]
        if missing:
            raise PatientValidationError(
                "Please fill in all required patient information fields", missing
            )

        if form.patient_kind is not PatientType.NEW and not form.selected_patient_id:
            raise PatientValidationError(
                "Please select an existing patient or choose to create a new one",
                ["selected_patient_id"],
            )

        try:
            age = int(info.age.strip())
        except ValueError:
            raise PatientValidationError(f"Invalid patient age: {info.age}", ["age"])

        return PersonalInfo(
            name=info.name,
            age=age,
            gender=info.gender.strip(),
            phone=info.phone.strip(),
        )

    async def _upload_recording(
        self, audio: AudioBlob, file_name: str, duration_seconds: int
    ) -> Optional[ConversationRecording]:
        """Best-effort persistent upload; failures never abort the submission."""
        if not self._recording.upload_enabled or self._audio_storage is None:
            return None
        try:
            stored = await self._audio_storage.upload_recording(audio, file_name)
        except Exception as e:
            logger.warning(f"Error uploading recording: {e}", exc_info=True)
            return None
        return ConversationRecording(
            id=f"recording_{_epoch_millis()}",
            audio_url=stored.audio_url,
            file_name=stored.file_name,
            duration=duration_seconds,
            uploaded_at=datetime.utcnow(),
            file_size=stored.file_size,
        )

    @staticmethod
    def _build_test_reports(tests: List[str], now: datetime) -> Optional[List[TestReport]]:
        names = [name.strip() for name in tests if name and name.strip()]
        if not names:
            return None
        return [
            TestReport(
                id=f"test_{index}",
                name=name,
                file_url="",
                file_name=f"{_WHITESPACE.sub('_', name)}.pdf",
                uploaded_at=now,
                test_type=TestType.OTHER,
            )
            for index, name in enumerate(names)
        ]
