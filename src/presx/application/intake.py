"""
Consultation intake form controller.

One controller owns the state of one consultation: the multi-step form, the
latest disease prediction, the recording capture and the submission status.
Nothing here is shared between consultations.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..domain.entities.intake_form import FormState, MedicationEntry
from ..domain.entities.patient import Patient
from ..domain.entities.prediction import PredictionResult
from ..domain.entities.recording import AudioBlob
from ..domain.enums import FormStep, PatientType
from ..domain.errors import DomainError, FormFieldError, FormLockedError
from .dto.prescription_dto import SubmissionResult
from .ports.services.audio_source import AudioSource
from .ports.services.prediction_service import PredictionService
from .recording import RecordingCapture
from .services.backend_errors import describe_backend_error
from .use_cases.submit_prescription import SubmitPrescriptionUseCase

logger = logging.getLogger(__name__)

_MEDICATION_FIELDS = ("name", "dosage", "duration", "instructions")


@dataclass
class SubmissionOutcome:
    """Result of ``IntakeFormController.submit``: a result or a user-facing error."""

    result: Optional[SubmissionResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


class IntakeFormController:
    """Drives one intake form from patient info to submission."""

    def __init__(
        self,
        submit_use_case: SubmitPrescriptionUseCase,
        prediction_service: PredictionService,
        recorder: Optional[RecordingCapture] = None,
        session_id: Optional[str] = None,
    ):
        self._submit_use_case = submit_use_case
        self._prediction_service = prediction_service
        self.session_id = session_id or uuid.uuid4().hex
        self.form = FormState()
        self.recorder = recorder or RecordingCapture()
        self.prediction: Optional[PredictionResult] = None
        self.is_submitting = False
        self.submit_error: Optional[str] = None
        self.result: Optional[SubmissionResult] = None
        self.created_at = datetime.utcnow()

    @property
    def step(self) -> FormStep:
        return self.form.step

    @property
    def locked(self) -> bool:
        return self.result is not None

    def _ensure_unlocked(self) -> None:
        if self.locked:
            raise FormLockedError()

    # Step transitions

    async def advance(self) -> FormStep:
        """Move forward one step, requesting a prediction when leaving SYMPTOMS."""
        self._ensure_unlocked()
        current = self.form.step
        if current.is_last:
            return current
        if current is FormStep.SYMPTOMS:
            await self._request_prediction()
        self.form.step = current.next()
        return self.form.step

    def retreat(self) -> FormStep:
        self._ensure_unlocked()
        self.form.step = self.form.step.previous()
        return self.form.step

    async def _request_prediction(self) -> None:
        symptoms = self.form.symptom_terms()
        logger.info("Requesting disease prediction", extra={"session_id": self.session_id})
        try:
            self.prediction = await self._prediction_service.predict(symptoms)
        except Exception as e:
            # the form keeps moving without a prediction
            logger.error(f"Prediction error: {e}", exc_info=True)

    # Field writes

    def update_field(self, field: str, value: Any, group: Optional[str] = None) -> None:
        self._ensure_unlocked()
        self.form.set_value(field, value, group=group)

    def update_group(self, group: str, values: Dict[str, Any]) -> None:
        self._ensure_unlocked()
        self.form.merge_group(group, values)

    def add_medication(self, entry: Optional[MedicationEntry] = None) -> int:
        """Append a medication row and return its index."""
        self._ensure_unlocked()
        self.form.medications.append(entry or MedicationEntry())
        return len(self.form.medications) - 1

    def update_medication(self, index: int, field: str, value: Any) -> None:
        self._ensure_unlocked()
        if field not in _MEDICATION_FIELDS:
            raise FormFieldError(field, "medications")
        entry = self._medication_at(index)
        setattr(entry, field, "" if value is None else str(value))

    def remove_medication(self, index: int) -> None:
        self._ensure_unlocked()
        self._medication_at(index)
        del self.form.medications[index]

    def _medication_at(self, index: int) -> MedicationEntry:
        if not 0 <= index < len(self.form.medications):
            raise FormFieldError(f"medications[{index}]")
        return self.form.medications[index]

    def add_test(self, name: str = "") -> bool:
        """Append a requested test; a named test already listed is not added twice."""
        self._ensure_unlocked()
        name = (name or "").strip()
        if name and name in self.form.tests:
            return False
        self.form.tests.append(name)
        return True

    def update_test(self, index: int, name: str) -> None:
        self._ensure_unlocked()
        self._test_index(index)
        self.form.tests[index] = (name or "").strip()

    def remove_test(self, index: int) -> None:
        self._ensure_unlocked()
        self._test_index(index)
        del self.form.tests[index]

    def _test_index(self, index: int) -> None:
        if not 0 <= index < len(self.form.tests):
            raise FormFieldError(f"tests[{index}]")

    def select_patient(self, patient: Patient) -> None:
        """Fill the form from an existing patient record."""
        self._ensure_unlocked()
        info = patient.personal_info
        self.form.patient_type = PatientType.EXISTING.value
        self.form.selected_patient_id = patient.patient_id.value
        self.form.merge_group(
            "patient_info",
            {
                "name": info.name,
                "age": str(info.age),
                "gender": info.gender.value,
                "phone": info.phone or "",
                "medical_history": patient.medical_history,
            },
        )

    # Recording

    async def start_recording(self, source: AudioSource) -> None:
        self._ensure_unlocked()
        await self.recorder.start(source)

    async def stop_recording(self) -> Optional[AudioBlob]:
        return await self.recorder.stop()

    # Submission

    async def submit(self) -> SubmissionOutcome:
        """
        Submit the consultation.

        Errors are returned as a user-facing message on the outcome; the
        ``is_submitting`` flag is cleared whatever happens. After a successful
        submission the controller is locked.
        """
        self._ensure_unlocked()
        if self.is_submitting:
            return SubmissionOutcome(error="A submission is already in progress.")

        self.is_submitting = True
        self.submit_error = None
        try:
            if self.recorder.is_recording:
                await self.recorder.stop()
            result = await self._submit_use_case.execute(
                self.form,
                audio=self.recorder.audio,
                duration_seconds=self.recorder.elapsed_seconds,
            )
        except DomainError as e:
            logger.warning(f"Submission rejected: {e.message}")
            self.submit_error = e.message
            return SubmissionOutcome(error=e.message)
        except Exception as e:
            # describe_backend_error logs the traceback
            self.submit_error = describe_backend_error(e)
            return SubmissionOutcome(error=self.submit_error)
        finally:
            self.is_submitting = False

        self.result = result
        return SubmissionOutcome(result=result)

    # Teardown

    async def close(self) -> None:
        await self.recorder.close()

    async def __aenter__(self) -> "IntakeFormController":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def snapshot(self) -> Dict[str, Any]:
        """Plain view of the controller state for API responses."""
        return {
            "session_id": self.session_id,
            "form": self.form.to_dict(),
            "prediction": self.prediction,
            "is_recording": self.recorder.is_recording,
            "has_recording": self.recorder.has_recording,
            "recording_duration": self.recorder.elapsed_seconds,
            "is_submitting": self.is_submitting,
            "submit_error": self.submit_error,
            "locked": self.locked,
        }
