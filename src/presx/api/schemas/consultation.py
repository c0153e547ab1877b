"""
Pydantic schemas for consultation intake endpoints.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from ...application.intake import IntakeFormController, SubmissionOutcome
from ...domain.entities.prediction import PredictionResult
from ...domain.entities.recording import RecordingSession


class PatientFieldsSchema(BaseModel):
    name: str = ""
    age: str = ""
    gender: str = ""
    medical_history: str = ""
    phone: str = ""


class VitalsSchema(BaseModel):
    bp: str = ""
    spo2: str = ""
    weight: str = ""


class MedicationEntrySchema(BaseModel):
    name: str = ""
    dosage: str = ""
    duration: str = ""
    instructions: str = ""


class FormSchema(BaseModel):
    step: int
    step_label: str
    patient_type: str
    patient_info: PatientFieldsSchema
    vitals: VitalsSchema
    symptoms: str
    tests: List[str]
    medications: List[MedicationEntrySchema]
    advice: str
    selected_patient_id: Optional[str] = None


class DiseasePredictionSchema(BaseModel):
    disease: str
    confidence: float
    confidence_percent: str


class PredictionSchema(BaseModel):
    primary_prediction: DiseasePredictionSchema
    alternative_predictions: List[DiseasePredictionSchema]
    symptoms_reported: List[str]
    graph_image: Optional[str] = Field(None, description="Base64 PNG")
    symptoms_chart: Optional[str] = Field(None, description="Base64 PNG")

    @classmethod
    def from_domain(cls, result: PredictionResult) -> "PredictionSchema":
        def _one(p):
            return DiseasePredictionSchema(
                disease=p.disease,
                confidence=p.confidence,
                confidence_percent=p.confidence_percent,
            )

        return cls(
            primary_prediction=_one(result.primary),
            alternative_predictions=[_one(p) for p in result.alternatives],
            symptoms_reported=result.symptoms_reported,
            graph_image=result.graph_image,
            symptoms_chart=result.symptoms_chart,
        )


class ConsultationStateResponse(BaseModel):
    """Full state of one intake session."""

    session_id: str
    form: FormSchema
    prediction: Optional[PredictionSchema] = None
    is_recording: bool
    has_recording: bool
    recording_duration: int = Field(..., description="Elapsed seconds")
    recording_duration_label: str = Field(..., description="m:ss")
    is_submitting: bool
    submit_error: Optional[str] = None
    locked: bool

    @classmethod
    def from_controller(cls, controller: IntakeFormController) -> "ConsultationStateResponse":
        state = controller.snapshot()
        prediction = state.pop("prediction")
        return cls(
            prediction=PredictionSchema.from_domain(prediction) if prediction else None,
            recording_duration_label=RecordingSession.format_duration(
                state["recording_duration"]
            ),
            **state,
        )


class FieldUpdate(BaseModel):
    field: str = Field(..., description="Field name")
    value: Any = Field(None, description="New value")
    group: Optional[str] = Field(None, description="patient_info or vitals")


class UpdateFieldsRequest(BaseModel):
    updates: List[FieldUpdate] = Field(..., min_length=1)


class MedicationFieldUpdate(BaseModel):
    field: str
    value: Any = None


class TestRequest(BaseModel):
    __test__ = False  # not a pytest test class

    name: str = ""


class SelectPatientRequest(BaseModel):
    patient_id: str


class StartRecordingRequest(BaseModel):
    microphone_granted: bool = Field(True, description="Whether the client obtained microphone access")
    reason: Optional[str] = None


class StartRecordingResponse(BaseModel):
    started: bool
    message: Optional[str] = None


class ChunkResponse(BaseModel):
    accepted: bool
    chunks: int


class StopRecordingResponse(BaseModel):
    has_recording: bool
    chunks: int
    size: int
    duration_seconds: int


class SubmitResponse(BaseModel):
    success: bool
    error: Optional[str] = None
    message: Optional[str] = None
    patient_id: Optional[str] = None
    prescription_id: Optional[str] = None
    patient_created: bool = False
    recording_file_name: Optional[str] = None
    recording_uploaded: bool = False

    @classmethod
    def from_outcome(cls, outcome: SubmissionOutcome) -> "SubmitResponse":
        if not outcome.succeeded:
            return cls(success=False, error=outcome.error)
        result = outcome.result
        download = result.recording_download
        return cls(
            success=True,
            message=result.message,
            patient_id=result.patient_id,
            prescription_id=result.prescription_id,
            patient_created=result.patient_created,
            recording_file_name=download.file_name if download else None,
            recording_uploaded=result.recording_uploaded,
        )
