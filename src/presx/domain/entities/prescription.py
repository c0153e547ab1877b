"""Prescription domain entity and its value parts.

``Prescription.to_record`` defines the persisted shape. Optional sub-objects
(notes, conversation recording, test reports, expiry) are inserted through
``put_if_present`` so an empty source never produces a null or empty key.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...core.utils.payload import put_if_present
from ..enums import ConsultationType, PrescriptionStatus, TestType
from ..value_objects.prescription_id import PrescriptionId
from .patient import PersonalInfo


@dataclass
class ConversationRecording:
    """Reference to a consultation recording stored in object storage."""

    id: str
    audio_url: str
    file_name: str
    duration: int  # seconds
    uploaded_at: datetime
    file_size: int  # bytes
    transcription: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "id": self.id,
            "audio_url": self.audio_url,
            "file_name": self.file_name,
            "duration": self.duration,
            "uploaded_at": self.uploaded_at,
            "file_size": self.file_size,
        }
        put_if_present(record, "transcription", self.transcription)
        return record


@dataclass
class ConsultationInfo:
    consultation_date: datetime
    chief_complaint: str
    diagnosis: str
    consultation_type: ConsultationType = ConsultationType.IN_PERSON
    notes: Optional[str] = None
    conversation_recording: Optional[ConversationRecording] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "consultation_date": self.consultation_date,
            "consultation_type": self.consultation_type.value,
            "chief_complaint": self.chief_complaint,
            "diagnosis": self.diagnosis,
        }
        put_if_present(record, "notes", self.notes)
        if self.conversation_recording is not None:
            record["conversation_recording"] = self.conversation_recording.to_record()
        return record


@dataclass
class Medication:
    name: str
    dosage: str
    frequency: str
    duration: str
    instructions: Optional[str] = None
    quantity: Optional[int] = None
    refills: Optional[int] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "name": self.name,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "duration": self.duration,
        }
        put_if_present(record, "instructions", self.instructions)
        put_if_present(record, "quantity", self.quantity)
        put_if_present(record, "refills", self.refills)
        return record


@dataclass
class DoctorInfo:
    doctor_id: str
    doctor_name: str
    specialization: str
    license_number: str

    def to_record(self) -> Dict[str, Any]:
        return {
            "doctor_id": self.doctor_id,
            "doctor_name": self.doctor_name,
            "specialization": self.specialization,
            "license_number": self.license_number,
        }


@dataclass
class PrescriptionDocument:
    """Metadata of the generated prescription PDF."""

    pdf_url: str
    pdf_file_name: str
    generated_at: datetime
    expires_at: Optional[datetime] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "pdf_url": self.pdf_url,
            "pdf_file_name": self.pdf_file_name,
            "generated_at": self.generated_at,
        }
        put_if_present(record, "expires_at", self.expires_at)
        return record


@dataclass
class TestReport:
    __test__ = False  # not a pytest test class

    id: str
    name: str
    file_url: str
    file_name: str
    uploaded_at: datetime
    test_type: TestType = TestType.OTHER
    report_date: Optional[datetime] = None
    notes: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "file_url": self.file_url,
            "file_name": self.file_name,
            "uploaded_at": self.uploaded_at,
            "test_type": self.test_type.value,
        }
        put_if_present(record, "report_date", self.report_date)
        put_if_present(record, "notes", self.notes)
        return record


@dataclass
class Prescription:
    """Prescription domain entity."""

    prescription_id: PrescriptionId
    patient_id: str  # Reference to patient
    personal_info: PersonalInfo
    consultation_info: ConsultationInfo
    doctor_info: DoctorInfo
    document: PrescriptionDocument
    medications: List[Medication] = field(default_factory=list)
    test_reports: Optional[List[TestReport]] = None
    status: PrescriptionStatus = PrescriptionStatus.ACTIVE
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "prescription_id": self.prescription_id.value,
            "patient_id": self.patient_id,
            "personal_info": self.personal_info.to_record(),
            "consultation_info": self.consultation_info.to_record(),
            "medications": [med.to_record() for med in self.medications],
            "doctor_info": self.doctor_info.to_record(),
            "prescription": self.document.to_record(),
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        put_if_present(
            record,
            "test_reports",
            [report.to_record() for report in self.test_reports or []],
        )
        return record
