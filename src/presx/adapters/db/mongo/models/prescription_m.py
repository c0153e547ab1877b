"""
MongoDB Beanie model for the ``prescriptions`` collection.

Optional sub-documents are absent from stored documents rather than null;
``keep_nulls = False`` keeps Beanie from writing ``None`` values.
"""

from datetime import datetime
from typing import List, Optional

from beanie import Document
from pydantic import BaseModel, Field

from .patient_m import PersonalInfoMongo


class ConversationRecordingMongo(BaseModel):
    id: str
    audio_url: str
    file_name: str
    duration: int = Field(..., description="Duration in seconds")
    uploaded_at: datetime
    file_size: int = Field(..., description="Size in bytes")
    transcription: Optional[str] = None


class ConsultationInfoMongo(BaseModel):
    consultation_date: datetime
    consultation_type: str = Field(default="in-person")
    chief_complaint: str
    diagnosis: str
    notes: Optional[str] = None
    conversation_recording: Optional[ConversationRecordingMongo] = None


class MedicationMongo(BaseModel):
    name: str
    dosage: str
    frequency: str
    duration: str
    instructions: Optional[str] = None
    quantity: Optional[int] = None
    refills: Optional[int] = None


class DoctorInfoMongo(BaseModel):
    doctor_id: str
    doctor_name: str
    specialization: str
    license_number: str


class PrescriptionDocumentMongo(BaseModel):
    pdf_url: str = Field(default="")
    pdf_file_name: str
    generated_at: datetime
    expires_at: Optional[datetime] = None


class TestReportMongo(BaseModel):
    __test__ = False  # not a pytest test class

    id: str
    name: str
    file_url: str = Field(default="")
    file_name: str
    uploaded_at: datetime
    report_date: Optional[datetime] = None
    test_type: str = Field(default="other")
    notes: Optional[str] = None


class PrescriptionMongo(Document):
    """MongoDB model for Prescription entity."""

    prescription_id: str = Field(..., description="Prescription ID")
    patient_id: str = Field(..., description="Patient ID reference")
    personal_info: PersonalInfoMongo
    consultation_info: ConsultationInfoMongo
    medications: List[MedicationMongo] = Field(default_factory=list)
    doctor_info: DoctorInfoMongo
    prescription: PrescriptionDocumentMongo
    test_reports: Optional[List[TestReportMongo]] = None
    status: str = Field(default="active")  # active, fulfilled, expired, cancelled
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "prescriptions"
        keep_nulls = False
        indexes = [
            "prescription_id",
            "patient_id",
            "created_at",
        ]
