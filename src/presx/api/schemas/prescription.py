"""
Pydantic schemas for prescription-related API endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ...domain.entities.prescription import Prescription
from ...domain.enums import PrescriptionStatus
from .patient import PersonalInfoSchema


class ConversationRecordingSchema(BaseModel):
    id: str
    audio_url: str
    file_name: str
    duration: int = Field(..., description="Duration in seconds")
    uploaded_at: datetime
    file_size: int = Field(..., description="Size in bytes")
    transcription: Optional[str] = None


class ConsultationInfoSchema(BaseModel):
    consultation_date: datetime
    consultation_type: str
    chief_complaint: str
    diagnosis: str
    notes: Optional[str] = None
    conversation_recording: Optional[ConversationRecordingSchema] = None


class MedicationSchema(BaseModel):
    name: str
    dosage: str
    frequency: str
    duration: str
    instructions: Optional[str] = None
    quantity: Optional[int] = None
    refills: Optional[int] = None


class DoctorInfoSchema(BaseModel):
    doctor_id: str
    doctor_name: str
    specialization: str
    license_number: str


class PrescriptionDocumentSchema(BaseModel):
    pdf_url: str
    pdf_file_name: str
    generated_at: datetime
    expires_at: Optional[datetime] = None


class TestReportSchema(BaseModel):
    __test__ = False  # not a pytest test class

    id: str
    name: str
    file_url: str
    file_name: str
    uploaded_at: datetime
    test_type: str
    report_date: Optional[datetime] = None
    notes: Optional[str] = None


class PrescriptionResponse(BaseModel):
    """Response schema for a prescription record."""

    prescription_id: str
    patient_id: str
    personal_info: PersonalInfoSchema
    consultation_info: ConsultationInfoSchema
    medications: List[MedicationSchema]
    doctor_info: DoctorInfoSchema
    prescription: PrescriptionDocumentSchema
    test_reports: Optional[List[TestReportSchema]] = None
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, prescription: Prescription) -> "PrescriptionResponse":
        return cls(**prescription.to_record())


class UpdatePrescriptionRequest(BaseModel):
    """Request schema for a partial prescription update."""

    status: Optional[PrescriptionStatus] = None
    pdf_url: Optional[str] = None
    pdf_file_name: Optional[str] = None
    expires_at: Optional[datetime] = None
    notes: Optional[str] = None


class SendPrescriptionRequest(BaseModel):
    caption: Optional[str] = Field(None, description="HTML caption sent with the PDF")


class SendPrescriptionResponse(BaseModel):
    ok: bool
    description: Optional[str] = None
    bot_start_link: Optional[str] = Field(
        None, description="Present when delivery failed"
    )
