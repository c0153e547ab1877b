"""
Pydantic schemas for patient-related API endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, validator

from ...domain.entities.patient import Patient


class EmergencyContactSchema(BaseModel):
    name: str
    phone: str
    relationship: str


class PersonalInfoSchema(BaseModel):
    """Schema for patient personal info."""

    name: str = Field(..., min_length=1, max_length=120, description="Patient name")
    age: int = Field(..., ge=0, le=150, description="Patient age")
    gender: str = Field(..., description="male, female or other")
    phone: str = Field("", description="Phone number")
    email: Optional[str] = Field(None, description="Email address")
    address: Optional[str] = Field(None, description="Postal address")
    emergency_contact: Optional[EmergencyContactSchema] = None

    @validator("name")
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @validator("gender")
    def validate_gender(cls, v):
        if v.lower() not in ("male", "female", "other"):
            raise ValueError("Gender must be one of: male, female, other")
        return v.lower()


class MedicalInfoSchema(BaseModel):
    blood_group: Optional[str] = None
    allergies: List[str] = Field(default_factory=list)
    chronic_conditions: List[str] = Field(default_factory=list)
    current_medications: List[str] = Field(default_factory=list)


class CreatePatientRequest(BaseModel):
    """Request schema for creating a patient."""

    personal_info: PersonalInfoSchema
    medical_info: Optional[MedicalInfoSchema] = None
    is_active: bool = True


class UpdatePatientRequest(BaseModel):
    """Request schema for a partial patient update; omitted fields are kept."""

    name: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    blood_group: Optional[str] = None
    allergies: Optional[List[str]] = None
    chronic_conditions: Optional[List[str]] = None
    current_medications: Optional[List[str]] = None
    is_active: Optional[bool] = None


class PatientResponse(BaseModel):
    """Response schema for a patient record."""

    patient_id: str = Field(..., description="Patient ID")
    personal_info: PersonalInfoSchema
    medical_info: Optional[MedicalInfoSchema] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, patient: Patient) -> "PatientResponse":
        return cls(**patient.to_record())


class PatientListResponse(BaseModel):
    """Response schema for a page of patients."""

    patients: List[PatientResponse]
    last_patient_id: Optional[str] = Field(None, description="Cursor for the next page")
    has_more: bool
