"""
MongoDB Beanie model for the ``patients`` collection.
"""

from datetime import datetime
from typing import List, Optional

from beanie import Document
from pydantic import BaseModel, Field


class EmergencyContactMongo(BaseModel):
    name: str
    phone: str
    relationship: str


class PersonalInfoMongo(BaseModel):
    """Patient identity and contact details (also embedded in prescriptions)."""
    name: str = Field(..., description="Patient name")
    age: int = Field(..., description="Patient age")
    gender: str = Field(..., description="male, female or other")
    phone: str = Field(default="", description="Phone number")
    email: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContactMongo] = None


class MedicalInfoMongo(BaseModel):
    blood_group: Optional[str] = None
    allergies: Optional[List[str]] = None
    chronic_conditions: Optional[List[str]] = None
    current_medications: Optional[List[str]] = None


class PatientMongo(Document):
    """MongoDB model for Patient entity."""

    patient_id: str = Field(..., description="Patient ID")
    personal_info: PersonalInfoMongo
    medical_info: Optional[MedicalInfoMongo] = None
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "patients"
        keep_nulls = False
        indexes = [
            "patient_id",
            "personal_info.name",
            "is_active",
            "updated_at",
        ]
