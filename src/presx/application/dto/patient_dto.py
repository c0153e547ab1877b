"""Patient DTOs for the data access facade."""

from dataclasses import dataclass, field
from typing import List, Optional

from ...domain.entities.patient import Patient


@dataclass
class PatientPage:
    """One page of active patients."""

    patients: List[Patient] = field(default_factory=list)
    last_patient_id: Optional[str] = None  # cursor for the next page
    has_more: bool = False


@dataclass
class PatientUpdate:
    """Partial patient update; ``None`` leaves a field untouched."""

    name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    blood_group: Optional[str] = None
    allergies: Optional[List[str]] = None
    chronic_conditions: Optional[List[str]] = None
    current_medications: Optional[List[str]] = None
    is_active: Optional[bool] = None
