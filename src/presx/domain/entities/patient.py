"""Patient domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...core.utils.payload import put_if_present
from ..enums import Gender
from ..errors import PatientValidationError
from ..value_objects.patient_id import PatientId


@dataclass
class EmergencyContact:
    name: str
    phone: str
    relationship: str

    def to_record(self) -> Dict[str, Any]:
        return {"name": self.name, "phone": self.phone, "relationship": self.relationship}


@dataclass
class PersonalInfo:
    """Identity and contact details of a patient."""

    name: str
    age: int
    gender: Gender
    phone: str = ""
    email: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise PatientValidationError("Patient name cannot be empty", ["name"])
        self.name = self.name.strip()
        if self.age < 0 or self.age > 150:
            raise PatientValidationError(f"Invalid patient age: {self.age}", ["age"])
        if not isinstance(self.gender, Gender):
            try:
                self.gender = Gender(str(self.gender).lower())
            except ValueError:
                raise PatientValidationError(
                    f"Invalid gender: {self.gender}", ["gender"]
                )

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "name": self.name,
            "age": self.age,
            "gender": self.gender.value,
            "phone": self.phone or "",
        }
        put_if_present(record, "email", self.email)
        put_if_present(record, "address", self.address)
        if self.emergency_contact is not None:
            record["emergency_contact"] = self.emergency_contact.to_record()
        return record


@dataclass
class MedicalInfo:
    blood_group: Optional[str] = None
    allergies: List[str] = field(default_factory=list)
    chronic_conditions: List[str] = field(default_factory=list)
    current_medications: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.blood_group
            or self.allergies
            or self.chronic_conditions
            or self.current_medications
        )

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {}
        put_if_present(record, "blood_group", self.blood_group)
        put_if_present(record, "allergies", list(self.allergies))
        put_if_present(record, "chronic_conditions", list(self.chronic_conditions))
        put_if_present(record, "current_medications", list(self.current_medications))
        return record


@dataclass
class Patient:
    """Patient domain entity."""

    patient_id: PatientId
    personal_info: PersonalInfo
    medical_info: Optional[MedicalInfo] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def name(self) -> str:
        return self.personal_info.name

    @property
    def medical_history(self) -> str:
        """Chronic conditions joined for display in the intake form."""
        if not self.medical_info:
            return ""
        return ", ".join(self.medical_info.chronic_conditions)

    def deactivate(self) -> None:
        """Soft delete the patient."""
        self.is_active = False
        self.updated_at = datetime.utcnow()

    def update_details(
        self,
        name: Optional[str] = None,
        age: Optional[int] = None,
        gender: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
    ) -> None:
        """Update personal info; values are re-validated as a whole."""
        current = self.personal_info
        self.personal_info = PersonalInfo(
            name=name if name is not None else current.name,
            age=age if age is not None else current.age,
            gender=gender if gender is not None else current.gender,
            phone=phone if phone is not None else current.phone,
            email=email if email is not None else current.email,
            address=address if address is not None else current.address,
            emergency_contact=current.emergency_contact,
        )

    def update_medical_info(
        self,
        blood_group: Optional[str] = None,
        allergies: Optional[List[str]] = None,
        chronic_conditions: Optional[List[str]] = None,
        current_medications: Optional[List[str]] = None,
    ) -> None:
        info = self.medical_info or MedicalInfo()
        if blood_group is not None:
            info.blood_group = blood_group
        if allergies is not None:
            info.allergies = list(allergies)
        if chronic_conditions is not None:
            info.chronic_conditions = list(chronic_conditions)
        if current_medications is not None:
            info.current_medications = list(current_medications)
        self.medical_info = None if info.is_empty() else info

    def to_record(self) -> Dict[str, Any]:
        """Persisted shape; ``medical_info`` is omitted when it holds nothing."""
        record: Dict[str, Any] = {
            "patient_id": self.patient_id.value,
            "personal_info": self.personal_info.to_record(),
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.medical_info is not None and not self.medical_info.is_empty():
            record["medical_info"] = self.medical_info.to_record()
        return record
