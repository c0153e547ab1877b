"""Consultation intake form state.

The form is a strictly linear sequence of ``FormStep`` values. Field groups
(``patient_info``, ``vitals``) merge keyed writes instead of being replaced.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional

from ..enums import FormStep, PatientType
from ..errors import FormFieldError


@dataclass
class PatientFields:
    name: str = ""
    age: str = ""
    gender: str = ""
    medical_history: str = ""
    phone: str = ""


@dataclass
class Vitals:
    bp: str = ""
    spo2: str = ""
    weight: str = ""


@dataclass
class MedicationEntry:
    name: str = ""
    dosage: str = ""
    duration: str = ""
    instructions: str = ""


_GROUPS = ("patient_info", "vitals")
_SCALARS = ("patient_type", "symptoms", "advice")


def _field_names(obj: Any) -> List[str]:
    return [f.name for f in fields(obj)]


@dataclass
class FormState:
    """All values captured by the intake form for one consultation."""

    step: FormStep = FormStep.PATIENT_INFO
    patient_type: str = ""
    patient_info: PatientFields = field(default_factory=PatientFields)
    vitals: Vitals = field(default_factory=Vitals)
    symptoms: str = ""
    tests: List[str] = field(default_factory=list)
    medications: List[MedicationEntry] = field(default_factory=list)
    advice: str = ""
    selected_patient_id: Optional[str] = None

    @property
    def patient_kind(self) -> Optional[PatientType]:
        try:
            return PatientType(self.patient_type)
        except ValueError:
            return None

    def set_value(self, name: str, value: Any, group: Optional[str] = None) -> None:
        """Keyed write; a grouped write merges into the existing group."""
        if group is not None:
            if group not in _GROUPS:
                raise FormFieldError(name, group)
            target = getattr(self, group)
            if name not in _field_names(target):
                raise FormFieldError(name, group)
            setattr(target, name, "" if value is None else str(value))
            return

        if name not in _SCALARS:
            raise FormFieldError(name)
        setattr(self, name, "" if value is None else str(value))

    def merge_group(self, group: str, values: Dict[str, Any]) -> None:
        for name, value in values.items():
            self.set_value(name, value, group=group)

    def symptom_terms(self) -> str:
        """Comma-separated symptoms, trimmed with empty terms dropped."""
        terms = [term.strip() for term in self.symptoms.split(",")]
        return ", ".join(term for term in terms if term)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["step"] = self.step.value
        data["step_label"] = self.step.label
        return data
