"""Enumerations shared across the PresX domain."""

from enum import Enum


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class PatientType(str, Enum):
    """Whether a consultation creates a patient or reuses an existing one."""

    NEW = "new"
    EXISTING = "existing"


class ConsultationType(str, Enum):
    IN_PERSON = "in-person"
    TELECONSULTATION = "teleconsultation"
    FOLLOW_UP = "follow-up"


class PrescriptionStatus(str, Enum):
    ACTIVE = "active"
    FULFILLED = "fulfilled"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class TestType(str, Enum):
    __test__ = False  # not a pytest test class

    BLOOD = "blood"
    URINE = "urine"
    IMAGING = "imaging"
    BIOPSY = "biopsy"
    OTHER = "other"


class ActivityType(str, Enum):
    PRESCRIPTION_CREATED = "prescription_created"
    PATIENT_ADDED = "patient_added"
    TEST_UPLOADED = "test_uploaded"


class FormStep(int, Enum):
    """Steps of the consultation intake form, in order."""

    PATIENT_INFO = 0
    VITALS = 1
    SYMPTOMS = 2
    TESTS = 3
    MEDICATION = 4
    ADVICE = 5
    REVIEW = 6

    @property
    def label(self) -> str:
        return _STEP_LABELS[self]

    @property
    def is_first(self) -> bool:
        return self is FormStep.PATIENT_INFO

    @property
    def is_last(self) -> bool:
        return self is FormStep.REVIEW

    def next(self) -> "FormStep":
        """Following step; the last step maps to itself."""
        return self if self.is_last else FormStep(self.value + 1)

    def previous(self) -> "FormStep":
        """Preceding step; the first step maps to itself."""
        return self if self.is_first else FormStep(self.value - 1)


_STEP_LABELS = {
    FormStep.PATIENT_INFO: "Patient Info",
    FormStep.VITALS: "Vitals",
    FormStep.SYMPTOMS: "Symptoms",
    FormStep.TESTS: "Tests",
    FormStep.MEDICATION: "Medication",
    FormStep.ADVICE: "Advice",
    FormStep.REVIEW: "Review",
}
