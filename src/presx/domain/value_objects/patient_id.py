"""
Patient ID value object for type-safe patient identification.

Uses UUID4 strings so identifiers are stable and independent of the database.
"""

import uuid
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PatientId:
    """Immutable patient identifier value object."""

    value: str

    def __post_init__(self) -> None:
        """Validate patient ID format."""
        if not self.value:
            raise ValueError("Patient ID cannot be empty")

        if not isinstance(self.value, str):
            raise ValueError("Patient ID must be a string")

        try:
            uuid.UUID(self.value)
        except ValueError:
            raise ValueError("Patient ID must be a valid UUID")

    def __str__(self) -> str:
        return self.value

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, PatientId):
            return False
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def generate(cls) -> "PatientId":
        """Generate a new patient ID using UUID4."""
        return cls(str(uuid.uuid4()))

    @classmethod
    def from_string(cls, value: str) -> "PatientId":
        """Create from string value."""
        return cls(value)
