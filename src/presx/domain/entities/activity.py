"""Recent activity entries rendered on the dashboard feed."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ...core.utils.payload import put_if_present
from ..enums import ActivityType


@dataclass
class RecentActivity:
    """A single append-only activity log entry."""

    type: ActivityType
    patient_id: str
    patient_name: str
    description: str
    prescription_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def patient_added(cls, patient_id: str, patient_name: str, timestamp: datetime) -> "RecentActivity":
        return cls(
            type=ActivityType.PATIENT_ADDED,
            patient_id=patient_id,
            patient_name=patient_name,
            description=f"New patient {patient_name} added",
            timestamp=timestamp,
        )

    @classmethod
    def prescription_created(
        cls,
        patient_id: str,
        patient_name: str,
        prescription_id: str,
        timestamp: datetime,
    ) -> "RecentActivity":
        return cls(
            type=ActivityType.PRESCRIPTION_CREATED,
            patient_id=patient_id,
            patient_name=patient_name,
            prescription_id=prescription_id,
            description=f"Prescription created for {patient_name}",
            timestamp=timestamp,
        )

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "type": self.type.value,
            "patient_id": self.patient_id,
            "patient_name": self.patient_name,
            "timestamp": self.timestamp,
            "description": self.description,
        }
        put_if_present(record, "prescription_id", self.prescription_id)
        return record
