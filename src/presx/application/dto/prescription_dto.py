"""Prescription DTOs for the data access facade and the submission flow."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ...domain.entities.prescription import Prescription, TestReport
from ...domain.enums import PrescriptionStatus


@dataclass
class PrescriptionUpdate:
    """Partial prescription update; ``None`` leaves a field untouched."""

    status: Optional[PrescriptionStatus] = None
    pdf_url: Optional[str] = None
    pdf_file_name: Optional[str] = None
    expires_at: Optional[datetime] = None
    notes: Optional[str] = None
    test_reports: Optional[List[TestReport]] = None


@dataclass
class RecordingDownload:
    """Captured audio offered to the client as a local download."""

    file_name: str
    data: bytes
    content_type: str
    duration_seconds: int


@dataclass
class SubmissionResult:
    """Outcome of a successful consultation submission."""

    patient_id: str
    prescription: Prescription
    patient_created: bool
    recording_download: Optional[RecordingDownload] = None
    recording_uploaded: bool = False
    message: str = "Prescription created successfully."

    @property
    def prescription_id(self) -> str:
        return self.prescription.prescription_id.value
