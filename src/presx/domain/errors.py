"""
Domain errors for PresX.

Every error carries a human-readable message, a stable error code and a
details mapping that the API layer passes straight through to clients.
"""

from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base class for all domain errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class PatientValidationError(DomainError):
    """Raised when required patient information is missing or malformed."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(
            message,
            error_code="PATIENT_VALIDATION_ERROR",
            details={"missing_fields": missing_fields or []},
        )
        self.missing_fields = missing_fields or []


class PatientNotFoundError(DomainError):
    """Raised when a patient cannot be found."""

    def __init__(self, patient_id: str):
        super().__init__(
            f"Patient not found: {patient_id}",
            error_code="PATIENT_NOT_FOUND",
            details={"patient_id": patient_id},
        )


class PrescriptionNotFoundError(DomainError):
    """Raised when a prescription cannot be found."""

    def __init__(self, prescription_id: str):
        super().__init__(
            f"Prescription not found: {prescription_id}",
            error_code="PRESCRIPTION_NOT_FOUND",
            details={"prescription_id": prescription_id},
        )


class FormFieldError(DomainError):
    """Raised when a write targets a field the intake form does not have."""

    def __init__(self, field: str, group: Optional[str] = None):
        target = f"{group}.{field}" if group else field
        super().__init__(
            f"Unknown intake form field: {target}",
            error_code="UNKNOWN_FORM_FIELD",
            details={"field": field, "group": group},
        )


class FormLockedError(DomainError):
    """Raised when an intake form is modified after a successful submission."""

    def __init__(self) -> None:
        super().__init__(
            "This consultation has already been submitted",
            error_code="FORM_LOCKED",
        )


class MicrophoneAccessError(DomainError):
    """Raised when microphone access is denied or unavailable."""

    USER_MESSAGE = "Unable to access microphone. Please check permissions."

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            self.USER_MESSAGE,
            error_code="MICROPHONE_ACCESS_DENIED",
            details={"reason": reason} if reason else {},
        )


class RecordingInProgressError(DomainError):
    """Raised when a second recording is started while one is active."""

    def __init__(self) -> None:
        super().__init__(
            "A recording is already in progress",
            error_code="RECORDING_IN_PROGRESS",
        )


class RecordingNotAvailableError(DomainError):
    """Raised when a recording is requested but none has been captured."""

    def __init__(self) -> None:
        super().__init__(
            "No recording has been captured for this consultation",
            error_code="RECORDING_NOT_AVAILABLE",
        )


class StorageError(DomainError):
    """Raised when the object store rejects an operation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="STORAGE_ERROR", details=details)


class PDFGenerationError(DomainError):
    """Raised when a document view cannot be rendered to PDF."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            "Failed to generate PDF",
            error_code="PDF_GENERATION_FAILED",
            details={"reason": reason} if reason else {},
        )


class SessionNotFoundError(DomainError):
    """Raised when an intake session id is unknown or already closed."""

    def __init__(self, session_id: str):
        super().__init__(
            f"Consultation session not found: {session_id}",
            error_code="SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )
