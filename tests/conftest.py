"""Shared fixtures: in-memory repositories and fake external services."""

from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

import pytest

from presx.application.ports.repositories.activity_repo import ActivityRepository
from presx.application.ports.repositories.dashboard_stats_repo import (
    DashboardStatsRepository,
)
from presx.application.ports.repositories.patient_repo import PatientRepository
from presx.application.ports.repositories.prescription_repo import (
    PrescriptionRepository,
)
from presx.application.ports.services.audio_storage import AudioStorage, StoredRecording
from presx.application.ports.services.messaging_service import (
    MessagingService,
    RelayResponse,
)
from presx.application.ports.services.prediction_service import PredictionService
from presx.application.services.dashboard_service import DashboardService
from presx.application.services.patient_service import PatientService
from presx.application.services.prescription_service import PrescriptionService
from presx.application.use_cases.submit_prescription import SubmitPrescriptionUseCase
from presx.core.config import DoctorSettings, RecordingSettings
from presx.domain.entities.activity import RecentActivity
from presx.domain.entities.dashboard import DailyStatsSnapshot
from presx.domain.entities.patient import Patient, PersonalInfo
from presx.domain.entities.prediction import DiseasePrediction, PredictionResult
from presx.domain.entities.prescription import (
    ConsultationInfo,
    DoctorInfo,
    Medication,
    Prescription,
    PrescriptionDocument,
)
from presx.domain.entities.recording import AudioBlob
from presx.domain.value_objects.patient_id import PatientId
from presx.domain.value_objects.prescription_id import PrescriptionId


class InMemoryPatientRepository(PatientRepository):
    def __init__(self):
        self.items: Dict[str, Patient] = {}
        self.writes = 0

    async def create(self, patient: Patient) -> Patient:
        self.writes += 1
        self.items[patient.patient_id.value] = patient
        return patient

    async def update(self, patient: Patient) -> Patient:
        self.writes += 1
        self.items[patient.patient_id.value] = patient
        return patient

    async def find_by_id(self, patient_id: PatientId) -> Optional[Patient]:
        return self.items.get(patient_id.value)

    async def list_active(
        self, after: Optional[PatientId] = None, limit: int = 20
    ) -> Tuple[List[Patient], bool]:
        ordered = sorted(
            (p for p in self.items.values() if p.is_active),
            key=lambda p: (p.updated_at, p.patient_id.value),
            reverse=True,
        )
        if after is not None:
            ids = [p.patient_id.value for p in ordered]
            if after.value in ids:
                ordered = ordered[ids.index(after.value) + 1:]
        return ordered[:limit], len(ordered) > limit

    async def list_active_by_name(self) -> List[Patient]:
        return sorted(
            (p for p in self.items.values() if p.is_active),
            key=lambda p: p.personal_info.name,
        )

    async def count_active(self) -> int:
        return sum(1 for p in self.items.values() if p.is_active)


class InMemoryPrescriptionRepository(PrescriptionRepository):
    def __init__(self):
        self.items: Dict[str, Prescription] = {}
        self.writes = 0

    async def create(self, prescription: Prescription) -> Prescription:
        self.writes += 1
        self.items[prescription.prescription_id.value] = prescription
        return prescription

    async def update(self, prescription: Prescription) -> Prescription:
        self.writes += 1
        self.items[prescription.prescription_id.value] = prescription
        return prescription

    async def find_by_id(self, prescription_id: PrescriptionId) -> Optional[Prescription]:
        return self.items.get(prescription_id.value)

    def _newest_first(self, items) -> List[Prescription]:
        return sorted(items, key=lambda p: p.created_at, reverse=True)

    async def find_by_patient(self, patient_id: str) -> List[Prescription]:
        return self._newest_first(
            p for p in self.items.values() if p.patient_id == patient_id
        )

    async def find_recent(self, limit: int = 5) -> List[Prescription]:
        return self._newest_first(self.items.values())[:limit]

    def _between(self, start, end) -> List[Prescription]:
        return [
            p
            for p in self.items.values()
            if (start is None or p.created_at >= start)
            and (end is None or p.created_at < end)
        ]

    async def find_created_between(
        self, start: datetime, end: Optional[datetime] = None
    ) -> List[Prescription]:
        return self._newest_first(self._between(start, end))

    async def count_created_between(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> int:
        return len(self._between(start, end))

    async def distinct_patient_ids_since(self, since: datetime) -> Set[str]:
        return {p.patient_id for p in self._between(since, None)}


class InMemoryActivityRepository(ActivityRepository):
    def __init__(self):
        self.items: List[RecentActivity] = []

    async def append(self, activity: RecentActivity) -> RecentActivity:
        self.items.append(activity)
        return activity

    async def find_recent(self, limit: int = 10) -> List[RecentActivity]:
        return sorted(self.items, key=lambda a: a.timestamp, reverse=True)[:limit]


class InMemoryDashboardStatsRepository(DashboardStatsRepository):
    def __init__(self):
        self.items: Dict[str, DailyStatsSnapshot] = {}

    async def upsert(self, snapshot: DailyStatsSnapshot) -> DailyStatsSnapshot:
        self.items[snapshot.stats_id] = snapshot
        return snapshot

    async def find_by_id(self, stats_id: str) -> Optional[DailyStatsSnapshot]:
        return self.items.get(stats_id)


class FakePredictionService(PredictionService):
    def __init__(self, result: Optional[PredictionResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[str] = []

    async def predict(self, symptoms: str) -> PredictionResult:
        self.calls.append(symptoms)
        if self.error is not None:
            raise self.error
        return self.result


class FakeAudioStorage(AudioStorage):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.recordings: Dict[str, AudioBlob] = {}
        self.uploads: Dict[str, bytes] = {}

    async def upload_recording(self, blob: AudioBlob, file_name: str) -> StoredRecording:
        if self.fail:
            raise RuntimeError("storage offline")
        self.recordings[file_name] = blob
        return StoredRecording(
            audio_url=f"https://blob.test/voice/{file_name}",
            file_name=file_name,
            file_size=blob.size,
        )

    async def delete_recording(self, file_name: str) -> None:
        self.recordings.pop(file_name, None)

    async def get_signed_url(self, file_name: str, expires_in: int = 3600) -> str:
        return f"https://blob.test/voice/{file_name}?sig=x"

    async def store_upload(self, data: bytes, original_name: str, content_type: str) -> str:
        if self.fail:
            raise RuntimeError("storage offline")
        path = f"audio/1700000000000-{original_name}"
        self.uploads[path] = data
        return path


class FakeMessagingService(MessagingService):
    def __init__(self, response: Optional[RelayResponse] = None):
        self.response = response or RelayResponse(ok=True, result={"message_id": 1})
        self.sent: List[Tuple[bytes, Optional[str], str]] = []

    async def send_document(
        self, pdf: bytes, caption: Optional[str] = None, file_name: str = "prescription.pdf"
    ) -> RelayResponse:
        self.sent.append((pdf, caption, file_name))
        return self.response

    def bot_start_link(self) -> str:
        return "https://t.me/test_bot?start=prescription"


def make_prediction(disease: str = "Common Cold", confidence: float = 0.8734) -> PredictionResult:
    return PredictionResult(
        primary=DiseasePrediction(disease=disease, confidence=confidence),
        alternatives=[DiseasePrediction(disease="Influenza", confidence=0.1)],
        symptoms_reported=["fever", "cough"],
        graph_image="aGVsbG8=",
        symptoms_chart="d29ybGQ=",
    )


def make_patient(
    name: str = "Jane Doe",
    age: int = 34,
    gender: str = "female",
    updated_at: Optional[datetime] = None,
    is_active: bool = True,
) -> Patient:
    stamp = updated_at or datetime.utcnow()
    return Patient(
        patient_id=PatientId.generate(),
        personal_info=PersonalInfo(name=name, age=age, gender=gender, phone="555-0100"),
        is_active=is_active,
        created_at=stamp,
        updated_at=stamp,
    )


def make_prescription(
    patient: Patient, created_at: Optional[datetime] = None
) -> Prescription:
    stamp = created_at or datetime.utcnow()
    return Prescription(
        prescription_id=PrescriptionId.generate(),
        patient_id=patient.patient_id.value,
        personal_info=patient.personal_info,
        consultation_info=ConsultationInfo(
            consultation_date=stamp,
            chief_complaint="fever",
            diagnosis="fever",
        ),
        doctor_info=DoctorInfo(
            doctor_id="default-doctor",
            doctor_name="Dr. John Smith",
            specialization="General Medicine",
            license_number="MED12345",
        ),
        document=PrescriptionDocument(
            pdf_url="", pdf_file_name="prescription_1.pdf", generated_at=stamp
        ),
        medications=[
            Medication(name="Paracetamol", dosage="500mg", frequency="after food", duration="5 days")
        ],
        created_at=stamp,
        updated_at=stamp,
    )


@pytest.fixture
def patient_repo():
    return InMemoryPatientRepository()


@pytest.fixture
def prescription_repo():
    return InMemoryPrescriptionRepository()


@pytest.fixture
def activity_repo():
    return InMemoryActivityRepository()


@pytest.fixture
def stats_repo():
    return InMemoryDashboardStatsRepository()


@pytest.fixture
def prediction_service():
    return FakePredictionService(result=make_prediction())


@pytest.fixture
def audio_storage():
    return FakeAudioStorage()


@pytest.fixture
def messaging_service():
    return FakeMessagingService()


@pytest.fixture
def patient_service(patient_repo, activity_repo):
    return PatientService(patient_repo, activity_repo)


@pytest.fixture
def prescription_service(prescription_repo, patient_repo, activity_repo):
    return PrescriptionService(prescription_repo, patient_repo, activity_repo)


@pytest.fixture
def dashboard_service(patient_repo, prescription_repo, activity_repo, stats_repo):
    return DashboardService(patient_repo, prescription_repo, activity_repo, stats_repo)


@pytest.fixture
def doctor_settings():
    return DoctorSettings()


def build_use_case(
    patient_service,
    prescription_service,
    audio_storage=None,
    upload_enabled: bool = False,
) -> SubmitPrescriptionUseCase:
    return SubmitPrescriptionUseCase(
        patient_service=patient_service,
        prescription_service=prescription_service,
        doctor=DoctorSettings(),
        recording=RecordingSettings(upload_enabled=upload_enabled),
        audio_storage=audio_storage,
    )


@pytest.fixture
def submit_use_case(patient_service, prescription_service, audio_storage):
    return build_use_case(patient_service, prescription_service, audio_storage)

