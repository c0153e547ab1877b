"""FastAPI dependency providers."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends

from presx.adapters.db.mongo.repositories.dashboard_repository import (
    MongoActivityRepository,
    MongoDashboardStatsRepository,
)
from presx.adapters.db.mongo.repositories.patient_repository import (
    MongoPatientRepository,
)
from presx.adapters.db.mongo.repositories.prescription_repository import (
    MongoPrescriptionRepository,
)
from presx.adapters.external.prediction_service_http import HttpPredictionService
from presx.adapters.external.telegram_messaging_service import (
    TelegramMessagingService,
)
from presx.adapters.pdf.renderer import PDFRenderer
from presx.adapters.storage.azure_blob_service import AzureBlobAudioStorage
from presx.application.intake import IntakeFormController
from presx.application.intake_sessions import IntakeSessionRegistry
from presx.application.ports.repositories.activity_repo import ActivityRepository
from presx.application.ports.repositories.dashboard_stats_repo import (
    DashboardStatsRepository,
)
from presx.application.ports.repositories.patient_repo import PatientRepository
from presx.application.ports.repositories.prescription_repo import (
    PrescriptionRepository,
)
from presx.application.ports.services.audio_storage import AudioStorage
from presx.application.ports.services.messaging_service import MessagingService
from presx.application.ports.services.prediction_service import PredictionService
from presx.application.recording import RecordingCapture
from presx.application.services.dashboard_service import DashboardService
from presx.application.services.patient_service import PatientService
from presx.application.services.prescription_service import PrescriptionService
from presx.application.services.search_service import SearchService
from presx.application.use_cases.submit_prescription import SubmitPrescriptionUseCase
from presx.core.config import Settings, get_settings


@lru_cache()
def get_patient_repository() -> PatientRepository:
    """Get patient repository instance."""
    return MongoPatientRepository()


@lru_cache()
def get_prescription_repository() -> PrescriptionRepository:
    """Get prescription repository instance."""
    return MongoPrescriptionRepository()


@lru_cache()
def get_activity_repository() -> ActivityRepository:
    """Get activity repository instance."""
    return MongoActivityRepository()


@lru_cache()
def get_dashboard_stats_repository() -> DashboardStatsRepository:
    """Get dashboard stats repository instance."""
    return MongoDashboardStatsRepository()


@lru_cache()
def get_prediction_service() -> PredictionService:
    """Get prediction service instance."""
    return HttpPredictionService()


@lru_cache()
def get_messaging_service() -> MessagingService:
    """Get messaging relay instance."""
    return TelegramMessagingService()


@lru_cache()
def get_audio_storage() -> AudioStorage:
    """Get audio storage instance."""
    return AzureBlobAudioStorage()


@lru_cache()
def get_pdf_renderer() -> PDFRenderer:
    """Get PDF renderer instance."""
    return PDFRenderer()


# Dependency annotations for FastAPI
PatientRepositoryDep = Annotated[PatientRepository, Depends(get_patient_repository)]
PrescriptionRepositoryDep = Annotated[
    PrescriptionRepository, Depends(get_prescription_repository)
]
ActivityRepositoryDep = Annotated[ActivityRepository, Depends(get_activity_repository)]
DashboardStatsRepositoryDep = Annotated[
    DashboardStatsRepository, Depends(get_dashboard_stats_repository)
]
MessagingServiceDep = Annotated[MessagingService, Depends(get_messaging_service)]
AudioStorageDep = Annotated[AudioStorage, Depends(get_audio_storage)]
PDFRendererDep = Annotated[PDFRenderer, Depends(get_pdf_renderer)]


def get_patient_service(
    patient_repo: PatientRepositoryDep, activity_repo: ActivityRepositoryDep
) -> PatientService:
    return PatientService(patient_repo, activity_repo)


def get_prescription_service(
    prescription_repo: PrescriptionRepositoryDep,
    patient_repo: PatientRepositoryDep,
    activity_repo: ActivityRepositoryDep,
) -> PrescriptionService:
    return PrescriptionService(prescription_repo, patient_repo, activity_repo)


def get_dashboard_service(
    patient_repo: PatientRepositoryDep,
    prescription_repo: PrescriptionRepositoryDep,
    activity_repo: ActivityRepositoryDep,
    stats_repo: DashboardStatsRepositoryDep,
) -> DashboardService:
    return DashboardService(patient_repo, prescription_repo, activity_repo, stats_repo)


def get_search_service(patient_repo: PatientRepositoryDep) -> SearchService:
    return SearchService(patient_repo)


def build_intake_registry(
    patient_repo: PatientRepository,
    prescription_repo: PrescriptionRepository,
    activity_repo: ActivityRepository,
    prediction_service: PredictionService,
    audio_storage: Optional[AudioStorage] = None,
    settings: Optional[Settings] = None,
) -> IntakeSessionRegistry:
    """Registry whose controllers share one set of repositories and services."""
    settings = settings or get_settings()

    def _controller() -> IntakeFormController:
        use_case = SubmitPrescriptionUseCase(
            patient_service=PatientService(patient_repo, activity_repo),
            prescription_service=PrescriptionService(
                prescription_repo, patient_repo, activity_repo
            ),
            doctor=settings.doctor,
            recording=settings.recording,
            audio_storage=audio_storage,
        )
        return IntakeFormController(
            use_case,
            prediction_service,
            recorder=RecordingCapture(
                content_type=settings.recording.content_type,
                tick_seconds=settings.recording.tick_seconds,
            ),
        )

    return IntakeSessionRegistry(
        _controller, idle_seconds=settings.intake.session_idle_seconds
    )


@lru_cache()
def get_intake_registry() -> IntakeSessionRegistry:
    """Process-wide registry of open consultations."""
    return build_intake_registry(
        get_patient_repository(),
        get_prescription_repository(),
        get_activity_repository(),
        get_prediction_service(),
        get_audio_storage(),
    )


PatientServiceDep = Annotated[PatientService, Depends(get_patient_service)]
PrescriptionServiceDep = Annotated[PrescriptionService, Depends(get_prescription_service)]
DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]
IntakeRegistryDep = Annotated[IntakeSessionRegistry, Depends(get_intake_registry)]
