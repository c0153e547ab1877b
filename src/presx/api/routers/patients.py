"""Patient-related API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from presx.application.dto.patient_dto import PatientUpdate
from presx.domain.entities.patient import (
    EmergencyContact,
    MedicalInfo,
    PersonalInfo,
)
from presx.domain.errors import PatientNotFoundError, PatientValidationError

from ..deps import PatientServiceDep, PrescriptionServiceDep, SearchServiceDep
from ..errors import http_error, internal_error, validation_error
from ..schemas.common import ErrorResponse
from ..schemas.patient import (
    CreatePatientRequest,
    PatientListResponse,
    PatientResponse,
    UpdatePatientRequest,
)
from ..schemas.prescription import PrescriptionResponse

router = APIRouter(prefix="/patients", tags=["patients"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Patient not found"}}


@router.post(
    "/",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)
async def create_patient(request: CreatePatientRequest, patient_service: PatientServiceDep):
    """Create a patient and record a ``patient_added`` activity."""
    try:
        info = request.personal_info
        contact = None
        if info.emergency_contact:
            contact = EmergencyContact(**info.emergency_contact.model_dump())
        medical_info = None
        if request.medical_info:
            medical_info = MedicalInfo(**request.medical_info.model_dump())

        patient = await patient_service.create_patient(
            PersonalInfo(
                name=info.name,
                age=info.age,
                gender=info.gender,
                phone=info.phone,
                email=info.email,
                address=info.address,
                emergency_contact=contact,
            ),
            medical_info=medical_info,
            is_active=request.is_active,
        )
        return PatientResponse.from_domain(patient)
    except PatientValidationError as e:
        raise http_error(status.HTTP_400_BAD_REQUEST, e)
    except Exception as e:
        raise internal_error("create_patient", e)


@router.get("/", response_model=PatientListResponse, response_model_exclude_none=True)
async def list_patients(
    patient_service: PatientServiceDep,
    after: Optional[str] = Query(None, description="Last patient ID of the previous page"),
    page_size: int = Query(20, ge=1, le=100),
):
    """Active patients, most recently updated first."""
    try:
        page = await patient_service.get_all_patients(after=after, page_size=page_size)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("list_patients", e)

    return PatientListResponse(
        patients=[PatientResponse.from_domain(p) for p in page.patients],
        last_patient_id=page.last_patient_id,
        has_more=page.has_more,
    )


@router.get("/search", response_model=List[PatientResponse], response_model_exclude_none=True)
async def search_patients(
    search_service: SearchServiceDep,
    q: str = Query(..., min_length=1, description="Part of the patient name"),
):
    try:
        patients = await search_service.search_patients_by_name(q)
    except Exception as e:
        raise internal_error("search_patients", e)
    return [PatientResponse.from_domain(p) for p in patients]


@router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def get_patient(patient_id: str, patient_service: PatientServiceDep):
    try:
        patient = await patient_service.require_patient(patient_id)
    except PatientNotFoundError as e:
        raise http_error(status.HTTP_404_NOT_FOUND, e)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("get_patient", e)
    return PatientResponse.from_domain(patient)


@router.patch(
    "/{patient_id}",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def update_patient(
    patient_id: str, request: UpdatePatientRequest, patient_service: PatientServiceDep
):
    """Partial update; ``updated_at`` is refreshed and ``created_at`` kept."""
    try:
        patient = await patient_service.update_patient(
            patient_id, PatientUpdate(**request.model_dump())
        )
    except PatientNotFoundError as e:
        raise http_error(status.HTTP_404_NOT_FOUND, e)
    except PatientValidationError as e:
        raise http_error(status.HTTP_400_BAD_REQUEST, e)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("update_patient", e)
    return PatientResponse.from_domain(patient)


@router.delete(
    "/{patient_id}",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def deactivate_patient(patient_id: str, patient_service: PatientServiceDep):
    """Soft delete: the patient is marked inactive and kept."""
    try:
        patient = await patient_service.deactivate_patient(patient_id)
    except PatientNotFoundError as e:
        raise http_error(status.HTTP_404_NOT_FOUND, e)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("deactivate_patient", e)
    return PatientResponse.from_domain(patient)


@router.get(
    "/{patient_id}/prescriptions",
    response_model=List[PrescriptionResponse],
    response_model_exclude_none=True,
)
async def list_patient_prescriptions(
    patient_id: str, prescription_service: PrescriptionServiceDep
):
    """Prescriptions of one patient, newest first."""
    try:
        prescriptions = await prescription_service.get_prescriptions_by_patient(patient_id)
    except Exception as e:
        raise internal_error("list_patient_prescriptions", e)
    return [PrescriptionResponse.from_domain(p) for p in prescriptions]
