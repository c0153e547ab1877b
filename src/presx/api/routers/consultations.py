"""Consultation intake endpoints.

Each consultation is an intake session held in the registry; every endpoint
acts on the session's form controller.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request, Response, status

from presx.adapters.audio.push_audio_source import PushAudioSource
from presx.domain.entities.intake_form import MedicationEntry
from presx.domain.errors import (
    DomainError,
    FormLockedError,
    MicrophoneAccessError,
    PatientNotFoundError,
    RecordingInProgressError,
    RecordingNotAvailableError,
    SessionNotFoundError,
)

from ..deps import IntakeRegistryDep, PatientServiceDep
from ..errors import http_error, internal_error, validation_error
from ..schemas.common import ErrorResponse
from ..schemas.consultation import (
    ChunkResponse,
    ConsultationStateResponse,
    MedicationEntrySchema,
    MedicationFieldUpdate,
    SelectPatientRequest,
    StartRecordingRequest,
    StartRecordingResponse,
    StopRecordingResponse,
    SubmitResponse,
    TestRequest,
    UpdateFieldsRequest,
)

router = APIRouter(prefix="/consultations", tags=["consultations"])
logger = logging.getLogger("presx")

_ERROR_STATUS = (
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (PatientNotFoundError, status.HTTP_404_NOT_FOUND),
    (RecordingNotAvailableError, status.HTTP_404_NOT_FOUND),
    (FormLockedError, status.HTTP_409_CONFLICT),
    (RecordingInProgressError, status.HTTP_409_CONFLICT),
)

COMMON_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Unknown form field"},
    404: {"model": ErrorResponse, "description": "Session not found"},
    409: {"model": ErrorResponse, "description": "Consultation already submitted"},
}


def _domain_error(e: DomainError):
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(e, error_type):
            return http_error(status_code, e)
    return http_error(status.HTTP_400_BAD_REQUEST, e)


def _state(registry, session_id: str) -> ConsultationStateResponse:
    return ConsultationStateResponse.from_controller(registry.get(session_id).controller)


@router.post("/", response_model=ConsultationStateResponse, status_code=status.HTTP_201_CREATED)
async def open_consultation(registry: IntakeRegistryDep):
    """Open a new intake session at the patient info step."""
    session = await registry.create()
    return ConsultationStateResponse.from_controller(session.controller)


@router.get(
    "/{session_id}", response_model=ConsultationStateResponse, responses=COMMON_RESPONSES
)
async def get_consultation(session_id: str, registry: IntakeRegistryDep):
    try:
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.delete(
    "/{session_id}", status_code=status.HTTP_204_NO_CONTENT, responses=COMMON_RESPONSES
)
async def close_consultation(session_id: str, registry: IntakeRegistryDep):
    """Discard the session; an active recording is force-stopped."""
    try:
        await registry.close(session_id)
    except DomainError as e:
        raise _domain_error(e)
    except Exception as e:
        raise internal_error("close_consultation", e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{session_id}/fields",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def update_fields(session_id: str, request: UpdateFieldsRequest, registry: IntakeRegistryDep):
    """Keyed writes; grouped writes merge into ``patient_info`` or ``vitals``."""
    try:
        controller = registry.get(session_id).controller
        for update in request.updates:
            controller.update_field(update.field, update.value, group=update.group)
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.post(
    "/{session_id}/medications",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def add_medication(
    session_id: str,
    registry: IntakeRegistryDep,
    request: Optional[MedicationEntrySchema] = None,
):
    try:
        entry = MedicationEntry(**request.model_dump()) if request else None
        registry.get(session_id).controller.add_medication(entry)
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.patch(
    "/{session_id}/medications/{index}",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def update_medication(
    session_id: str, index: int, request: MedicationFieldUpdate, registry: IntakeRegistryDep
):
    try:
        registry.get(session_id).controller.update_medication(index, request.field, request.value)
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.delete(
    "/{session_id}/medications/{index}",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def remove_medication(session_id: str, index: int, registry: IntakeRegistryDep):
    try:
        registry.get(session_id).controller.remove_medication(index)
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.post(
    "/{session_id}/tests",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def add_test(session_id: str, request: TestRequest, registry: IntakeRegistryDep):
    """Add a requested test; a test already on the list is not added again."""
    try:
        registry.get(session_id).controller.add_test(request.name)
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.patch(
    "/{session_id}/tests/{index}",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def update_test(
    session_id: str, index: int, request: TestRequest, registry: IntakeRegistryDep
):
    try:
        registry.get(session_id).controller.update_test(index, request.name)
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.delete(
    "/{session_id}/tests/{index}",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def remove_test(session_id: str, index: int, registry: IntakeRegistryDep):
    try:
        registry.get(session_id).controller.remove_test(index)
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.post(
    "/{session_id}/select-patient",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def select_patient(
    session_id: str,
    request: SelectPatientRequest,
    registry: IntakeRegistryDep,
    patient_service: PatientServiceDep,
):
    """Switch the form to an existing patient and copy their details in."""
    try:
        controller = registry.get(session_id).controller
        patient = await patient_service.require_patient(request.patient_id)
        controller.select_patient(patient)
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("select_patient", e)


@router.post(
    "/{session_id}/advance",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def advance(session_id: str, registry: IntakeRegistryDep):
    """Next step; leaving the symptoms step requests a disease prediction."""
    try:
        await registry.get(session_id).controller.advance()
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.post(
    "/{session_id}/retreat",
    response_model=ConsultationStateResponse,
    responses=COMMON_RESPONSES,
)
async def retreat(session_id: str, registry: IntakeRegistryDep):
    try:
        registry.get(session_id).controller.retreat()
        return _state(registry, session_id)
    except DomainError as e:
        raise _domain_error(e)


@router.post(
    "/{session_id}/recording/start",
    response_model=StartRecordingResponse,
    response_model_exclude_none=True,
    responses=COMMON_RESPONSES,
)
async def start_recording(
    session_id: str,
    registry: IntakeRegistryDep,
    request: Optional[StartRecordingRequest] = None,
):
    """Begin capture; chunks are then posted to ``/recording/chunks``."""
    request = request or StartRecordingRequest()
    try:
        session = registry.get(session_id)
        source = PushAudioSource(granted=request.microphone_granted, reason=request.reason)
        await session.controller.start_recording(source)
        session.audio_source = source
    except MicrophoneAccessError as e:
        return StartRecordingResponse(started=False, message=e.message)
    except DomainError as e:
        raise _domain_error(e)
    except Exception as e:
        raise internal_error("start_recording", e)
    return StartRecordingResponse(started=True)


@router.post(
    "/{session_id}/recording/chunks",
    response_model=ChunkResponse,
    responses=COMMON_RESPONSES,
)
async def push_recording_chunk(session_id: str, http_request: Request, registry: IntakeRegistryDep):
    """Append one encoded audio chunk (raw request body) to the active recording."""
    try:
        session = registry.get(session_id)
    except DomainError as e:
        raise _domain_error(e)

    data = await http_request.body()
    recorder = session.controller.recorder
    accepted = False
    chunks = len(recorder.session.chunks)
    if isinstance(session.audio_source, PushAudioSource):
        if recorder.is_recording:
            accepted = session.audio_source.push(data)
            chunks = session.audio_source.chunk_count
    return ChunkResponse(accepted=accepted, chunks=chunks)


@router.post(
    "/{session_id}/recording/stop",
    response_model=StopRecordingResponse,
    responses=COMMON_RESPONSES,
)
async def stop_recording(session_id: str, registry: IntakeRegistryDep):
    """Finalize the recording; stopping when nothing is recording changes nothing."""
    try:
        session = registry.get(session_id)
        await session.controller.stop_recording()
    except DomainError as e:
        raise _domain_error(e)
    except Exception as e:
        raise internal_error("stop_recording", e)

    recorder = session.controller.recorder
    audio = recorder.audio
    return StopRecordingResponse(
        has_recording=recorder.has_recording,
        chunks=audio.chunk_count if audio else 0,
        size=audio.size if audio else 0,
        duration_seconds=recorder.elapsed_seconds,
    )


@router.get(
    "/{session_id}/recording",
    response_class=Response,
    responses={200: {"content": {"audio/webm": {}}}, **COMMON_RESPONSES},
)
async def download_recording(session_id: str, registry: IntakeRegistryDep):
    """The captured audio as a file download."""
    try:
        controller = registry.get(session_id).controller
        download = controller.result.recording_download if controller.result else None
        if download is not None:
            file_name, data, content_type = download.file_name, download.data, download.content_type
        else:
            audio = controller.recorder.audio
            if audio is None or audio.chunk_count == 0:
                raise RecordingNotAvailableError()
            file_name = f"consultation_{session_id}.webm"
            data, content_type = audio.data, audio.content_type
    except DomainError as e:
        raise _domain_error(e)

    return Response(
        content=data,
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.post("/{session_id}/submit", response_model=SubmitResponse, responses=COMMON_RESPONSES)
async def submit_consultation(session_id: str, registry: IntakeRegistryDep):
    """
    Submit the consultation.

    Validation and backend failures come back as ``success: false`` with a
    user-facing ``error``; a submitted consultation cannot be submitted again.
    """
    try:
        outcome = await registry.get(session_id).controller.submit()
    except DomainError as e:
        raise _domain_error(e)
    except Exception as e:
        raise internal_error("submit_consultation", e)

    if not outcome.succeeded:
        logger.info(f"Consultation {session_id} not submitted: {outcome.error}")
    return SubmitResponse.from_outcome(outcome)
