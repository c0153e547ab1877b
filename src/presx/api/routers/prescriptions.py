"""Prescription-related API endpoints."""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from presx.adapters.pdf.prescription_view import build_prescription_view
from presx.application.dto.prescription_dto import PrescriptionUpdate
from presx.domain.errors import PDFGenerationError, PrescriptionNotFoundError

from ..deps import MessagingServiceDep, PDFRendererDep, PrescriptionServiceDep
from ..errors import http_error, internal_error, validation_error
from ..schemas.common import ErrorResponse
from ..schemas.prescription import (
    PrescriptionResponse,
    SendPrescriptionRequest,
    SendPrescriptionResponse,
    UpdatePrescriptionRequest,
)

router = APIRouter(prefix="/prescriptions", tags=["prescriptions"])
logger = logging.getLogger("presx")

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Prescription not found"}}


@router.get("/recent", response_model=List[PrescriptionResponse], response_model_exclude_none=True)
async def recent_prescriptions(
    prescription_service: PrescriptionServiceDep,
    limit: int = Query(5, ge=1, le=100),
):
    try:
        prescriptions = await prescription_service.get_recent_prescriptions(limit)
    except Exception as e:
        raise internal_error("recent_prescriptions", e)
    return [PrescriptionResponse.from_domain(p) for p in prescriptions]


@router.get("/range", response_model=List[PrescriptionResponse], response_model_exclude_none=True)
async def prescriptions_in_range(
    prescription_service: PrescriptionServiceDep,
    start: datetime = Query(..., description="Inclusive lower bound (UTC)"),
    end: datetime = Query(..., description="Inclusive upper bound (UTC)"),
):
    """Prescriptions created between ``start`` and ``end``, newest first."""
    try:
        prescriptions = await prescription_service.get_prescriptions_by_date_range(start, end)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("prescriptions_in_range", e)
    return [PrescriptionResponse.from_domain(p) for p in prescriptions]


@router.get(
    "/{prescription_id}",
    response_model=PrescriptionResponse,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def get_prescription(prescription_id: str, prescription_service: PrescriptionServiceDep):
    try:
        prescription = await prescription_service.require_prescription(prescription_id)
    except PrescriptionNotFoundError as e:
        raise http_error(status.HTTP_404_NOT_FOUND, e)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("get_prescription", e)
    return PrescriptionResponse.from_domain(prescription)


@router.patch(
    "/{prescription_id}",
    response_model=PrescriptionResponse,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def update_prescription(
    prescription_id: str,
    request: UpdatePrescriptionRequest,
    prescription_service: PrescriptionServiceDep,
):
    try:
        prescription = await prescription_service.update_prescription(
            prescription_id, PrescriptionUpdate(**request.model_dump())
        )
    except PrescriptionNotFoundError as e:
        raise http_error(status.HTTP_404_NOT_FOUND, e)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("update_prescription", e)
    return PrescriptionResponse.from_domain(prescription)


async def _render_pdf(prescription_id: str, prescription_service, renderer) -> bytes:
    prescription = await prescription_service.require_prescription(prescription_id)
    return await renderer.generate(build_prescription_view(prescription))


@router.get(
    "/{prescription_id}/pdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}},
        404: NOT_FOUND[404],
        500: {"model": ErrorResponse, "description": "PDF generation failed"},
    },
)
async def download_prescription_pdf(
    prescription_id: str,
    prescription_service: PrescriptionServiceDep,
    renderer: PDFRendererDep,
):
    """Single-page, image-only PDF of the prescription."""
    try:
        pdf = await _render_pdf(prescription_id, prescription_service, renderer)
    except PrescriptionNotFoundError as e:
        raise http_error(status.HTTP_404_NOT_FOUND, e)
    except PDFGenerationError as e:
        raise http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("download_prescription_pdf", e)

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{renderer.settings.file_name}"'
        },
    )


@router.post(
    "/{prescription_id}/send",
    response_model=SendPrescriptionResponse,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def send_prescription(
    prescription_id: str,
    prescription_service: PrescriptionServiceDep,
    renderer: PDFRendererDep,
    messaging: MessagingServiceDep,
    request: Optional[SendPrescriptionRequest] = None,
):
    """Render the prescription and relay it to the configured Telegram chat."""
    try:
        pdf = await _render_pdf(prescription_id, prescription_service, renderer)
    except PrescriptionNotFoundError as e:
        raise http_error(status.HTTP_404_NOT_FOUND, e)
    except PDFGenerationError as e:
        raise http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    except ValueError as e:
        raise validation_error(e)
    except Exception as e:
        raise internal_error("send_prescription", e)

    caption = request.caption if request else None
    result = await messaging.send_document(
        pdf, caption=caption, file_name=renderer.settings.file_name
    )
    if not result.ok:
        logger.warning(
            "Prescription relay failed",
            extra={"prescription_id": prescription_id, "description": result.description},
        )
    return SendPrescriptionResponse(
        ok=result.ok,
        description=result.description,
        bot_start_link=None if result.ok else messaging.bot_start_link(),
    )
