"""File upload endpoints."""

import logging

from fastapi import APIRouter, File, UploadFile, status
from fastapi.responses import JSONResponse

from ..deps import AudioStorageDep
from ..schemas.upload import UploadResponse

router = APIRouter(prefix="/uploads", tags=["uploads"])
logger = logging.getLogger("presx")


@router.post(
    "/audio",
    response_model=UploadResponse,
    responses={501: {"description": "Upload failed; body is {error}"}},
)
async def upload_audio(storage: AudioStorageDep, file: UploadFile = File(...)):
    """Store one audio file under ``audio/<epochMillis>-<filename>``."""
    try:
        data = await file.read()
        path = await storage.store_upload(
            data, file.filename or "upload", file.content_type or "application/octet-stream"
        )
    except Exception as e:
        logger.error("Unhandled error in upload_audio", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            content={"error": f"Something went wrong: {e}"},
        )
    return UploadResponse(message="Uploaded successfully", path=path)
