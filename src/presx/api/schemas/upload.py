"""
Pydantic schemas for file upload endpoints.
"""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    message: str = Field(..., description="Status message")
    path: str = Field(..., description="Object path of the stored file")
