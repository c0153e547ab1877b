"""
Azure Blob Storage adapter for consultation recordings and uploaded audio.
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Optional

from azure.core.exceptions import AzureError, ResourceExistsError
from azure.storage.blob import (
    BlobSasPermissions,
    BlobServiceClient,
    ContentSettings,
    generate_blob_sas,
)

from ...application.ports.services.audio_storage import AudioStorage, StoredRecording
from ...core.config import AzureBlobSettings, get_settings
from ...core.utils.blocking import run_blocking
from ...domain.entities.recording import AudioBlob
from ...domain.errors import StorageError

logger = logging.getLogger(__name__)


class AzureBlobAudioStorage(AudioStorage):
    """Stores recordings in the ``voice`` container and uploads in ``uploads``."""

    def __init__(self, settings: Optional[AzureBlobSettings] = None):
        self.settings = settings or get_settings().azure_blob
        self._service_client: Optional[BlobServiceClient] = None

    @staticmethod
    def _extract_account_key(connection_string: str) -> Optional[str]:
        for part in connection_string.split(";"):
            if part.startswith("AccountKey="):
                return part.split("=", 1)[1]
        return None

    @property
    def service_client(self) -> BlobServiceClient:
        """Get or create the BlobServiceClient from settings."""
        if self._service_client is None:
            if not self.settings.connection_string:
                raise StorageError(
                    "Azure Blob Storage connection string is required. "
                    "Set AZURE_BLOB_CONNECTION_STRING"
                )
            self._service_client = BlobServiceClient.from_connection_string(
                self.settings.connection_string
            )
            logger.info(
                "Azure Blob Storage client initialized",
                extra={
                    "account": self._service_client.account_name,
                    "recordings_container": self.settings.recordings_container,
                },
            )
        return self._service_client

    async def upload_recording(self, blob: AudioBlob, file_name: str) -> StoredRecording:
        blob_client = self.service_client.get_blob_client(
            container=self.settings.recordings_container, blob=file_name
        )
        try:
            await run_blocking(
                blob_client.upload_blob,
                blob.data,
                overwrite=False,
                content_settings=ContentSettings(
                    content_type=blob.content_type,
                    cache_control=self.settings.cache_control,
                ),
            )
        except ResourceExistsError as e:
            raise StorageError(
                f"Recording already exists: {file_name}", {"file_name": file_name}
            ) from e
        except AzureError as e:
            logger.error(f"Error uploading recording {file_name}: {e}", exc_info=True)
            raise StorageError(
                f"Failed to upload recording: {e}", {"file_name": file_name}
            ) from e

        logger.info(
            "Recording uploaded",
            extra={"file_name": file_name, "file_size": blob.size},
        )
        return StoredRecording(
            audio_url=blob_client.url,
            file_name=file_name,
            file_size=blob.size,
        )

    async def delete_recording(self, file_name: str) -> None:
        blob_client = self.service_client.get_blob_client(
            container=self.settings.recordings_container, blob=file_name
        )
        try:
            await run_blocking(blob_client.delete_blob)
        except AzureError as e:
            logger.error(f"Error deleting recording {file_name}: {e}", exc_info=True)
            raise StorageError(
                f"Failed to delete recording: {e}", {"file_name": file_name}
            ) from e

    async def get_signed_url(self, file_name: str, expires_in: int = 3600) -> str:
        client = self.service_client
        account_key = self._extract_account_key(self.settings.connection_string)
        if not account_key:
            raise StorageError("Signed URLs require an account key in the connection string")

        sas_token = generate_blob_sas(
            account_name=client.account_name,
            container_name=self.settings.recordings_container,
            blob_name=file_name,
            account_key=account_key,
            permission=BlobSasPermissions(read=True),
            expiry=datetime.utcnow() + timedelta(seconds=expires_in),
        )
        blob_client = client.get_blob_client(
            container=self.settings.recordings_container, blob=file_name
        )
        return f"{blob_client.url}?{sas_token}"

    async def store_upload(self, data: bytes, original_name: str, content_type: str) -> str:
        path = f"audio/{int(time.time() * 1000)}-{original_name}"
        blob_client = self.service_client.get_blob_client(
            container=self.settings.uploads_container, blob=path
        )
        try:
            await run_blocking(
                blob_client.upload_blob,
                data,
                overwrite=False,
                content_settings=ContentSettings(
                    content_type=content_type or "application/octet-stream",
                    cache_control=self.settings.cache_control,
                ),
            )
        except AzureError as e:
            logger.error(f"Error storing upload {path}: {e}", exc_info=True)
            raise StorageError(f"Failed to store upload: {e}", {"path": path}) from e

        logger.info("Audio upload stored", extra={"path": path, "size": len(data)})
        return path
