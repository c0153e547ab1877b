"""
Object storage interface for consultation recordings and uploaded audio files.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ....domain.entities.recording import AudioBlob


@dataclass
class StoredRecording:
    audio_url: str
    file_name: str
    file_size: int


class AudioStorage(ABC):
    """Abstract object store for audio."""

    @abstractmethod
    async def upload_recording(self, blob: AudioBlob, file_name: str) -> StoredRecording:
        """Upload a recording without overwriting and return its public URL."""
        pass

    @abstractmethod
    async def delete_recording(self, file_name: str) -> None:
        """Delete a stored recording."""
        pass

    @abstractmethod
    async def get_signed_url(self, file_name: str, expires_in: int = 3600) -> str:
        """Time-limited read URL for a private recording."""
        pass

    @abstractmethod
    async def store_upload(self, data: bytes, original_name: str, content_type: str) -> str:
        """Store an uploaded file under ``audio/<epochMillis>-<name>``; returns the path."""
        pass
