"""
Microphone capture interface.

A source grants (or refuses) access to an audio stream; the stream yields
encoded chunks, roughly one per second, until it is released.
"""

from abc import ABC, abstractmethod
from typing import Optional


class AudioStream(ABC):
    """An open microphone stream."""

    @abstractmethod
    async def read_chunk(self) -> Optional[bytes]:
        """Wait for the next chunk; ``None`` once the stream has ended."""
        pass

    @abstractmethod
    async def release(self) -> None:
        """Stop capture and free the device. Pending chunks stay readable."""
        pass


class AudioSource(ABC):
    """Grants access to a microphone."""

    @abstractmethod
    async def open(self) -> AudioStream:
        """
        Request microphone access.

        Raises:
            MicrophoneAccessError: access was denied or no device is available.
        """
        pass
