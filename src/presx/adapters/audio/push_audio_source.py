"""
Audio source fed by chunks pushed from the client.

The browser owns the physical microphone; it reports whether access was
granted and then posts encoded chunks over HTTP, roughly one per second.
"""

import asyncio
import logging
from typing import Optional

from presx.application.ports.services.audio_source import AudioSource, AudioStream
from presx.domain.errors import MicrophoneAccessError

logger = logging.getLogger(__name__)


class PushAudioStream(AudioStream):
    """Queue-backed stream; ``None`` on the queue marks the end."""

    def __init__(self):
        self._queue: "asyncio.Queue[Optional[bytes]]" = asyncio.Queue()
        self._released = False
        self.pushed = 0  # non-empty chunks accepted, including ones not yet read

    @property
    def released(self) -> bool:
        return self._released

    def push(self, chunk: bytes) -> bool:
        """Queue a chunk; returns False once the stream has been released."""
        if self._released:
            logger.debug("Dropping audio chunk pushed after release")
            return False
        self._queue.put_nowait(chunk)
        if chunk:
            self.pushed += 1
        return True

    async def read_chunk(self) -> Optional[bytes]:
        return await self._queue.get()

    async def release(self) -> None:
        if not self._released:
            self._released = True
            self._queue.put_nowait(None)


class PushAudioSource(AudioSource):
    """Opens a ``PushAudioStream`` when the client granted microphone access."""

    def __init__(self, granted: bool = True, reason: Optional[str] = None):
        self._granted = granted
        self._reason = reason
        self.stream: Optional[PushAudioStream] = None

    async def open(self) -> PushAudioStream:
        if not self._granted:
            raise MicrophoneAccessError(self._reason or "permission denied")
        self.stream = PushAudioStream()
        return self.stream

    @property
    def chunk_count(self) -> int:
        return self.stream.pushed if self.stream is not None else 0

    def push(self, chunk: bytes) -> bool:
        if self.stream is None:
            return False
        return self.stream.push(chunk)
