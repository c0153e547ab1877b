"""
Consultation recording capture.

Wraps an ``AudioSource`` so a form controller can start and stop one capture
session at a time. Chunks are pulled from the open stream by a background task
while a second task advances the elapsed-time counter.
"""

import asyncio
import logging
from contextlib import suppress
from typing import Optional

from ..domain.entities.recording import AudioBlob, RecordingSession
from ..domain.errors import MicrophoneAccessError, RecordingInProgressError
from .ports.services.audio_source import AudioSource, AudioStream

logger = logging.getLogger(__name__)


class RecordingCapture:
    """Start/stop capture of a single consultation recording."""

    def __init__(self, content_type: str = "audio/webm", tick_seconds: float = 1.0):
        self._content_type = content_type
        self._tick_seconds = tick_seconds
        self.session = RecordingSession()
        self._stream: Optional[AudioStream] = None
        self._pump_task: Optional[asyncio.Task] = None
        self._ticker_task: Optional[asyncio.Task] = None

    @property
    def is_recording(self) -> bool:
        return self.session.is_recording

    @property
    def has_recording(self) -> bool:
        return self.session.has_recording

    @property
    def audio(self) -> Optional[AudioBlob]:
        return self.session.audio

    @property
    def elapsed_seconds(self) -> int:
        return self.session.elapsed_seconds

    async def start(self, source: AudioSource) -> None:
        """
        Request microphone access and begin a session.

        Raises:
            RecordingInProgressError: a session is already active.
            MicrophoneAccessError: access was refused or the device failed;
                the session is left untouched.
        """
        if self.session.is_recording:
            raise RecordingInProgressError()

        try:
            stream = await source.open()
        except MicrophoneAccessError:
            logger.warning("Microphone access denied")
            raise
        except Exception as e:
            logger.error(f"Error starting recording: {e}", exc_info=True)
            raise MicrophoneAccessError(str(e)) from e

        self._stream = stream
        self.session.begin()
        self._pump_task = asyncio.create_task(self._pump(stream))
        self._ticker_task = asyncio.create_task(self._tick())
        logger.info("Recording started")

    async def stop(self) -> Optional[AudioBlob]:
        """Finalize the active session; a no-op when nothing is recording."""
        if not self.session.is_recording:
            return None

        if self._ticker_task is not None:
            self._ticker_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._ticker_task
            self._ticker_task = None

        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                await stream.release()
            except Exception as e:
                logger.error(f"Error releasing microphone: {e}", exc_info=True)

        if self._pump_task is not None:
            try:
                # release() ends the stream, so the pump drains and exits
                await self._pump_task
            except Exception as e:
                logger.error(f"Error reading audio stream: {e}", exc_info=True)
            self._pump_task = None

        blob = self.session.finalize(self._content_type)
        logger.info(
            "Recording stopped",
            extra={
                "chunks": blob.chunk_count,
                "size": blob.size,
                "duration_seconds": self.session.elapsed_seconds,
            },
        )
        return blob

    async def close(self) -> None:
        """Teardown: force-stop an active session."""
        if self.session.is_recording:
            logger.info("Force-stopping active recording")
            await self.stop()

    async def _pump(self, stream: AudioStream) -> None:
        while True:
            chunk = await stream.read_chunk()
            if chunk is None:
                return
            self.session.append(chunk)

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self._tick_seconds)
            self.session.tick()
