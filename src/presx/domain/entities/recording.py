"""In-memory consultation recording state."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class AudioBlob:
    """A finalized recording: the concatenated chunks plus their media type."""

    data: bytes
    content_type: str = "audio/webm"
    chunk_count: int = 0

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class RecordingSession:
    """Capture state for one consultation.

    A session is created idle; ``begin`` starts accumulation and ``finalize``
    turns the accumulated chunks into a single ``AudioBlob``.
    """

    is_recording: bool = False
    elapsed_seconds: int = 0
    chunks: List[bytes] = field(default_factory=list)
    started_at: Optional[datetime] = None
    audio: Optional[AudioBlob] = None

    @property
    def has_recording(self) -> bool:
        return self.audio is not None

    def begin(self) -> None:
        self.chunks = []
        self.elapsed_seconds = 0
        self.started_at = datetime.utcnow()
        self.audio = None
        self.is_recording = True

    def append(self, chunk: bytes) -> None:
        # empty chunks carry no audio
        if chunk:
            self.chunks.append(chunk)

    def tick(self) -> None:
        self.elapsed_seconds += 1

    def finalize(self, content_type: str) -> AudioBlob:
        self.audio = AudioBlob(
            data=b"".join(self.chunks),
            content_type=content_type,
            chunk_count=len(self.chunks),
        )
        self.is_recording = False
        return self.audio

    @staticmethod
    def format_duration(seconds: int) -> str:
        """Render seconds as ``m:ss``."""
        return f"{seconds // 60}:{seconds % 60:02d}"
