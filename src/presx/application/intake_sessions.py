"""Registry of live intake form controllers, keyed by session id."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..domain.errors import SessionNotFoundError
from .intake import IntakeFormController
from .ports.services.audio_source import AudioSource

logger = logging.getLogger(__name__)


@dataclass
class IntakeSession:
    controller: IntakeFormController
    audio_source: Optional[AudioSource] = None  # source of the current recording
    last_seen: float = field(default_factory=time.monotonic)

    @property
    def session_id(self) -> str:
        return self.controller.session_id


class IntakeSessionRegistry:
    """Owns the controllers; closing a session tears its controller down.

    Sessions untouched for ``idle_seconds`` are closed the next time a
    session is opened, so abandoned consultations do not hold their form
    and audio for the life of the process.
    """

    def __init__(
        self,
        controller_factory: Callable[[], IntakeFormController],
        idle_seconds: Optional[float] = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._controller_factory = controller_factory
        self._idle_seconds = idle_seconds
        self._clock = clock
        self._sessions: Dict[str, IntakeSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def create(self) -> IntakeSession:
        await self.evict_idle()
        session = IntakeSession(controller=self._controller_factory(), last_seen=self._clock())
        self._sessions[session.session_id] = session
        logger.info("Intake session opened", extra={"session_id": session.session_id})
        return session

    def get(self, session_id: str) -> IntakeSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.last_seen = self._clock()
        return session

    def session_ids(self) -> List[str]:
        return list(self._sessions)

    async def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        await session.controller.close()
        logger.info("Intake session closed", extra={"session_id": session_id})

    async def evict_idle(self) -> List[str]:
        """Close every session idle for longer than the configured limit."""
        if self._idle_seconds is None:
            return []
        cutoff = self._clock() - self._idle_seconds
        expired = [sid for sid, s in self._sessions.items() if s.last_seen < cutoff]
        for session_id in expired:
            await self._close_quietly(session_id)
            logger.info("Idle intake session evicted", extra={"session_id": session_id})
        return expired

    async def close_all(self) -> None:
        """Shutdown hook: force-stop every open session."""
        for session_id in list(self._sessions):
            await self._close_quietly(session_id)

    async def _close_quietly(self, session_id: str) -> None:
        session = self._sessions.pop(session_id)
        try:
            await session.controller.close()
        except Exception as e:
            logger.error(f"Error closing intake session {session_id}: {e}", exc_info=True)
