"""
Messaging relay interface used to deliver prescription PDFs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class RelayResponse:
    ok: bool
    result: Optional[Any] = None
    description: Optional[str] = None


class MessagingService(ABC):
    """Abstract messaging relay."""

    @abstractmethod
    async def send_document(
        self, pdf: bytes, caption: Optional[str] = None, file_name: str = "prescription.pdf"
    ) -> RelayResponse:
        """Send a PDF to the configured recipient. Never raises for remote errors."""
        pass

    @abstractmethod
    def bot_start_link(self) -> str:
        """Link a recipient opens to start a conversation with the bot."""
        pass
