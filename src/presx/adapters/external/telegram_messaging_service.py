"""
Telegram Bot API implementation of MessagingService.
"""

import asyncio
import logging
from typing import Optional

import requests

from presx.application.ports.services.messaging_service import (
    MessagingService,
    RelayResponse,
)
from presx.core.config import TelegramSettings, get_settings

logger = logging.getLogger(__name__)


class TelegramMessagingService(MessagingService):
    """Sends prescription PDFs to a fixed Telegram chat."""

    def __init__(
        self,
        settings: Optional[TelegramSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().telegram
        self._session = session or requests.Session()
        if not self._settings.bot_token:
            logger.warning("Telegram bot token not configured")

    @property
    def _api_url(self) -> str:
        return f"{self._settings.base_url.rstrip('/')}/bot{self._settings.bot_token}"

    async def send_document(
        self, pdf: bytes, caption: Optional[str] = None, file_name: str = "prescription.pdf"
    ) -> RelayResponse:
        data = {"chat_id": self._settings.chat_id}
        if caption:
            data["caption"] = caption
            data["parse_mode"] = "HTML"

        def _run():
            return self._session.post(
                f"{self._api_url}/sendDocument",
                data=data,
                files={"document": (file_name, pdf, "application/pdf")},
            )

        try:
            response = await asyncio.to_thread(_run)
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error sending document to Telegram: {e}", exc_info=True)
            return RelayResponse(ok=False, description=str(e) or "Unknown error occurred")

        if not isinstance(body, dict):
            return RelayResponse(ok=False, description="Unexpected Telegram response")

        result = RelayResponse(
            ok=bool(body.get("ok")),
            result=body.get("result"),
            description=body.get("description"),
        )
        if result.ok:
            logger.info("Document sent to Telegram", extra={"file_name": file_name})
        else:
            logger.warning(f"Telegram rejected document: {result.description}")
        return result

    def bot_start_link(self) -> str:
        return f"https://t.me/{self._settings.bot_username}?start=prescription"
