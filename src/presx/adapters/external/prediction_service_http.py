"""
HTTP implementation of PredictionService for the remote disease predictor.
"""

import asyncio
import logging
from typing import Optional

import requests

from presx.application.ports.services.prediction_service import (
    PredictionService,
    PredictionServiceError,
)
from presx.core.config import PredictionSettings, get_settings
from presx.domain.entities.prediction import PredictionResult

logger = logging.getLogger(__name__)


class HttpPredictionService(PredictionService):
    """Posts symptoms as a single multipart form field and parses the JSON reply."""

    def __init__(
        self,
        settings: Optional[PredictionSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().prediction
        self._session = session or requests.Session()

    async def predict(self, symptoms: str) -> PredictionResult:
        def _run():
            # (None, value) sends a plain form field as multipart/form-data
            return self._session.post(
                self._settings.url,
                files={self._settings.field_name: (None, symptoms)},
            )

        logger.info(f"Predicting disease based on symptoms: {symptoms}")
        try:
            response = await asyncio.to_thread(_run)
        except requests.RequestException as e:
            raise PredictionServiceError(f"Prediction request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise PredictionServiceError(
                f"Prediction service returned invalid JSON (status {response.status_code})"
            ) from e

        if not response.ok:
            error = data.get("error") if isinstance(data, dict) else None
            raise PredictionServiceError(
                error or f"Prediction service returned status {response.status_code}"
            )

        if not isinstance(data, dict):
            raise PredictionServiceError("Malformed prediction response")
        try:
            result = PredictionResult.from_response(data)
        except ValueError as e:
            raise PredictionServiceError(str(e)) from e

        logger.info(
            "Prediction data received",
            extra={
                "disease": result.primary.disease,
                "confidence": result.primary.confidence,
            },
        )
        return result
