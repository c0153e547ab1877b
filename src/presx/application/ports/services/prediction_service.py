"""
Prediction service interface for symptom-based disease suggestions.
"""

from abc import ABC, abstractmethod

from ....domain.entities.prediction import PredictionResult


class PredictionService(ABC):
    """Abstract client for the remote disease prediction service."""

    @abstractmethod
    async def predict(self, symptoms: str) -> PredictionResult:
        """
        Request a prediction for comma-joined symptom terms.

        Raises:
            PredictionServiceError: on transport errors, non-2xx responses or
                malformed bodies.
        """
        pass


class PredictionServiceError(Exception):
    """Raised when the prediction service cannot produce a result."""
