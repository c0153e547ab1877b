"""Disease prediction returned by the remote prediction service."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class DiseasePrediction:
    disease: str
    confidence: float

    @property
    def confidence_percent(self) -> str:
        return f"{self.confidence * 100:.2f}%"


@dataclass
class PredictionResult:
    """Primary prediction, alternatives and the two base64 PNG charts."""

    primary: DiseasePrediction
    alternatives: List[DiseasePrediction] = field(default_factory=list)
    symptoms_reported: List[str] = field(default_factory=list)
    graph_image: Optional[str] = None
    symptoms_chart: Optional[str] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "PredictionResult":
        """Parse the service's JSON body; raises ValueError when malformed."""
        try:
            prediction = data["prediction"]
            primary = prediction["primary_prediction"]
            alternatives = prediction.get("alternative_predictions") or []
            return cls(
                primary=DiseasePrediction(
                    disease=str(primary["disease"]),
                    confidence=float(primary["confidence"]),
                ),
                alternatives=[
                    DiseasePrediction(
                        disease=str(alt["disease"]), confidence=float(alt["confidence"])
                    )
                    for alt in alternatives
                ],
                symptoms_reported=list(data.get("symptoms_reported") or []),
                graph_image=data.get("graph_image"),
                symptoms_chart=data.get("symptoms_chart"),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed prediction response: {exc}") from exc
