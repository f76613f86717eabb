"""One-step-ahead forecasting with double (Holt) exponential smoothing."""

from dataclasses import dataclass

from analytics.statistics import extract_values, mean_and_std
from ingest.schemas import StoredReading


@dataclass
class PredictionRange:
    lower: float
    upper: float


@dataclass
class Prediction:
    parameter: str
    predicted: float
    confidence: float  # 0.5 to 0.95
    range: PredictionRange


class Forecaster:
    """
    Holt level+trend smoothing, rebuilt from the first value on every call.

    The range is a band proportional to the forecast (±|p|·confidence/200),
    an approximation for display rather than a statistical interval.
    """

    MIN_POINTS = 5
    CONFIDENCE_SAMPLE = 10
    MIN_CONFIDENCE = 0.5
    MAX_CONFIDENCE = 0.95

    def __init__(self, alpha: float = 0.3):
        self.alpha = alpha

    def predict_next(
        self, parameter: str, readings: list[StoredReading], alpha: float | None = None
    ) -> Prediction | None:
        alpha = self.alpha if alpha is None else alpha
        values = extract_values(parameter, readings)
        if len(values) < self.MIN_POINTS:
            return None

        level = values[0]
        trend = values[1] - values[0]
        for value in values[1:]:
            new_level = alpha * value + (1 - alpha) * (level + trend)
            trend = alpha * (new_level - level) + (1 - alpha) * trend
            level = new_level

        predicted = level + trend
        confidence = self.confidence(values)
        half_width = abs(predicted) * confidence / 200

        return Prediction(
            parameter=parameter,
            predicted=predicted,
            confidence=confidence,
            range=PredictionRange(lower=predicted - half_width, upper=predicted + half_width),
        )

    def confidence(self, values: list[float]) -> float:
        """Lower coefficient of variation over the latest values → higher confidence."""
        if len(values) < self.CONFIDENCE_SAMPLE:
            return self.MIN_CONFIDENCE
        mean, std = mean_and_std(values[-self.CONFIDENCE_SAMPLE:])
        if mean == 0:
            return self.MIN_CONFIDENCE
        cv = std / abs(mean)
        return max(self.MIN_CONFIDENCE, min(self.MAX_CONFIDENCE, 1 - cv))
