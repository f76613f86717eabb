"""Z-score anomaly detection of the latest reading against its history."""

from dataclasses import dataclass

from analytics.statistics import extract_values, mean_and_std
from ingest.schemas import StoredReading


@dataclass
class AnomalyResult:
    has_anomaly: bool
    parameter: str
    current_value: float | None = None
    expected_mean: float | None = None
    deviation: float | None = None  # signed: current - mean
    z_score: float | None = None
    severity: str | None = None  # "medium" | "high" | "critical"
    threshold: float | None = None
    message: str | None = None


class AnomalyDetector:
    """
    Compares the most recent value of a parameter with the distribution of
    every valid value in the supplied readings:
        z = |current - mean| / std

    |z| > threshold flags an anomaly.
    Severity: z > 3.0 → critical, z > 2.5 → high, else → medium.
    """

    MIN_POINTS = 10

    def __init__(self, z_threshold: float = 2.5):
        self._threshold = z_threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    def detect(
        self, parameter: str, readings: list[StoredReading], threshold: float | None = None
    ) -> AnomalyResult:
        threshold = self._threshold if threshold is None else threshold
        values = extract_values(parameter, readings)

        if len(values) < self.MIN_POINTS:
            return AnomalyResult(
                has_anomaly=False,
                parameter=parameter,
                message="Insufficient data for anomaly detection",
            )

        mean, std = mean_and_std(values)
        current = values[-1]

        # Constant history: nothing can stand out from it
        if std == 0:
            return AnomalyResult(has_anomaly=False, parameter=parameter, threshold=threshold)

        z_score = abs(current - mean) / std
        if z_score <= threshold:
            return AnomalyResult(has_anomaly=False, parameter=parameter, threshold=threshold)

        deviation = current - mean
        if z_score > 3.0:
            severity = "critical"
        elif z_score > 2.5:
            severity = "high"
        else:
            severity = "medium"

        return AnomalyResult(
            has_anomaly=True,
            parameter=parameter,
            current_value=current,
            expected_mean=mean,
            deviation=deviation,
            z_score=z_score,
            severity=severity,
            threshold=threshold,
            message=(
                f"{parameter} is {abs(deviation):.2f} units "
                f"{'above' if deviation > 0 else 'below'} normal "
                f"({z_score:.2f} std deviations)"
            ),
        )
