"""Descriptive statistics for a single sensor parameter over a slice of history."""

import math
import statistics
from dataclasses import dataclass
from typing import Iterable

from analytics.trend import TrendDetector, TrendResult
from ingest.schemas import StoredReading


@dataclass
class ParameterStats:
    parameter: str
    current: float
    mean: float
    median: float
    min: float
    max: float
    std_dev: float
    variance: float
    count: int
    trend: TrendResult
    stability: str  # "very_stable" | "stable" | "moderate" | "unstable" | "very_unstable" | "unknown"


def extract_values(parameter: str, readings: Iterable[StoredReading]) -> list[float]:
    """Values of one parameter in reading order, skipping readings where it is absent."""
    values = []
    for reading in readings:
        value = reading.value_of(parameter)
        if value is not None:
            values.append(value)
    return values


def mean_and_std(values: list[float]) -> tuple[float, float]:
    """Arithmetic mean and population standard deviation."""
    mean = statistics.fmean(values)
    return mean, math.sqrt(statistics.pvariance(values, mu=mean))


def classify_stability(std_dev: float, mean: float) -> str:
    """Label a series by its coefficient of variation (in percent)."""
    if mean == 0:
        return "unknown"
    cv = std_dev / abs(mean) * 100
    if cv < 5:
        return "very_stable"
    if cv < 10:
        return "stable"
    if cv < 20:
        return "moderate"
    if cv < 30:
        return "unstable"
    return "very_unstable"


class StatisticsEngine:
    def __init__(self, trend_detector: TrendDetector | None = None):
        self._trend = trend_detector or TrendDetector()

    def compute_stats(self, parameter: str, readings: list[StoredReading]) -> ParameterStats | None:
        values = extract_values(parameter, readings)
        if not values:
            return None

        ordered = sorted(values)
        mean = statistics.fmean(values)
        variance = statistics.pvariance(values, mu=mean)
        std_dev = math.sqrt(variance)

        return ParameterStats(
            parameter=parameter,
            current=values[-1],
            mean=mean,
            # Lower-middle element for even counts, no interpolation.
            median=ordered[(len(ordered) - 1) // 2],
            min=ordered[0],
            max=ordered[-1],
            std_dev=std_dev,
            variance=variance,
            count=len(values),
            trend=self._trend.compute_trend(values),
            stability=classify_stability(std_dev, mean),
        )
