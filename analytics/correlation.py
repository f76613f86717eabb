"""Pairwise Pearson correlation between sensor parameters."""

import math
from dataclasses import dataclass
from itertools import combinations
from typing import Sequence

from analytics.statistics import extract_values
from ingest.schemas import StoredReading


@dataclass
class CorrelationResult:
    coefficient: float
    strength: str  # "none" | "weak" | "moderate" | "strong" | "insufficient_data"
    direction: str  # "positive" | "negative" | "none"
    sample_size: int


def classify_strength(coefficient: float) -> str:
    magnitude = abs(coefficient)
    if magnitude > 0.7:
        return "strong"
    if magnitude > 0.4:
        return "moderate"
    if magnitude > 0.2:
        return "weak"
    return "none"


class CorrelationAnalyzer:
    """
    Pairs each parameter's valid values by position and truncates to the
    shorter list. Readings are not joined on timestamp, so a value missing
    from only one parameter shifts the pairing of everything after it.
    """

    MIN_PAIRS = 10
    MIN_READINGS = 20

    def correlate(self, param_a: str, param_b: str, readings: list[StoredReading]) -> CorrelationResult:
        values_a = extract_values(param_a, readings)
        values_b = extract_values(param_b, readings)
        n = min(len(values_a), len(values_b))

        if n < self.MIN_PAIRS:
            return CorrelationResult(
                coefficient=0.0, strength="insufficient_data", direction="none", sample_size=n,
            )

        values_a, values_b = values_a[:n], values_b[:n]
        mean_a = sum(values_a) / n
        mean_b = sum(values_b) / n

        covariance = 0.0
        var_a = 0.0
        var_b = 0.0
        for a, b in zip(values_a, values_b):
            da = a - mean_a
            db = b - mean_b
            covariance += da * db
            var_a += da * da
            var_b += db * db

        # A flat series has no linear association to measure
        if var_a == 0 or var_b == 0:
            return CorrelationResult(coefficient=0.0, strength="none", direction="none", sample_size=n)

        coefficient = max(-1.0, min(1.0, covariance / math.sqrt(var_a * var_b)))
        if coefficient > 0:
            direction = "positive"
        elif coefficient < 0:
            direction = "negative"
        else:
            direction = "none"

        return CorrelationResult(
            coefficient=coefficient,
            strength=classify_strength(coefficient),
            direction=direction,
            sample_size=n,
        )

    def correlate_all(
        self, parameters: Sequence[str], readings: list[StoredReading]
    ) -> dict[str, CorrelationResult] | None:
        """Correlation for every unordered pair, keyed "<first>_<second>" in parameter order."""
        if len(readings) < self.MIN_READINGS:
            return None
        return {
            f"{a}_{b}": self.correlate(a, b, readings)
            for a, b in combinations(parameters, 2)
        }
