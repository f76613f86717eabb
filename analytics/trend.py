"""Linear regression trend analysis over a sliding window of recent values."""

from dataclasses import dataclass
from typing import Sequence


@dataclass
class TrendResult:
    direction: str  # "increasing" | "decreasing" | "stable" | "insufficient_data"
    strength: float  # |R²|, 0.0 to 1.0
    slope: float
    r_squared: float
    change_rate: float  # slope * 100, a relative magnitude, not a normalized percent
    data_points: int

    @classmethod
    def insufficient(cls, data_points: int = 0) -> "TrendResult":
        return cls(
            direction="insufficient_data", strength=0.0, slope=0.0,
            r_squared=0.0, change_rate=0.0, data_points=data_points,
        )


class TrendDetector:
    """
    OLS linear regression of value against position in the window.

    Positions are 0..n-1, so readings are treated as equally spaced in time
    even when the polling interval drifted. A slope within ±STABLE_SLOPE
    per reading is classified as stable regardless of R².
    """

    MIN_POINTS = 3
    STABLE_SLOPE = 0.01

    def __init__(self, window_size: int = 20):
        if window_size < self.MIN_POINTS:
            raise ValueError(f"window_size must be at least {self.MIN_POINTS}")
        self.window_size = window_size

    def compute_trend(self, values: Sequence[float]) -> TrendResult:
        if len(values) < self.MIN_POINTS:
            return TrendResult.insufficient(len(values))

        window = list(values[-self.window_size:])
        n = len(window)

        x_mean = (n - 1) / 2
        y_mean = sum(window) / n

        # Centered sums avoid the cancellation of the sum-of-squares form
        sxy = sum((i - x_mean) * (y - y_mean) for i, y in enumerate(window))
        sxx = sum((i - x_mean) ** 2 for i in range(n))
        slope = sxy / sxx

        ss_tot = sum((y - y_mean) ** 2 for y in window)
        if max(window) == min(window) or ss_tot == 0:
            # Constant series: the flat line fits exactly
            r_squared = 1.0
        else:
            ss_res = sum(
                (y - (y_mean + slope * (i - x_mean))) ** 2 for i, y in enumerate(window)
            )
            r_squared = 1.0 - ss_res / ss_tot

        if abs(slope) <= self.STABLE_SLOPE:
            direction = "stable"
        elif slope > 0:
            direction = "increasing"
        else:
            direction = "decreasing"

        return TrendResult(
            direction=direction,
            strength=abs(r_squared),
            slope=slope,
            r_squared=r_squared,
            change_rate=slope * 100,
            data_points=n,
        )
