"""Noise generators for realistic milk-sensor simulation."""

import math
import random


class NoiseGenerator:
    """Signal components layered on a baseline. Seed it for reproducible runs."""

    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)

    @staticmethod
    def sinusoidal(t: float, period: float = 86400, amplitude: float = 1.0) -> float:
        """Daily cycle, e.g. ambient temperature around the collection tank. t in seconds."""
        return amplitude * math.sin(2 * math.pi * t / period)

    def gaussian(self, std: float = 1.0) -> float:
        return self._rng.gauss(0.0, std)

    def spike(self, probability: float = 0.005, magnitude: float = 15.0) -> float:
        """Occasional sensor glitch for the anomaly detector to catch."""
        if self._rng.random() < probability:
            return magnitude * self._rng.choice([-1, 1])
        return 0.0

    @staticmethod
    def drift(t: float, rate: float = 0.001) -> float:
        """Linear drift over time; negative rates model souring (falling pH)."""
        return rate * t

    def choice(self, options):
        return self._rng.choice(options)
