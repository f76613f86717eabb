"""Milk sensor simulator: feeds plausible readings into a trend engine for local development."""

import argparse
import time
from dataclasses import dataclass

from config import Settings, configure_logging
from ingest.noise import NoiseGenerator
from ingest.schemas import ReadingIn


@dataclass
class ParameterProfile:
    baseline: float
    noise_std: float
    drift_per_hour: float = 0.0
    cycle_amplitude: float = 0.0
    decimals: int = 2


# Fresh cow milk kept in a tank at ambient temperature slowly sours:
# pH falls while the gas proxy climbs.
MILK_PROFILES: dict[str, ParameterProfile] = {
    "ph": ParameterProfile(baseline=6.6, noise_std=0.03, drift_per_hour=-0.02),
    "temperature": ParameterProfile(baseline=22.0, noise_std=0.4, cycle_amplitude=2.0, decimals=1),
    "turbidity": ParameterProfile(baseline=15.0, noise_std=0.6),
    "tds": ParameterProfile(baseline=450.0, noise_std=8.0, decimals=0),
    "gas": ParameterProfile(baseline=180.0, noise_std=5.0, drift_per_hour=4.0, decimals=0),
}

CATTLE_TYPES = ["cow", "buffalo", "goat"]
SEASONS = ["summer", "monsoon", "winter"]


class MilkSensorSimulator:
    def __init__(
        self,
        seed: int | None = None,
        spike_probability: float = 0.01,
        cattle_type: str | None = None,
        season: str | None = None,
    ):
        self._noise = NoiseGenerator(seed)
        self._spike_probability = spike_probability
        self.cattle_type = cattle_type or self._noise.choice(CATTLE_TYPES)
        self.season = season or self._noise.choice(SEASONS)

    def simulate_value(self, profile: ParameterProfile, elapsed_sec: float) -> float:
        value = profile.baseline
        value += NoiseGenerator.sinusoidal(elapsed_sec, amplitude=profile.cycle_amplitude)
        value += self._noise.gaussian(profile.noise_std)
        value += self._noise.spike(self._spike_probability, magnitude=profile.noise_std * 8)
        value += NoiseGenerator.drift(elapsed_sec, rate=profile.drift_per_hour / 3600)
        return round(value, profile.decimals)

    def generate_reading(self, elapsed_sec: float) -> ReadingIn:
        values = {
            name: self.simulate_value(profile, elapsed_sec)
            for name, profile in MILK_PROFILES.items()
        }
        return ReadingIn(cattle_type=self.cattle_type, season=self.season, **values)

    def run(self, engine, count: int, interval_sec: float = 1.0, sleep=time.sleep) -> int:
        """Store `count` readings spaced `interval_sec` apart. Returns how many were stored."""
        stored = 0
        for i in range(count):
            engine.store_reading(self.generate_reading(i * interval_sec))
            stored += 1
            if interval_sec > 0 and i < count - 1:
                sleep(interval_sec)
        return stored


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Simulate milk sensor readings into the history store")
    parser.add_argument("--count", type=int, default=60, help="Number of readings to store")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between readings")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--cattle-type", choices=CATTLE_TYPES, default=None)
    parser.add_argument("--season", choices=SEASONS, default=None)
    return parser.parse_args(argv)


def main(argv=None):
    from analytics.engine import TrendEngine

    args = parse_args(argv)
    settings = Settings()
    log = configure_logging("simulator", settings.log_level)
    engine = TrendEngine.from_settings(settings)
    simulator = MilkSensorSimulator(seed=args.seed, cattle_type=args.cattle_type, season=args.season)

    log.info("simulator_started", count=args.count, interval=args.interval,
             cattle_type=simulator.cattle_type, season=simulator.season)
    try:
        stored = simulator.run(engine, args.count, args.interval)
    except KeyboardInterrupt:
        stored = None
    log.info("simulator_stopped", stored=stored, history=len(engine.get_history()))


if __name__ == "__main__":
    main()
