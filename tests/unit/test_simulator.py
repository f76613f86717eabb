"""Tests for the milk sensor simulator."""

from ingest.simulator import MILK_PROFILES, MilkSensorSimulator, parse_args
from ingest.schemas import TRACKED_PARAMETERS


class TestMilkSensorSimulator:
    def test_reading_has_every_parameter(self):
        reading = MilkSensorSimulator(seed=1).generate_reading(0)
        for parameter in TRACKED_PARAMETERS:
            assert getattr(reading, parameter) is not None

    def test_seeded_runs_repeat(self):
        a = MilkSensorSimulator(seed=7).generate_reading(60)
        b = MilkSensorSimulator(seed=7).generate_reading(60)
        assert a == b

    def test_values_stay_plausible_without_spikes(self):
        sim = MilkSensorSimulator(seed=3, spike_probability=0.0, cattle_type="cow", season="winter")
        for i in range(50):
            reading = sim.generate_reading(i * 60)
            assert 6.0 < reading.ph < 7.0
            assert 300 < reading.tds < 600
        assert reading.cattle_type == "cow"
        assert reading.season == "winter"

    def test_souring_drift_lowers_ph(self):
        sim = MilkSensorSimulator(seed=5, spike_probability=0.0)
        profile = MILK_PROFILES["ph"]
        early = sum(sim.simulate_value(profile, 0) for _ in range(50)) / 50
        late = sum(sim.simulate_value(profile, 10 * 3600) for _ in range(50)) / 50
        assert late < early - 0.1

    def test_run_stores_into_engine(self, engine):
        slept = []
        stored = MilkSensorSimulator(seed=2).run(engine, count=6, interval_sec=0.5, sleep=slept.append)
        assert stored == 6
        assert len(engine.get_history()) == 6
        assert slept == [0.5] * 5


def test_parse_args():
    args = parse_args(["--count", "10", "--interval", "0", "--seed", "4", "--season", "monsoon"])
    assert args.count == 10
    assert args.interval == 0.0
    assert args.seed == 4
    assert args.season == "monsoon"
    assert args.cattle_type is None
