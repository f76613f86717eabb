"""Tests for z-score anomaly detection."""

import pytest

from analytics.anomaly import AnomalyDetector


def clustered(n: int = 20) -> list[float]:
    return [99.0 + (i % 3) for i in range(n)]  # 99, 100, 101, ...


class TestAnomalyDetector:
    def test_insufficient_data(self, make_readings):
        readings = make_readings(tds=[float(i) for i in range(9)])
        result = AnomalyDetector().detect("tds", readings)
        assert result.has_anomaly is False
        assert "Insufficient data" in result.message

    def test_missing_values_do_not_count(self, make_readings):
        # 12 readings but only 9 carry a pH value
        readings = make_readings(ph=[6.6] * 9, tds=[450.0] * 12)
        result = AnomalyDetector().detect("ph", readings)
        assert result.has_anomaly is False
        assert "Insufficient data" in result.message

    def test_no_anomaly_with_stable_data(self, make_readings):
        readings = make_readings(tds=clustered(30))
        result = AnomalyDetector().detect("tds", readings)
        assert result.has_anomaly is False

    def test_detects_critical_spike(self, make_readings):
        readings = make_readings(tds=clustered(20) + [200.0])
        result = AnomalyDetector().detect("tds", readings)
        assert result.has_anomaly is True
        assert result.severity == "critical"
        assert result.z_score > 3.0
        assert result.current_value == 200.0
        assert result.deviation > 0
        assert "above normal" in result.message

    def test_detects_drop(self, make_readings):
        readings = make_readings(tds=clustered(20) + [0.0])
        result = AnomalyDetector().detect("tds", readings)
        assert result.has_anomaly is True
        assert result.deviation < 0
        assert "below normal" in result.message

    def test_zero_std_never_anomalous(self, make_readings):
        readings = make_readings(gas=[42.0] * 20)
        result = AnomalyDetector().detect("gas", readings)
        assert result.has_anomaly is False

    def test_custom_threshold_and_medium_severity(self, make_readings):
        # z of the final 2.0 against all 21 values is about 2.45
        values = [0.0, 1.0] * 10 + [2.0]
        readings = make_readings(gas=values)
        detector = AnomalyDetector()
        assert detector.detect("gas", readings).has_anomaly is False

        result = detector.detect("gas", readings, threshold=1.5)
        assert result.has_anomaly is True
        assert result.severity == "medium"
        assert result.threshold == 1.5

    def test_high_severity_band(self, make_readings):
        # z of the final 2.5 is about 2.94
        values = [0.0, 1.0] * 10 + [2.5]
        readings = make_readings(gas=values)
        result = AnomalyDetector().detect("gas", readings)
        assert result.has_anomaly is True
        assert 2.5 < result.z_score <= 3.0
        assert result.severity == "high"

    def test_default_threshold(self):
        assert AnomalyDetector().threshold == pytest.approx(2.5)
