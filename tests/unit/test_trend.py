"""Tests for linear regression trend detection."""

import pytest

from analytics.trend import TrendDetector


class TestTrendDetector:
    def test_insufficient_data(self):
        detector = TrendDetector()
        result = detector.compute_trend([1.0, 2.0])
        assert result.direction == "insufficient_data"
        assert result.strength == 0
        assert result.slope == 0

    def test_empty_series(self):
        result = TrendDetector().compute_trend([])
        assert result.direction == "insufficient_data"
        assert result.data_points == 0

    def test_increasing_trend(self):
        result = TrendDetector().compute_trend([float(i) for i in range(1, 21)])
        assert result.direction == "increasing"
        assert result.slope == pytest.approx(1.0)
        assert result.r_squared == pytest.approx(1.0)
        assert result.strength == pytest.approx(1.0)
        assert result.change_rate == pytest.approx(100.0)

    def test_decreasing_trend(self):
        result = TrendDetector().compute_trend([100.0 - i * 2.0 for i in range(30)])
        assert result.direction == "decreasing"
        assert result.slope == pytest.approx(-2.0)

    def test_constant_series_is_stable_with_perfect_fit(self):
        result = TrendDetector().compute_trend([5.0] * 10)
        assert result.direction == "stable"
        assert result.slope == pytest.approx(0.0)
        assert result.r_squared == 1.0

    def test_constant_non_integer_series(self):
        result = TrendDetector().compute_trend([6.6] * 20)
        assert result.direction == "stable"
        assert result.r_squared == 1.0

    def test_small_swings_at_large_magnitude_are_not_a_perfect_fit(self):
        # Alternating 1e6 ± 0.5: true R² = 5 * (5 / 665) / 5 ≈ 0.0075
        values = [1e6 + (0.5 if i % 2 else -0.5) for i in range(20)]
        result = TrendDetector().compute_trend(values)
        assert result.r_squared == pytest.approx(5 / 665, abs=1e-3)
        assert result.strength < 0.05
        assert result.direction == "stable"

    def test_minimum_three_points(self):
        result = TrendDetector().compute_trend([1.0, 2.0, 3.0])
        assert result.direction == "increasing"
        assert result.data_points == 3

    def test_small_slope_is_stable(self):
        # 0.005 per reading is inside the stable band
        result = TrendDetector().compute_trend([10.0 + i * 0.005 for i in range(20)])
        assert result.direction == "stable"
        assert result.slope == pytest.approx(0.005)

    def test_uses_only_the_last_window(self):
        # A long decline followed by 20 rising values: only the rise counts
        values = [100.0 - i for i in range(50)] + [float(i) for i in range(20)]
        result = TrendDetector(window_size=20).compute_trend(values)
        assert result.direction == "increasing"
        assert result.data_points == 20
        assert result.slope == pytest.approx(1.0)

    def test_noisy_series_has_partial_strength(self):
        values = [0.0, 2.0, 1.0, 3.0, 2.0, 4.0, 3.0, 5.0]
        result = TrendDetector().compute_trend(values)
        assert result.direction == "increasing"
        assert 0.0 < result.r_squared < 1.0

    def test_window_size_validation(self):
        with pytest.raises(ValueError):
            TrendDetector(window_size=2)
