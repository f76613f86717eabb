"""Tests for the quality scorer seam."""

import math

import pytest

from analytics.quality import load_scorer, safe_score, score_readings


class TestSafeScore:
    def test_no_scorer(self, make_readings):
        assert safe_score(None, make_readings(ph=[6.6])[0]) is None

    def test_valid_score(self, make_readings, ph_scorer):
        assert safe_score(ph_scorer, make_readings(ph=[6.5])[0]) == pytest.approx(90.0)

    def test_scorer_exception_is_no_score(self, make_readings):
        def broken(reading):
            raise RuntimeError("model offline")

        assert safe_score(broken, make_readings(ph=[6.6])[0]) is None

    @pytest.mark.parametrize("bad", [None, "80", math.nan, True])
    def test_invalid_return_is_no_score(self, make_readings, bad):
        assert safe_score(lambda r: bad, make_readings(ph=[6.6])[0]) is None


class TestScoreReadings:
    def test_drops_unscorable(self, make_readings, ph_scorer):
        # The toy scorer fails on readings without pH
        readings = make_readings(ph=[6.6, 6.5], tds=[1.0, 1.0, 1.0])
        assert score_readings(ph_scorer, readings) == pytest.approx([100.0, 90.0])

    def test_without_scorer(self, make_readings):
        assert score_readings(None, make_readings(ph=[6.6] * 5)) == []


class TestLoadScorer:
    def test_empty(self):
        assert load_scorer(None) is None
        assert load_scorer("") is None

    def test_import_path(self):
        scorer = load_scorer("math:fabs")
        assert scorer(-3) == 3

    def test_malformed_path(self):
        with pytest.raises(ValueError):
            load_scorer("math.fabs")

    def test_not_callable(self):
        with pytest.raises(TypeError):
            load_scorer("math:pi")
