"""Tests for trend, risk and horizon confidence classification."""

import pytest

from crime_forecast.inference.classifier import (
    classify,
    classify_risk,
    classify_trend,
    horizon_confidence,
    recent_average,
)

from conftest import series

RISK_ORDER = ["low", "medium", "high", "critical"]


class TestRecentAverage:

    def test_uses_last_six_points(self):
        assert recent_average(series([100, 100, 1, 2, 3, 4, 5, 6])) == pytest.approx(3.5)

    def test_short_series_divides_by_full_window(self):
        assert recent_average(series([4, 8])) == pytest.approx(2)

    def test_three_point_ramp(self):
        assert recent_average(series([10, 12, 14])) == pytest.approx(6)

    def test_empty_series_is_zero(self):
        assert recent_average([]) == 0


class TestClassify:

    @pytest.mark.parametrize("predicted, expected", [
        (11.5, "increasing"),
        (11.0, "stable"),
        (9.0, "stable"),
        (8.9, "decreasing"),
    ])
    def test_trend_thresholds(self, predicted, expected):
        assert classify_trend(predicted, 10) == expected

    @pytest.mark.parametrize("predicted, expected", [
        (15.1, "critical"),
        (15.0, "high"),
        (12.1, "high"),
        (12.0, "medium"),
        (8.1, "medium"),
        (8.0, "low"),
        (0.0, "low"),
    ])
    def test_risk_thresholds(self, predicted, expected):
        assert classify_risk(predicted, 10) == expected

    def test_risk_is_monotonic_in_ratio(self):
        levels = [RISK_ORDER.index(classify_risk(ratio / 100, 1.0)) for ratio in range(0, 300)]
        assert levels == sorted(levels)

    def test_zero_average_with_positive_prediction(self):
        assert classify(3, 0) == ("increasing", "critical")

    def test_zero_average_with_zero_prediction(self):
        assert classify(0, 0) == ("stable", "low")


class TestHorizonConfidence:

    def test_first_month(self):
        assert horizon_confidence(0.95, 1) == pytest.approx(0.90)

    def test_decays_monotonically_with_floor(self):
        values = [horizon_confidence(0.95, offset) for offset in range(1, 13)]
        assert all(a >= b for a, b in zip(values, values[1:]))
        assert min(values) == 0.5
        assert values[0] > values[5]

    def test_never_below_floor(self):
        assert horizon_confidence(0.7, 12) == 0.5
