"""Tests for location and time-of-day enrichment."""

import pytest

from crime_forecast.api.schemas import ForecastPrediction, TimeOfDayBreakdown
from crime_forecast.config import DEFAULT_COORDINATES, PRECINCT_COORDINATES
from crime_forecast.inference.spatial import (
    Coordinates,
    StaticPrecinctLocator,
    analyze_time_of_day,
    categorize_time_of_day,
    enhance_forecast,
    get_geographic_coordinates,
    parse_hour,
    primary_time_of_day,
)

from conftest import cluster, item, series


class TestCoordinates:

    def test_cluster_with_most_matches_wins(self):
        clusters = [
            cluster(1, [item(latitude=10, longitude=20)]),
            cluster(2, [item(latitude=14, longitude=121), item(latitude=16, longitude=123)]),
        ]
        coords = get_geographic_coordinates(1, 2, clusters)
        assert coords == Coordinates(latitude=15, longitude=122, cluster_id=2)

    def test_centroid_ignores_non_matching_items(self):
        clusters = [cluster(3, [
            item(latitude=10, longitude=10),
            item(latitude=12, longitude=12),
            item(latitude=90, longitude=90, crime_type=5),
        ])]
        coords = get_geographic_coordinates(1, 2, clusters)
        assert (coords.latitude, coords.longitude) == (11, 11)

    def test_first_cluster_wins_ties(self):
        clusters = [
            cluster(7, [item(latitude=1, longitude=1)]),
            cluster(8, [item(latitude=2, longitude=2)]),
        ]
        assert get_geographic_coordinates(1, 2, clusters).cluster_id == 7

    def test_no_match_uses_precinct_table(self):
        clusters = [cluster(1, [item(precinct=5)])]
        coords = get_geographic_coordinates(3, 2, clusters)
        assert (coords.latitude, coords.longitude) == PRECINCT_COORDINATES[3]
        assert coords.cluster_id is None

    def test_unknown_precinct_uses_default(self):
        coords = get_geographic_coordinates(99, 2, [])
        assert (coords.latitude, coords.longitude) == DEFAULT_COORDINATES

    def test_custom_locator(self):
        locator = StaticPrecinctLocator(table={42: (1.5, 2.5)}, default=(0.0, 0.0))
        assert get_geographic_coordinates(42, 1, [], locator) == Coordinates(1.5, 2.5)
        assert get_geographic_coordinates(43, 1, [], locator) == Coordinates(0.0, 0.0)


class TestTimeOfDay:

    @pytest.mark.parametrize("text, hour", [
        ("14:30", 14),
        ("9 PM", 9),
        ("around 7am", 7),
        ("Morning", 8),
        ("late afternoon", 14),
        ("Evening", 20),
        ("midnight", 2),
        ("unknown", 12),
        ("", 12),
    ])
    def test_parse_hour(self, text, hour):
        assert parse_hour(text) == hour

    @pytest.mark.parametrize("hour, bucket", [
        (0, "night"),
        (5, "night"),
        (6, "morning"),
        (11, "morning"),
        (12, "afternoon"),
        (17, "afternoon"),
        (18, "evening"),
        (23, "evening"),
    ])
    def test_categorize(self, hour, bucket):
        assert categorize_time_of_day(hour) == bucket

    def test_breakdown_counts_matching_items_across_clusters(self):
        clusters = [
            cluster(1, [item(time_of_day="08:00"), item(time_of_day="20:00"), item(time_of_day="03:00")]),
            cluster(2, [item(time_of_day="Afternoon"), item(time_of_day="10:00"), item(time_of_day="09:00", precinct=9)]),
        ]
        breakdown = analyze_time_of_day(clusters, 1, 2)
        assert breakdown == TimeOfDayBreakdown(morning=2, afternoon=1, evening=1, night=1)

    def test_breakdown_without_matches_is_even(self):
        breakdown = analyze_time_of_day([cluster(1, [item(precinct=4)])], 1, 2)
        assert breakdown == TimeOfDayBreakdown(morning=1, afternoon=1, evening=1, night=1)

    def test_primary_is_largest_bucket(self):
        breakdown = TimeOfDayBreakdown(morning=1, afternoon=2, evening=5, night=0)
        assert primary_time_of_day(breakdown) == "evening"

    def test_primary_ties_prefer_earlier_bucket(self):
        assert primary_time_of_day(TimeOfDayBreakdown(morning=0, afternoon=3, evening=3, night=3)) == "afternoon"
        assert primary_time_of_day(TimeOfDayBreakdown(morning=1, afternoon=1, evening=1, night=1)) == "morning"


def test_enhance_forecast_carries_prediction_fields():
    forecast = ForecastPrediction(
        year=2025, month=2, precinct=1, crime_type=2,
        predicted_count=6, confidence=0.9, trend="increasing", risk_level="high",
    )
    clusters = [cluster(4, [item(time_of_day="19:00", latitude=14.0, longitude=121.0)])]

    enhanced = enhance_forecast(forecast, series([3, 4, 5]), clusters)

    assert enhanced.predicted_count == 6
    assert enhanced.risk_level == "high"
    assert enhanced.cluster_id == 4
    assert (enhanced.latitude, enhanced.longitude) == (14.0, 121.0)
    assert enhanced.primary_time_of_day == "evening"
    assert enhanced.reliability.sample_size == 3
