"""
tests/conftest.py
-----------------
Shared builders for clusters, historical series and extended forecasts.
"""

import pytest

from crime_forecast.api.schemas import (
    Cluster,
    ClusterItem,
    ExtendedForecast,
    ReliabilityMetrics,
    TimeOfDayBreakdown,
)
from crime_forecast.cache import analysis_cache
from crime_forecast.models.base import HistoricalPoint


# ── Builders ──────────────────────────────────────────────────────

def item(
    year=2024,
    month=1,
    precinct=1,
    crime_type=2,
    time_of_day="14:00",
    latitude=14.40,
    longitude=121.04,
    case_id="C-1",
) -> ClusterItem:
    return ClusterItem(
        case_id=case_id,
        latitude=latitude,
        longitude=longitude,
        year=year,
        month=month,
        precinct=precinct,
        crime_type=crime_type,
        time_of_day=time_of_day,
    )


def cluster(cluster_id: int, items: list) -> Cluster:
    return Cluster(cluster_id=cluster_id, cluster_items=items, cluster_count=len(items))


def series(counts, precinct=1, crime_type=2, start_year=2023, start_month=1) -> list:
    """Consecutive monthly HistoricalPoints for the given counts."""
    points = []
    year, month = start_year, start_month
    for count in counts:
        points.append(HistoricalPoint(year, month, precinct, crime_type, count))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return points


def extended(
    score=0.5,
    sample_size=10,
    variance=0.5,
    year=2025,
    month=3,
    precinct=1,
    crime_type=2,
    risk="medium",
    confidence=0.9,
    primary="afternoon",
) -> ExtendedForecast:
    return ExtendedForecast(
        year=year,
        month=month,
        precinct=precinct,
        crime_type=crime_type,
        predicted_count=7,
        confidence=confidence,
        trend="stable",
        risk_level=risk,
        latitude=14.4,
        longitude=121.0,
        cluster_id=3,
        time_of_day_breakdown=TimeOfDayBreakdown(morning=1, afternoon=4, evening=2, night=0),
        primary_time_of_day=primary,
        reliability=ReliabilityMetrics(
            score=score,
            sample_size=sample_size,
            historical_variance=variance,
            confidence_interval=0.3,
            time_span_coverage=2,
            seasonal_pattern=False,
        ),
    )


# ── Fixtures ──────────────────────────────────────────────────────

@pytest.fixture
def sample_clusters() -> list:
    """Two clusters with two years of burglaries in precinct 1 and a few thefts in precinct 4."""
    burglary_a = []
    burglary_b = []
    for year in (2023, 2024):
        for month in range(1, 13):
            for n in range(month % 4 + 2):
                target = burglary_a if n % 3 else burglary_b
                target.append(item(
                    year=year,
                    month=month,
                    precinct=1,
                    crime_type=2,
                    time_of_day=f"{(8 + n * 5) % 24:02d}:15",
                    latitude=14.40 + n * 0.001,
                    longitude=121.04 + n * 0.001,
                    case_id=f"B-{year}-{month}-{n}",
                ))

    thefts = [
        item(year=2024, month=m, precinct=4, crime_type=18, time_of_day="Evening",
             latitude=14.38, longitude=121.05, case_id=f"T-{m}")
        for m in (10, 11, 12)
    ]

    return [cluster(1, burglary_a + thefts), cluster(2, burglary_b)]


@pytest.fixture(autouse=True)
def clear_analysis_cache():
    analysis_cache.clear()
    yield
    analysis_cache.clear()
