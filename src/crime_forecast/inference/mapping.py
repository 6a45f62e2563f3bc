"""Filtering and projection of extended forecasts for map display."""

from typing import Sequence

from ..api.schemas import (
    TIMES_OF_DAY,
    ExtendedForecast,
    MapFilters,
    MapPoint,
    MapSummary,
    QualityMetrics,
    RiskLevelDistribution,
    TimeOfDayBreakdown,
)

DEFAULT_MIN_RELIABILITY = 0.3
DEFAULT_MIN_SAMPLE_SIZE = 3
DEFAULT_MAX_VARIANCE = 1.5

# Score at or above which a forecast counts as reliable in quality metrics
RELIABLE_SCORE = 0.6


def filter_reliable_forecasts(
    forecasts: Sequence[ExtendedForecast],
    min_reliability: float = DEFAULT_MIN_RELIABILITY,
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
    max_variance: float = DEFAULT_MAX_VARIANCE,
) -> list[ExtendedForecast]:
    """Keep forecasts that pass the reliability, sample size and variance limits."""
    return [
        forecast for forecast in forecasts
        if forecast.reliability.score >= min_reliability
        and forecast.reliability.sample_size >= min_sample_size
        and forecast.reliability.historical_variance <= max_variance
    ]


def create_forecast_map_points(
    forecasts: Sequence[ExtendedForecast],
    min_reliability: float = DEFAULT_MIN_RELIABILITY,
) -> list[MapPoint]:
    """Project forecasts with a reliability score of at least ``min_reliability``.

    Only the reliability floor is applied here; combine with
    ``filter_reliable_forecasts`` for the sample size and variance limits.
    """
    return [
        MapPoint(
            id=map_point_id(forecast),
            latitude=forecast.latitude,
            longitude=forecast.longitude,
            risk=forecast.risk_level,
            predicted_count=forecast.predicted_count,
            confidence=forecast.confidence,
            reliability=forecast.reliability.score,
            precinct=forecast.precinct,
            crime_type=forecast.crime_type,
            time_of_day_breakdown=forecast.time_of_day_breakdown,
            primary_time_of_day=forecast.primary_time_of_day,
            forecast_period=f"{forecast.year}-{forecast.month:02d}",
            trend=forecast.trend,
        )
        for forecast in forecasts
        if forecast.reliability.score >= min_reliability
    ]


def map_point_id(forecast: ExtendedForecast) -> str:
    return f"{forecast.year}-{forecast.month}-{forecast.precinct}-{forecast.crime_type}"


def apply_map_filters(points: Sequence[MapPoint], filters: MapFilters) -> list[MapPoint]:
    """Apply the interactive map filters; empty id lists mean no restriction."""
    result = []
    for point in points:
        if not filters.min_reliability <= point.reliability <= filters.max_reliability:
            continue
        if not filters.min_confidence <= point.confidence <= filters.max_confidence:
            continue
        if point.risk not in filters.risk_levels:
            continue
        if point.primary_time_of_day not in filters.time_of_day:
            continue
        if filters.precincts and point.precinct not in filters.precincts:
            continue
        if filters.crime_types and point.crime_type not in filters.crime_types:
            continue
        if filters.forecast_periods and point.forecast_period not in filters.forecast_periods:
            continue
        result.append(point)
    return result


def summarize_map_points(points: Sequence[MapPoint]) -> MapSummary:
    """Summary statistics over (already filtered) map points."""
    total = len(points)
    time_of_day = dict.fromkeys(TIMES_OF_DAY, 0)
    risk_levels = RiskLevelDistribution()

    for point in points:
        for bucket in TIMES_OF_DAY:
            time_of_day[bucket] += getattr(point.time_of_day_breakdown, bucket)
        setattr(risk_levels, point.risk, getattr(risk_levels, point.risk) + 1)

    return MapSummary(
        total_points=total,
        average_reliability=sum(p.reliability for p in points) / total if total else 0.0,
        high_risk_points=sum(1 for p in points if p.risk in ("high", "critical")),
        filtered_points=total,
        time_of_day_distribution=TimeOfDayBreakdown(**time_of_day),
        risk_level_distribution=risk_levels,
        precinct_coverage=list(dict.fromkeys(p.precinct for p in points)),
        crime_type_coverage=list(dict.fromkeys(p.crime_type for p in points)),
    )


def calculate_quality_metrics(forecasts: Sequence[ExtendedForecast]) -> QualityMetrics:
    """Aggregate reliability statistics over a set of extended forecasts."""
    if not forecasts:
        return QualityMetrics()

    n = len(forecasts)
    reliable = sum(1 for f in forecasts if f.reliability.score >= RELIABLE_SCORE)

    return QualityMetrics(
        average_reliability=sum(f.reliability.score for f in forecasts) / n,
        average_sample_size=sum(f.reliability.sample_size for f in forecasts) / n,
        reliable_count=reliable,
        unreliable_count=n - reliable,
        seasonal_patterns_detected=sum(1 for f in forecasts if f.reliability.seasonal_pattern),
        time_span_coverage=sum(f.reliability.time_span_coverage for f in forecasts) / n,
    )
