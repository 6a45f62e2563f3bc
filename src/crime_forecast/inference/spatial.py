"""Spatial and time-of-day enrichment of forecasts."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..api.schemas import (
    TIMES_OF_DAY,
    Cluster,
    ClusterItem,
    ExtendedForecast,
    ForecastPrediction,
    TimeOfDay,
    TimeOfDayBreakdown,
)
from ..config import DEFAULT_COORDINATES, PRECINCT_COORDINATES
from ..models.base import HistoricalPoint
from .reliability import calculate_reliability

logger = logging.getLogger(__name__)

HOUR_PATTERN = re.compile(r"(\d{1,2})")
DEFAULT_HOUR = 12

# Checked in order; the first matching keyword wins
NAMED_PERIOD_HOURS = (
    (("morning", "dawn"), 8),
    (("afternoon", "noon"), 14),
    (("evening", "dusk"), 20),
    (("night", "midnight"), 2),
)


@dataclass(frozen=True)
class Coordinates:
    """Representative location of a forecast."""

    latitude: float
    longitude: float
    cluster_id: Optional[int] = None


class PrecinctLocator(Protocol):
    """Resolves a precinct id to a representative location."""

    def lookup(self, precinct: int) -> Coordinates:
        """Return coordinates for ``precinct``, falling back to a default on a miss."""
        ...


class StaticPrecinctLocator:
    """Precinct locator backed by a fixed coordinate table."""

    def __init__(
        self,
        table: Mapping[int, tuple[float, float]] = PRECINCT_COORDINATES,
        default: tuple[float, float] = DEFAULT_COORDINATES,
    ):
        self.table = table
        self.default = default

    def lookup(self, precinct: int) -> Coordinates:
        latitude, longitude = self.table.get(precinct, self.default)
        return Coordinates(latitude=latitude, longitude=longitude)


def _matches(item: ClusterItem, precinct: int, crime_type: int) -> bool:
    return item.precinct == precinct and item.crime_type == crime_type


def get_geographic_coordinates(
    precinct: int,
    crime_type: int,
    clusters: Sequence[Cluster],
    locator: Optional[PrecinctLocator] = None,
) -> Coordinates:
    """Locate a forecast at the centroid of its best-matching cluster.

    The cluster with the most items matching both precinct and crime type is
    chosen (the first one on ties) and the centroid of just those items is
    returned. Without any match the precinct locator is used.
    """
    best_cluster = None
    best_items: list[ClusterItem] = []
    for cluster in clusters:
        matching = [item for item in cluster.cluster_items if _matches(item, precinct, crime_type)]
        if len(matching) > len(best_items):
            best_cluster, best_items = cluster, matching

    if best_cluster is not None:
        return Coordinates(
            latitude=sum(item.latitude for item in best_items) / len(best_items),
            longitude=sum(item.longitude for item in best_items) / len(best_items),
            cluster_id=best_cluster.cluster_id,
        )

    locator = locator or StaticPrecinctLocator()
    return locator.lookup(precinct)


def parse_hour(time_of_day: str) -> int:
    """Extract an hour from a time string such as '14:30', '9 PM' or 'Evening'."""
    if not time_of_day:
        return DEFAULT_HOUR

    match = HOUR_PATTERN.search(time_of_day)
    if match:
        return int(match.group(1))

    lowered = time_of_day.lower()
    for keywords, hour in NAMED_PERIOD_HOURS:
        if any(keyword in lowered for keyword in keywords):
            return hour
    return DEFAULT_HOUR


def categorize_time_of_day(hour: int) -> TimeOfDay:
    """Bucket an hour into morning, afternoon, evening or night."""
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 18:
        return "afternoon"
    if 18 <= hour < 24:
        return "evening"
    return "night"


def analyze_time_of_day(
    clusters: Iterable[Cluster],
    precinct: int,
    crime_type: int,
) -> TimeOfDayBreakdown:
    """Count matching incidents across all clusters per time-of-day bucket.

    Returns an even {1, 1, 1, 1} breakdown when nothing matches.
    """
    buckets = dict.fromkeys(TIMES_OF_DAY, 0)
    for cluster in clusters:
        for item in cluster.cluster_items:
            if _matches(item, precinct, crime_type):
                buckets[categorize_time_of_day(parse_hour(item.time_of_day))] += 1

    if sum(buckets.values()) == 0:
        return TimeOfDayBreakdown(morning=1, afternoon=1, evening=1, night=1)
    return TimeOfDayBreakdown(**buckets)


def primary_time_of_day(breakdown: TimeOfDayBreakdown) -> TimeOfDay:
    """Bucket with the highest count; ties go to the earlier bucket in the day."""
    # max() keeps the first maximum, TIMES_OF_DAY runs morning to night
    return max(TIMES_OF_DAY, key=lambda bucket: getattr(breakdown, bucket))


def enhance_forecast(
    forecast: ForecastPrediction,
    history: Sequence[HistoricalPoint],
    clusters: Sequence[Cluster],
    locator: Optional[PrecinctLocator] = None,
) -> ExtendedForecast:
    """Attach reliability, time-of-day and location data to a forecast."""
    reliability = calculate_reliability(
        history, forecast.precinct, forecast.crime_type, forecast.confidence
    )
    breakdown = analyze_time_of_day(clusters, forecast.precinct, forecast.crime_type)
    coordinates = get_geographic_coordinates(
        forecast.precinct, forecast.crime_type, clusters, locator
    )

    return ExtendedForecast(
        **forecast.model_dump(),
        latitude=coordinates.latitude,
        longitude=coordinates.longitude,
        cluster_id=coordinates.cluster_id,
        time_of_day_breakdown=breakdown,
        primary_time_of_day=primary_time_of_day(breakdown),
        reliability=reliability,
    )
