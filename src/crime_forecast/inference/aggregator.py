"""Aggregation of raw incidents into monthly historical counts."""

import logging
from collections import defaultdict
from typing import Iterable, Optional, Sequence

import pandas as pd

from ..api.schemas import Cluster, ForecastParams
from ..models.base import HistoricalPoint

logger = logging.getLogger(__name__)

GROUP_KEY = ["year", "month", "precinct", "crime_type"]


def flatten_clusters(clusters: Iterable[Cluster]) -> list[dict]:
    """Turn clusters into flat incident records tagged with their cluster id."""
    records = []
    for cluster in clusters:
        for item in cluster.cluster_items:
            record = item.model_dump()
            record["cluster_id"] = cluster.cluster_id
            records.append(record)
    return records


def aggregate_history(
    items: Sequence[dict],
    params: Optional[ForecastParams] = None,
) -> list[HistoricalPoint]:
    """Collapse incidents into one point per (year, month, precinct, crime type).

    The first incident of a key supplies ``time_of_day`` and ``cluster_id``;
    later incidents only increment the count. Output is ordered by
    (year, month), keeping first-seen order within a month.

    Args:
        items: Incident records with year, month, precinct, crime_type,
            time_of_day and optionally cluster_id
        params: Optional forecast parameters whose precinct, crime type and
            time-of-day lists restrict which incidents are counted

    Returns:
        List of HistoricalPoint
    """
    if not items:
        return []

    df = pd.DataFrame(list(items))
    if "time_of_day" not in df.columns:
        df["time_of_day"] = ""
    if "cluster_id" not in df.columns:
        df["cluster_id"] = None

    if params is not None:
        df = _apply_filters(df, params)
        if df.empty:
            logger.info("No incidents left after applying forecast filters")
            return []

    grouped = (
        df.groupby(GROUP_KEY, sort=False)
        .agg(
            incidents=("time_of_day", "size"),
            time_of_day=("time_of_day", "first"),
            cluster_id=("cluster_id", "first"),
        )
        .reset_index()
        .sort_values(["year", "month"], kind="stable")
    )

    return [
        HistoricalPoint(
            year=int(row.year),
            month=int(row.month),
            precinct=int(row.precinct),
            crime_type=int(row.crime_type),
            count=int(row.incidents),
            time_of_day="" if pd.isna(row.time_of_day) else str(row.time_of_day),
            cluster_id=None if pd.isna(row.cluster_id) else int(row.cluster_id),
        )
        for row in grouped.itertuples(index=False)
    ]


def _apply_filters(df: pd.DataFrame, params: ForecastParams) -> pd.DataFrame:
    if params.precincts:
        df = df[df["precinct"].isin(params.precincts)]
    if params.crime_types:
        df = df[df["crime_type"].isin(params.crime_types)]
    if params.time_of_day:
        df = df[df["time_of_day"].isin(params.time_of_day)]
    return df


def group_history(
    history: Iterable[HistoricalPoint],
) -> dict[tuple[int, int], list[HistoricalPoint]]:
    """Split history into per-(precinct, crime type) series, preserving order."""
    groups: dict[tuple[int, int], list[HistoricalPoint]] = defaultdict(list)
    for point in history:
        groups[(point.precinct, point.crime_type)].append(point)
    return dict(groups)
