"""Reliability scoring of forecasts from historical data quality."""

import logging
import math
from typing import Mapping, Sequence

import numpy as np

from ..api.schemas import ReliabilityMetrics
from ..config import RELIABILITY_THRESHOLDS
from ..models.base import HistoricalPoint

logger = logging.getLogger(__name__)

# Score weights; dashboards compare scores numerically, keep these fixed
SAMPLE_WEIGHT = 0.4
VARIANCE_WEIGHT = 0.3
TIME_SPAN_WEIGHT = 0.2
CONFIDENCE_WEIGHT = 0.2

# Normalising caps
SAMPLE_CAP = 50
VARIANCE_CAP = 2.0
TIME_SPAN_CAP = 3

SEASONAL_THRESHOLD = 0.1

EMPTY_RELIABILITY = ReliabilityMetrics(
    score=0.1,
    sample_size=0,
    historical_variance=1.0,
    confidence_interval=1.0,
    time_span_coverage=0,
    seasonal_pattern=False,
)


def calculate_reliability(
    history: Sequence[HistoricalPoint],
    precinct: int,
    crime_type: int,
    confidence: float,
) -> ReliabilityMetrics:
    """Score how much a forecast can be trusted given its historical data.

    Args:
        history: Full aggregated history; filtered here to the group
        precinct: Precinct of the forecast
        crime_type: Crime type of the forecast
        confidence: Stated confidence of the forecast

    Returns:
        ReliabilityMetrics with a 0-1 composite score
    """
    relevant = [
        point for point in history
        if point.precinct == precinct and point.crime_type == crime_type
    ]
    sample_size = len(relevant)

    if sample_size == 0:
        return EMPTY_RELIABILITY.model_copy()

    counts = np.array([point.count for point in relevant], dtype=float)
    mean = float(counts.mean())
    variance = float(counts.var())  # population variance
    normalized_variance = min(variance / (mean + 1), VARIANCE_CAP)

    time_span_coverage = len({point.year for point in relevant})
    seasonal_pattern = detect_seasonal_pattern(relevant)
    confidence_interval = min(math.sqrt(variance) / max(mean, 1), 1.0)

    score = (
        SAMPLE_WEIGHT * min(sample_size / SAMPLE_CAP, 1.0)
        + VARIANCE_WEIGHT * max(0.0, 1 - normalized_variance / VARIANCE_CAP)
        + TIME_SPAN_WEIGHT * min(time_span_coverage / TIME_SPAN_CAP, 1.0)
        + CONFIDENCE_WEIGHT * max(0.0, confidence - 0.5)
    )

    return ReliabilityMetrics(
        score=min(max(score, 0.0), 1.0),
        sample_size=sample_size,
        historical_variance=normalized_variance,
        confidence_interval=confidence_interval,
        time_span_coverage=time_span_coverage,
        seasonal_pattern=seasonal_pattern,
    )


def detect_seasonal_pattern(series: Sequence[HistoricalPoint]) -> bool:
    """True when the variance of the 12 monthly averages exceeds 10% of their mean.

    Months without data count as an average of zero.
    """
    totals = np.zeros(12)
    occurrences = np.zeros(12)
    for point in series:
        totals[point.month - 1] += point.count
        occurrences[point.month - 1] += 1

    monthly_averages = np.divide(
        totals, occurrences, out=np.zeros(12), where=occurrences > 0
    )
    overall = float(monthly_averages.mean())
    seasonal_variance = float(monthly_averages.var())

    return seasonal_variance > overall * SEASONAL_THRESHOLD


def reliability_tier(
    score: float,
    thresholds: Mapping[str, float] = RELIABILITY_THRESHOLDS,
) -> str:
    """Label a score with the first threshold it reaches, best first."""
    for tier, minimum in sorted(thresholds.items(), key=lambda item: -item[1]):
        if score >= minimum:
            return tier
    return "unreliable"
