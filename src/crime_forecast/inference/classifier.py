"""Trend direction, risk level and horizon confidence classification."""

from typing import Sequence

from ..api.schemas import RiskLevel, Trend
from ..models.base import HistoricalPoint

RECENT_WINDOW = 6

# Ratio thresholds of predicted count to recent average
TREND_UP = 1.1
TREND_DOWN = 0.9
RISK_CRITICAL = 1.5
RISK_HIGH = 1.2
RISK_MEDIUM = 0.8

CONFIDENCE_DECAY = 0.05
CONFIDENCE_FLOOR = 0.5


def recent_average(series: Sequence[HistoricalPoint], window: int = RECENT_WINDOW) -> float:
    """Sum of the last ``window`` counts divided by ``window``.

    Shorter series are still divided by the full window, so missing months
    count as zero. An empty series averages 0.
    """
    return sum(point.count for point in series[-window:]) / window


def classify_trend(predicted: float, recent_avg: float) -> Trend:
    """Direction of the prediction relative to the recent average."""
    if predicted > recent_avg * TREND_UP:
        return "increasing"
    if predicted < recent_avg * TREND_DOWN:
        return "decreasing"
    return "stable"


def classify_risk(predicted: float, recent_avg: float) -> RiskLevel:
    """Risk bucket of the prediction relative to the recent average."""
    if predicted > recent_avg * RISK_CRITICAL:
        return "critical"
    if predicted > recent_avg * RISK_HIGH:
        return "high"
    if predicted > recent_avg * RISK_MEDIUM:
        return "medium"
    return "low"


def classify(predicted: float, recent_avg: float) -> tuple[Trend, RiskLevel]:
    """Return (trend, risk level) for a prediction."""
    return classify_trend(predicted, recent_avg), classify_risk(predicted, recent_avg)


def horizon_confidence(base_confidence: float, month_offset: int) -> float:
    """Confidence for a forecast ``month_offset`` months out.

    Decreases by 0.05 per month and never drops below 0.5.
    """
    return max(CONFIDENCE_FLOOR, base_confidence - CONFIDENCE_DECAY * month_offset)
