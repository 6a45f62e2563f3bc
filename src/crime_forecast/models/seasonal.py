"""Seasonal-average estimator."""

from typing import Optional, Sequence

import numpy as np

from .base import BaseEstimator, HistoricalPoint
from .linear import LinearEstimator


class SeasonalEstimator(BaseEstimator):
    """Average of the target calendar month scaled by the recent linear trend."""

    name = "seasonal"
    description = "Historical average for the calendar month scaled by the recent trend"

    def __init__(self):
        self._trend = LinearEstimator()

    def _estimate(
        self,
        series: Sequence[HistoricalPoint],
        months_ahead: int,
        target_month: Optional[int],
    ) -> float:
        if not series:
            return 0.0

        if target_month is None:
            target_month = (series[-1].month - 1 + months_ahead) % 12 + 1

        same_month = [point.count for point in series if point.month == target_month]
        if not same_month:
            return float(np.mean([point.count for point in series]))

        seasonal_base = float(np.mean(same_month))

        # A zero last count is treated as one to keep the ratio finite
        last_count = series[-1].count or 1
        recent_trend = self._trend.estimate(series, 1) / last_count

        return seasonal_base * recent_trend
