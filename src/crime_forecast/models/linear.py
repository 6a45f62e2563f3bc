"""Linear regression trend estimator."""

from typing import Optional, Sequence

import numpy as np

from .base import BaseEstimator, HistoricalPoint

# Number of most recent months used for the fit
WINDOW = 12


class LinearEstimator(BaseEstimator):
    """Ordinary least squares fit of count against month index."""

    name = "linear"
    description = "Least-squares linear trend over the last 12 months"

    def __init__(self, window: int = WINDOW):
        self.window = window

    def _estimate(
        self,
        series: Sequence[HistoricalPoint],
        months_ahead: int,
        target_month: Optional[int],
    ) -> float:
        if len(series) < 2:
            return float(series[0].count) if series else 0.0

        recent = series[-self.window:]
        n = len(recent)

        # Index is 1-based so the intercept sits one step before the window
        x = np.arange(1, n + 1, dtype=float)
        y = np.array([point.count for point in recent], dtype=float)
        slope, intercept = np.polyfit(x, y, 1)

        return float(intercept + slope * (n + months_ahead))

    def get_params(self) -> dict:
        """Return model parameters."""
        return {"window": self.window}
