"""Weighted-recent (ARIMA-like) estimator."""

from typing import Optional, Sequence

import numpy as np

from .base import BaseEstimator, HistoricalPoint
from .linear import LinearEstimator

# Applied in order to the last six months, oldest first
WEIGHTS = (0.4, 0.25, 0.15, 0.1, 0.07, 0.03)
DEFAULT_WEIGHT = 0.01
MIN_POINTS = 4


class WeightedRecentEstimator(BaseEstimator):
    """Weighted moving average of the last six months.

    ``WEIGHTS`` are applied to the window in chronological order, so the
    oldest of the six months carries 0.4 and the newest 0.03.

    ``perturbation`` adds a uniform random walk term of up to
    ``+/- perturbation`` times the weighted mean. It is off by default; pass a
    ``seed`` to make perturbed forecasts reproducible.
    """

    name = "arima"
    description = "Weighted average of the last 6 months, weighted in chronological order"

    def __init__(self, perturbation: float = 0.0, seed: Optional[int] = None):
        self.perturbation = perturbation
        self.seed = seed
        self._rng = np.random.default_rng(seed)
        self._fallback = LinearEstimator()

    def _estimate(
        self,
        series: Sequence[HistoricalPoint],
        months_ahead: int,
        target_month: Optional[int],
    ) -> float:
        if len(series) < MIN_POINTS:
            return self._fallback.estimate(series, months_ahead)

        recent = [point.count for point in series[-len(WEIGHTS):]]
        weights = [
            WEIGHTS[i] if i < len(WEIGHTS) else DEFAULT_WEIGHT
            for i in range(len(recent))
        ]
        base_value = float(np.average(recent, weights=weights))

        if self.perturbation > 0:
            # Uniform in [-perturbation, +perturbation] of the base value
            base_value += (self._rng.random() - 0.5) * 2 * self.perturbation * base_value

        return base_value

    def get_params(self) -> dict:
        """Return model parameters."""
        return {"perturbation": self.perturbation, "seed": self.seed}
