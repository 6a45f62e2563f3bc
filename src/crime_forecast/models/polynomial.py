"""Quadratic (polynomial) trend estimator."""

from typing import Optional, Sequence

from .base import BaseEstimator, HistoricalPoint
from .linear import LinearEstimator

BUCKET_SIZE = 3


class PolynomialEstimator(BaseEstimator):
    """Second-order extrapolation from three consecutive 3-month buckets.

    The last nine months are split into ``older``, ``middle`` and ``recent``
    buckets. Each bucket is averaged over its three slots, so a short series
    contributes zeros for the slots it does not have.
    """

    name = "polynomial"
    description = "Quadratic extrapolation from velocity and acceleration of 3-month buckets"

    def __init__(self):
        self._fallback = LinearEstimator()

    def _estimate(
        self,
        series: Sequence[HistoricalPoint],
        months_ahead: int,
        target_month: Optional[int],
    ) -> float:
        if len(series) < 3:
            return self._fallback.estimate(series, months_ahead)

        counts = [point.count for point in series[-3 * BUCKET_SIZE:]]
        recent = _bucket_mean(counts[-BUCKET_SIZE:])
        middle = _bucket_mean(counts[-2 * BUCKET_SIZE:-BUCKET_SIZE])
        older = _bucket_mean(counts[-3 * BUCKET_SIZE:-2 * BUCKET_SIZE])

        acceleration = (recent - 2 * middle + older) / 2
        velocity = recent - middle
        h = months_ahead

        return max(0.0, recent + velocity * h + 0.5 * acceleration * h * h)


def _bucket_mean(counts: list[int]) -> float:
    return sum(counts) / BUCKET_SIZE
