"""Trend estimators for crime forecasting."""

from .arima import WeightedRecentEstimator
from .base import BaseEstimator, HistoricalPoint
from .linear import LinearEstimator
from .polynomial import PolynomialEstimator
from .seasonal import SeasonalEstimator

__all__ = [
    "BaseEstimator",
    "HistoricalPoint",
    "LinearEstimator",
    "PolynomialEstimator",
    "SeasonalEstimator",
    "WeightedRecentEstimator",
]
