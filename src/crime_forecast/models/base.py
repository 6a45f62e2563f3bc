"""Base estimator interface for crime trend models."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class HistoricalPoint:
    """Monthly incident count for one precinct and crime type."""

    year: int
    month: int  # 1-12
    precinct: int
    crime_type: int
    count: int
    time_of_day: str = ""
    cluster_id: Optional[int] = None


class BaseEstimator(ABC):
    """Abstract base class for all trend estimators.

    Estimators are stateless: each call receives the historical series of a
    single (precinct, crime type) group, ordered oldest to newest.
    """

    name: str = "BaseEstimator"
    description: str = ""

    def estimate(
        self,
        series: Sequence[HistoricalPoint],
        months_ahead: int,
        target_month: Optional[int] = None,
    ) -> float:
        """Predict the count ``months_ahead`` months past the end of ``series``.

        The result is un-rounded and never negative.
        """
        return max(0.0, float(self._estimate(series, months_ahead, target_month)))

    @abstractmethod
    def _estimate(
        self,
        series: Sequence[HistoricalPoint],
        months_ahead: int,
        target_month: Optional[int],
    ) -> float:
        """Model-specific estimate, may be negative."""
        pass

    def get_params(self) -> dict:
        """Return model parameters."""
        return {}
