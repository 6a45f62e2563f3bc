"""Forecast service: aggregation, estimation, classification and enrichment."""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

import pandas as pd

from ..api.schemas import (
    Cluster,
    CrimeTypeTotal,
    ExtendedForecast,
    ForecastMetadata,
    ForecastParams,
    ForecastPrediction,
    ForecastSummary,
    PrecinctRisk,
    RemoteForecastRequest,
    RemoteForecastResponse,
    RiskLevelDistribution,
    TrendDistribution,
)
from ..config import DEFAULT_LOOKUPS, LookupTables
from ..data.remote import RemoteForecastClient, RemoteForecastError
from ..models.base import HistoricalPoint
from .aggregator import aggregate_history, flatten_clusters, group_history
from .classifier import classify, horizon_confidence, recent_average
from .loader import EstimatorRegistry
from .spatial import PrecinctLocator, enhance_forecast

logger = logging.getLogger(__name__)

TOP_N = 5


@dataclass
class ForecastRun:
    """Result of one forecast run."""

    predictions: list[ForecastPrediction]
    history: list[HistoricalPoint]
    source: str
    model: str
    params: ForecastParams
    model_params: dict = field(default_factory=dict)
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def groups(self) -> int:
        return len({(p.precinct, p.crime_type) for p in self.history})

    def metadata(self) -> ForecastMetadata:
        return ForecastMetadata(
            source=self.source,
            model=self.model,
            model_params=self.model_params,
            forecast_period=self.params.forecast_period,
            historical_points=len(self.history),
            groups=self.groups,
            generated_at=self.generated_at,
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _sort_key(prediction: ForecastPrediction) -> tuple[int, int]:
    return prediction.year, prediction.month


class ForecastService:
    """Service for generating crime forecasts from cluster data."""

    def __init__(
        self,
        registry: EstimatorRegistry,
        remote_client: Optional[RemoteForecastClient] = None,
        locator: Optional[PrecinctLocator] = None,
        lookups: LookupTables = DEFAULT_LOOKUPS,
    ):
        self.registry = registry
        self.remote_client = remote_client
        self.locator = locator
        self.lookups = lookups

    def build_history(
        self, clusters: Sequence[Cluster], params: ForecastParams
    ) -> list[HistoricalPoint]:
        """Aggregate cluster items into monthly historical points."""
        return aggregate_history(flatten_clusters(clusters), params)

    def predict_local(
        self,
        history: Sequence[HistoricalPoint],
        params: ForecastParams,
        base_date: Optional[pd.Timestamp] = None,
    ) -> list[ForecastPrediction]:
        """Generate predictions with the local heuristic estimators.

        Args:
            history: Aggregated history ordered by (year, month)
            params: Forecast configuration
            base_date: Month the forecast horizon counts from (default: now)

        Returns:
            One prediction per (precinct, crime type) group and forecast month,
            ordered by (year, month)
        """
        estimator = self.registry.get_estimator(params.model)
        base = (base_date if base_date is not None else pd.Timestamp.now()).normalize()

        predictions = []
        for (precinct, crime_type), series in group_history(history).items():
            recent_avg = recent_average(series)

            for month_offset in range(1, params.forecast_period + 1):
                forecast_date = base + pd.DateOffset(months=month_offset)
                predicted = estimator.estimate(
                    series, month_offset, target_month=forecast_date.month
                )
                trend, risk_level = classify(predicted, recent_avg)

                predictions.append(
                    ForecastPrediction(
                        year=forecast_date.year,
                        month=forecast_date.month,
                        precinct=precinct,
                        crime_type=crime_type,
                        predicted_count=max(0, _round_half_up(predicted)),
                        confidence=horizon_confidence(params.confidence, month_offset),
                        trend=trend,
                        risk_level=risk_level,
                    )
                )

        return sorted(predictions, key=_sort_key)

    async def predict(
        self,
        clusters: Sequence[Cluster],
        params: ForecastParams,
        base_date: Optional[pd.Timestamp] = None,
    ) -> ForecastRun:
        """Generate predictions, preferring the remote forecaster when configured.

        Any remote failure is logged and the local estimators are used instead.
        """
        history = self.build_history(clusters, params)
        model_name = self.registry.resolve_name(params.model)

        if self.remote_client is not None:
            remote = await self._predict_remote(clusters, params)
            if remote is not None:
                return ForecastRun(
                    predictions=remote,
                    history=history,
                    source="remote",
                    model=params.model,
                    params=params,
                )

        estimator = self.registry.get_estimator(model_name)
        predictions = self.predict_local(history, params, base_date)
        logger.info(
            f"Generated {len(predictions)} local predictions with {model_name} "
            f"from {len(history)} historical points"
        )
        return ForecastRun(
            predictions=predictions,
            history=history,
            source="local",
            model=model_name,
            params=params,
            model_params=estimator.get_params(),
        )

    async def _predict_remote(
        self, clusters: Sequence[Cluster], params: ForecastParams
    ) -> Optional[list[ForecastPrediction]]:
        request = RemoteForecastRequest(
            cluster_data=list(clusters),
            horizon=params.forecast_period,
            confidence_level=params.confidence,
            model_type=params.model,
            include_seasonality=params.include_seasonality,
            weight_recent_data=params.weight_recent_data,
        )

        try:
            response = await self.remote_client.fetch_forecast(request)
        except RemoteForecastError as e:
            logger.warning(f"{e}; falling back to local estimators")
            return None

        try:
            predictions = self._convert_remote(response)
        except ValueError as e:
            logger.warning(f"Remote forecaster returned unusable values: {e}; falling back to local estimators")
            return None

        if not predictions:
            logger.warning("Remote forecaster returned no forecasts; falling back to local estimators")
            return None

        logger.info(f"Received {len(predictions)} predictions from remote forecaster")
        return predictions

    @staticmethod
    def _convert_remote(response: RemoteForecastResponse) -> list[ForecastPrediction]:
        predictions = []
        for series in response.series:
            for point in series.forecasts:
                predictions.append(
                    ForecastPrediction(
                        year=point.timestamp.year,
                        month=point.timestamp.month,
                        precinct=series.precinct,
                        crime_type=series.crime_type,
                        predicted_count=max(0, _round_half_up(point.forecast)),
                        confidence=min(max(point.confidence, 0.0), 1.0),
                        trend=point.trend,
                        risk_level=point.risk_level,
                    )
                )
        return sorted(predictions, key=_sort_key)

    def extend(
        self,
        run: ForecastRun,
        clusters: Sequence[Cluster],
    ) -> list[ExtendedForecast]:
        """Enrich every prediction of a run with location and reliability data."""
        return [
            enhance_forecast(prediction, run.history, clusters, self.locator)
            for prediction in run.predictions
        ]

    def summarize(
        self,
        predictions: Sequence[ForecastPrediction],
        forecast_period: int,
    ) -> ForecastSummary:
        """Totals, distributions and top precincts/crime types of a forecast."""
        trends = TrendDistribution()
        risk_levels = RiskLevelDistribution()
        precinct_stats: dict[int, dict[str, int]] = defaultdict(
            lambda: {"total": 0, "high": 0, "critical": 0}
        )
        crime_totals: dict[int, int] = defaultdict(int)
        monthly_totals: dict[str, int] = defaultdict(int)

        for p in predictions:
            setattr(trends, p.trend, getattr(trends, p.trend) + 1)
            setattr(risk_levels, p.risk_level, getattr(risk_levels, p.risk_level) + 1)

            stats = precinct_stats[p.precinct]
            stats["total"] += p.predicted_count
            if p.risk_level in ("high", "critical"):
                stats[p.risk_level] += 1

            crime_totals[p.crime_type] += p.predicted_count
            monthly_totals[f"{p.year}-{p.month:02d}"] += p.predicted_count

        top_precincts = sorted(
            precinct_stats.items(),
            key=lambda item: item[1]["high"] + item[1]["critical"],
            reverse=True,
        )[:TOP_N]
        top_crimes = sorted(crime_totals.items(), key=lambda item: item[1], reverse=True)[:TOP_N]

        return ForecastSummary(
            total_predicted=sum(p.predicted_count for p in predictions),
            average_confidence=(
                sum(p.confidence for p in predictions) / len(predictions) if predictions else 0.0
            ),
            trends=trends,
            risk_levels=risk_levels,
            top_risk_precincts=[
                PrecinctRisk(precinct=precinct, name=self.lookups.precinct_name(precinct), **stats)
                for precinct, stats in top_precincts
            ],
            top_crime_types=[
                CrimeTypeTotal(
                    crime_type=crime_type,
                    name=self.lookups.crime_type_name(crime_type),
                    predicted=total,
                    avg_per_month=_round_half_up(total / max(forecast_period, 1)),
                )
                for crime_type, total in top_crimes
            ],
            monthly_totals=dict(sorted(monthly_totals.items())),
        )
