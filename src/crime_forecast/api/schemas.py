"""Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Trend = Literal["increasing", "decreasing", "stable"]
RiskLevel = Literal["low", "medium", "high", "critical"]
TimeOfDay = Literal["morning", "afternoon", "evening", "night"]

RISK_LEVELS: tuple[RiskLevel, ...] = ("low", "medium", "high", "critical")
TIMES_OF_DAY: tuple[TimeOfDay, ...] = ("morning", "afternoon", "evening", "night")

MIN_FORECAST_PERIOD = 1
MAX_FORECAST_PERIOD = 12


class CamelModel(BaseModel):
    """Base model serialised with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Input: cluster data ──


class ClusterItem(CamelModel):
    """Single incident inside a cluster."""

    case_id: Union[str, int] = Field(description="Incident case identifier")
    latitude: float = Field(description="Incident latitude")
    longitude: float = Field(description="Incident longitude")
    year: int = Field(description="Incident year")
    month: int = Field(ge=1, le=12, description="Incident month (1-12)")
    precinct: int = Field(description="Precinct code")
    crime_type: int = Field(description="Crime type code")
    time_of_day: str = Field(default="", description="Time of day, e.g. '14:30' or 'Evening'")


class Cluster(CamelModel):
    """Group of incidents produced by the clustering step."""

    cluster_id: int = Field(description="Cluster identifier")
    cluster_items: list[ClusterItem] = Field(default_factory=list, description="Incidents in the cluster")
    cluster_count: int = Field(default=0, description="Number of incidents in the cluster")


# ── Forecast configuration ──


class ForecastParams(CamelModel):
    """User-supplied forecast configuration."""

    forecast_period: int = Field(
        default=6,
        description="Months to forecast, clamped to 1-12",
    )
    model: str = Field(
        default="linear",
        description="Estimator: linear, polynomial, seasonal or arima (unknown values use linear)",
    )
    confidence: float = Field(
        default=0.95,
        ge=0.7,
        le=0.99,
        description="Base confidence level for the first forecast month",
    )
    include_seasonality: bool = Field(default=True, description="Forwarded to the remote forecaster")
    weight_recent_data: bool = Field(default=True, description="Forwarded to the remote forecaster")
    precincts: list[int] = Field(default_factory=list, description="Only use these precincts (empty = all)")
    crime_types: list[int] = Field(default_factory=list, description="Only use these crime types (empty = all)")
    time_of_day: list[str] = Field(default_factory=list, description="Only use these time-of-day values (empty = all)")

    @field_validator("forecast_period")
    @classmethod
    def clamp_forecast_period(cls, value: int) -> int:
        return min(max(value, MIN_FORECAST_PERIOD), MAX_FORECAST_PERIOD)


class ForecastRequest(CamelModel):
    """Request body for forecast endpoints."""

    cluster_data: Optional[list[Cluster]] = Field(
        default=None,
        description="Cluster data; the last stored analysis is used when omitted",
    )
    params: ForecastParams = Field(default_factory=ForecastParams, description="Forecast configuration")


# ── Output: predictions ──


class ForecastPrediction(CamelModel):
    """Predicted incident count for one precinct, crime type and month."""

    year: int
    month: int
    precinct: int
    crime_type: int
    predicted_count: int = Field(ge=0, description="Rounded predicted count")
    confidence: float = Field(ge=0, le=1, description="Confidence for this horizon")
    trend: Trend
    risk_level: RiskLevel


class ReliabilityMetrics(CamelModel):
    """Data quality metrics behind a forecast."""

    score: float = Field(ge=0, le=1, description="Composite reliability score")
    sample_size: int = Field(ge=0, description="Historical data points used")
    historical_variance: float = Field(ge=0, description="Variance normalised by the mean")
    confidence_interval: float = Field(ge=0, le=1, description="Relative width of the confidence interval")
    time_span_coverage: int = Field(ge=0, description="Distinct years of history")
    seasonal_pattern: bool = Field(description="Whether monthly averages vary seasonally")


class TimeOfDayBreakdown(CamelModel):
    """Incident counts per time-of-day bucket."""

    morning: int = 0
    afternoon: int = 0
    evening: int = 0
    night: int = 0


class ExtendedForecast(ForecastPrediction):
    """Forecast enriched with location, time-of-day and reliability data."""

    latitude: float
    longitude: float
    cluster_id: Optional[int] = None
    time_of_day_breakdown: TimeOfDayBreakdown
    primary_time_of_day: TimeOfDay
    reliability: ReliabilityMetrics


class MapPoint(CamelModel):
    """Forecast projected for map display."""

    id: str = Field(description="Stable id: year-month-precinct-crimeType")
    latitude: float
    longitude: float
    risk: RiskLevel
    predicted_count: int
    confidence: float
    reliability: float
    precinct: int
    crime_type: int
    time_of_day_breakdown: TimeOfDayBreakdown
    primary_time_of_day: TimeOfDay
    forecast_period: str = Field(description="Forecast month in YYYY-MM format")
    trend: Trend


class MapFilters(CamelModel):
    """Interactive filters applied to map points."""

    min_reliability: float = 0.3
    max_reliability: float = 1.0
    min_confidence: float = 0.5
    max_confidence: float = 1.0
    risk_levels: list[RiskLevel] = Field(default_factory=lambda: list(RISK_LEVELS))
    time_of_day: list[TimeOfDay] = Field(default_factory=lambda: list(TIMES_OF_DAY))
    precincts: list[int] = Field(default_factory=list)
    crime_types: list[int] = Field(default_factory=list)
    forecast_periods: list[str] = Field(default_factory=list)


class RiskLevelDistribution(CamelModel):
    """Counts per risk level."""

    low: int = 0
    medium: int = 0
    high: int = 0
    critical: int = 0


class TrendDistribution(CamelModel):
    """Counts per trend direction."""

    increasing: int = 0
    decreasing: int = 0
    stable: int = 0


class MapSummary(CamelModel):
    """Summary statistics over a set of map points."""

    total_points: int
    average_reliability: float
    high_risk_points: int
    filtered_points: int
    time_of_day_distribution: TimeOfDayBreakdown
    risk_level_distribution: RiskLevelDistribution
    precinct_coverage: list[int]
    crime_type_coverage: list[int]


class QualityMetrics(CamelModel):
    """Aggregate reliability statistics over extended forecasts."""

    average_reliability: float = 0.0
    average_sample_size: float = 0.0
    reliable_count: int = 0
    unreliable_count: int = 0
    seasonal_patterns_detected: int = 0
    time_span_coverage: float = 0.0


class PrecinctRisk(CamelModel):
    """Predicted totals and high-risk counts for one precinct."""

    precinct: int
    name: str
    total: int
    high: int
    critical: int


class CrimeTypeTotal(CamelModel):
    """Predicted totals for one crime type."""

    crime_type: int
    name: str
    predicted: int
    avg_per_month: int


class ForecastSummary(CamelModel):
    """Overview of a forecast run."""

    total_predicted: int
    average_confidence: float
    trends: TrendDistribution
    risk_levels: RiskLevelDistribution
    top_risk_precincts: list[PrecinctRisk]
    top_crime_types: list[CrimeTypeTotal]
    monthly_totals: dict[str, int]


class ForecastMetadata(CamelModel):
    """Metadata about a forecast run."""

    source: Literal["remote", "local"] = Field(description="Which forecaster produced the predictions")
    model: str = Field(description="Estimator used")
    model_params: dict = Field(default_factory=dict, description="Estimator parameters")
    forecast_period: int = Field(description="Months forecast")
    historical_points: int = Field(description="Aggregated historical points used")
    groups: int = Field(description="Number of (precinct, crime type) groups")
    generated_at: datetime = Field(description="Timestamp of forecast generation")


class ForecastResponse(CamelModel):
    """Response from the forecast endpoint."""

    predictions: list[ForecastPrediction]
    metadata: ForecastMetadata


class ExtendedForecastResponse(CamelModel):
    """Response from the extended forecast endpoint."""

    forecasts: list[ExtendedForecast]
    quality: QualityMetrics
    metadata: ForecastMetadata


class MapRequest(ForecastRequest):
    """Request body for the map endpoint."""

    min_reliability: float = Field(default=0.3, ge=0, le=1)
    min_sample_size: int = Field(default=3, ge=0)
    max_variance: float = Field(default=1.5, ge=0)
    filters: Optional[MapFilters] = Field(default=None, description="Optional interactive filters")


class MapResponse(CamelModel):
    """Response from the map endpoint."""

    points: list[MapPoint]
    summary: MapSummary
    metadata: ForecastMetadata


class SummaryResponse(CamelModel):
    """Response from the summary endpoint."""

    summary: ForecastSummary
    metadata: ForecastMetadata


# ── Service endpoints ──


class AnalysisRequest(CamelModel):
    """Cluster data stored as the latest analysis."""

    cluster_data: list[Cluster]


class AnalysisResponse(CamelModel):
    """Acknowledgement of stored analysis data."""

    clusters: int
    items: int
    stored_at: datetime


class EstimatorInfo(CamelModel):
    """Information about an available estimator."""

    name: str
    description: str
    model_params: dict
    is_default: bool


class ModelsResponse(CamelModel):
    """Response listing available estimators."""

    models: list[EstimatorInfo]
    total: int


class HealthResponse(CamelModel):
    """Health check response."""

    status: str = Field(description="Service status")
    estimators_available: int = Field(description="Number of registered estimators")
    remote_configured: bool = Field(description="Whether a remote forecaster is configured")
    uptime_seconds: float = Field(description="Service uptime in seconds")


class LookupsResponse(CamelModel):
    """Display lookup tables."""

    precincts: dict[int, str]
    crime_types: dict[int, str]
    risk_colors: dict[str, str]
    time_of_day_colors: dict[str, str]
    reliability_thresholds: dict[str, float]


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error info")


# ── Remote forecaster wire format ──


class RemoteForecastRequest(CamelModel):
    """Payload sent to the remote statistical forecaster."""

    cluster_data: list[Cluster]
    horizon: int
    confidence_level: float
    model_type: str
    include_seasonality: bool
    weight_recent_data: bool


class RemoteForecastPoint(CamelModel):
    """Single forecast value returned by the remote forecaster."""

    timestamp: datetime
    forecast: float = Field(allow_inf_nan=False, description="Predicted count")
    confidence: float = Field(allow_inf_nan=False, description="Forecast confidence")
    trend: Trend
    risk_level: RiskLevel


class RemoteSeries(CamelModel):
    """Forecast series for one precinct and crime type."""

    precinct: int
    crime_type: int
    forecasts: list[RemoteForecastPoint]


class RemoteForecastResponse(CamelModel):
    """Response expected from the remote forecaster."""

    series: list[RemoteSeries]
