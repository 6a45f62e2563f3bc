"""API module for FastAPI routes and schemas.

Routes are imported from ``crime_forecast.api.routes`` directly so that the
schemas can be used by the inference layer without loading the web stack.
"""

from .schemas import (
    Cluster,
    ClusterItem,
    ErrorResponse,
    ExtendedForecast,
    ForecastParams,
    ForecastPrediction,
    ForecastRequest,
    HealthResponse,
    MapPoint,
    ModelsResponse,
    ReliabilityMetrics,
)

__all__ = [
    "Cluster",
    "ClusterItem",
    "ForecastParams",
    "ForecastRequest",
    "ForecastPrediction",
    "ExtendedForecast",
    "ReliabilityMetrics",
    "MapPoint",
    "HealthResponse",
    "ModelsResponse",
    "ErrorResponse",
]
