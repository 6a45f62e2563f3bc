"""API routes for the crime forecast service."""

import logging
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..cache import AnalysisCache, analysis_cache
from ..inference import EstimatorRegistry
from ..inference.export import export_csv
from ..inference.mapping import (
    apply_map_filters,
    calculate_quality_metrics,
    create_forecast_map_points,
    filter_reliable_forecasts,
    summarize_map_points,
)
from ..inference.predictor import ForecastRun, ForecastService
from .schemas import (
    AnalysisRequest,
    AnalysisResponse,
    Cluster,
    ErrorResponse,
    EstimatorInfo,
    ExtendedForecastResponse,
    ForecastRequest,
    ForecastResponse,
    HealthResponse,
    LookupsResponse,
    MapRequest,
    MapResponse,
    ModelsResponse,
    SummaryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

FORECAST_ERRORS = {
    400: {"model": ErrorResponse, "description": "No cluster data available"},
    500: {"model": ErrorResponse, "description": "Forecast generation failed"},
}

# Global instances (set during app startup)
_registry: EstimatorRegistry | None = None
_forecast_service: ForecastService | None = None
_cache: AnalysisCache = analysis_cache
_start_time: datetime | None = None


def init_services(
    registry: EstimatorRegistry,
    forecast_service: ForecastService,
    start_time: datetime,
    cache: Optional[AnalysisCache] = None,
):
    """Initialize the router with service instances."""
    global _registry, _forecast_service, _cache, _start_time
    _registry = registry
    _forecast_service = forecast_service
    _start_time = start_time
    if cache is not None:
        _cache = cache


def get_registry() -> EstimatorRegistry:
    """Dependency to get the estimator registry."""
    if _registry is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _registry


def get_forecast_service() -> ForecastService:
    """Dependency to get forecast service."""
    if _forecast_service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _forecast_service


def get_analysis_cache() -> AnalysisCache:
    """Dependency to get the analysis cache."""
    return _cache


def _resolve_clusters(request: ForecastRequest, cache: AnalysisCache) -> list[Cluster]:
    if request.cluster_data is not None:
        return request.cluster_data

    cached = cache.load()
    if cached is None:
        raise HTTPException(
            status_code=400,
            detail="No cluster data supplied and no analysis has been stored",
        )
    return cached


async def _run_forecast(
    service: ForecastService, clusters: list[Cluster], request: ForecastRequest
) -> ForecastRun:
    try:
        return await service.predict(clusters, request.params)
    except Exception:
        logger.exception("Forecast generation failed")
        raise HTTPException(status_code=500, detail="Forecast generation failed")


@router.get("/health", response_model=HealthResponse)
async def health_check(
    registry: Annotated[EstimatorRegistry, Depends(get_registry)],
    service: Annotated[ForecastService, Depends(get_forecast_service)],
) -> HealthResponse:
    """Check service health and estimator status."""
    uptime = (datetime.now() - _start_time).total_seconds() if _start_time else 0

    return HealthResponse(
        status="healthy" if registry.model_count > 0 else "degraded",
        estimators_available=registry.model_count,
        remote_configured=service.remote_client is not None,
        uptime_seconds=uptime,
    )


@router.get("/models", response_model=ModelsResponse)
async def list_models(
    registry: Annotated[EstimatorRegistry, Depends(get_registry)],
) -> ModelsResponse:
    """List the available forecasting models."""
    models = [
        EstimatorInfo(
            name=info["name"],
            description=info["description"],
            model_params=info["params"],
            is_default=info["is_default"],
        )
        for info in registry.list_models()
    ]
    return ModelsResponse(models=models, total=len(models))


@router.get("/lookups", response_model=LookupsResponse)
async def get_lookups(
    service: Annotated[ForecastService, Depends(get_forecast_service)],
) -> LookupsResponse:
    """Precinct and crime type names plus display colors and thresholds."""
    lookups = service.lookups
    return LookupsResponse(
        precincts=dict(lookups.precinct_names),
        crime_types=dict(lookups.crime_type_names),
        risk_colors=dict(lookups.risk_colors),
        time_of_day_colors=dict(lookups.time_of_day_colors),
        reliability_thresholds=dict(lookups.reliability_thresholds),
    )


@router.post("/analysis", response_model=AnalysisResponse)
async def store_analysis(
    request: AnalysisRequest,
    cache: Annotated[AnalysisCache, Depends(get_analysis_cache)],
) -> AnalysisResponse:
    """Store cluster data as the latest analysis for later forecasts."""
    stored_at = cache.store(request.cluster_data)
    return AnalysisResponse(
        clusters=len(request.cluster_data),
        items=sum(len(c.cluster_items) for c in request.cluster_data),
        stored_at=stored_at,
    )


@router.post("/forecast", response_model=ForecastResponse, responses=FORECAST_ERRORS)
async def forecast(
    request: ForecastRequest,
    service: Annotated[ForecastService, Depends(get_forecast_service)],
    cache: Annotated[AnalysisCache, Depends(get_analysis_cache)],
) -> ForecastResponse:
    """Generate monthly predictions per precinct and crime type."""
    clusters = _resolve_clusters(request, cache)
    run = await _run_forecast(service, clusters, request)
    return ForecastResponse(predictions=run.predictions, metadata=run.metadata())


@router.post(
    "/forecast/extended",
    response_model=ExtendedForecastResponse,
    responses=FORECAST_ERRORS,
)
async def forecast_extended(
    request: ForecastRequest,
    service: Annotated[ForecastService, Depends(get_forecast_service)],
    cache: Annotated[AnalysisCache, Depends(get_analysis_cache)],
) -> ExtendedForecastResponse:
    """Generate predictions enriched with location, time-of-day and reliability."""
    clusters = _resolve_clusters(request, cache)
    run = await _run_forecast(service, clusters, request)
    forecasts = service.extend(run, clusters)
    return ExtendedForecastResponse(
        forecasts=forecasts,
        quality=calculate_quality_metrics(forecasts),
        metadata=run.metadata(),
    )


@router.post("/forecast/map", response_model=MapResponse, responses=FORECAST_ERRORS)
async def forecast_map(
    request: MapRequest,
    service: Annotated[ForecastService, Depends(get_forecast_service)],
    cache: Annotated[AnalysisCache, Depends(get_analysis_cache)],
) -> MapResponse:
    """Generate reliable forecasts projected as map points.

    Forecasts are filtered on reliability, sample size and variance, then
    projected with the reliability floor, then narrowed by ``filters`` if given.
    """
    clusters = _resolve_clusters(request, cache)
    run = await _run_forecast(service, clusters, request)

    reliable = filter_reliable_forecasts(
        service.extend(run, clusters),
        min_reliability=request.min_reliability,
        min_sample_size=request.min_sample_size,
        max_variance=request.max_variance,
    )
    points = create_forecast_map_points(reliable, min_reliability=request.min_reliability)
    if request.filters is not None:
        points = apply_map_filters(points, request.filters)

    return MapResponse(
        points=points,
        summary=summarize_map_points(points),
        metadata=run.metadata(),
    )


@router.post("/forecast/summary", response_model=SummaryResponse, responses=FORECAST_ERRORS)
async def forecast_summary(
    request: ForecastRequest,
    service: Annotated[ForecastService, Depends(get_forecast_service)],
    cache: Annotated[AnalysisCache, Depends(get_analysis_cache)],
) -> SummaryResponse:
    """Summarize predicted totals, trends and the highest-risk areas."""
    clusters = _resolve_clusters(request, cache)
    run = await _run_forecast(service, clusters, request)
    return SummaryResponse(
        summary=service.summarize(run.predictions, run.params.forecast_period),
        metadata=run.metadata(),
    )


@router.post(
    "/forecast/export",
    response_class=Response,
    responses={
        200: {"content": {"text/csv": {}}, "description": "Forecast CSV"},
        **FORECAST_ERRORS,
    },
)
async def forecast_export(
    request: ForecastRequest,
    service: Annotated[ForecastService, Depends(get_forecast_service)],
    cache: Annotated[AnalysisCache, Depends(get_analysis_cache)],
) -> Response:
    """Download predictions as CSV."""
    clusters = _resolve_clusters(request, cache)
    run = await _run_forecast(service, clusters, request)

    filename = f"crime-forecast-{datetime.now().strftime('%Y-%m-%d-%H%M')}.csv"
    return Response(
        content=export_csv(run.predictions, service.lookups),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
