"""Crime Forecast Service - FastAPI Application."""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import init_services, router
from .cache import analysis_cache
from .data import get_remote_client
from .inference import EstimatorRegistry
from .inference.predictor import ForecastService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _estimator_overrides() -> dict[str, dict]:
    """Weighted-recent perturbation settings from the environment."""
    noise = float(os.getenv("FORECAST_ARIMA_NOISE", "0"))
    seed = os.getenv("FORECAST_RANDOM_SEED")
    return {
        "arima": {
            "perturbation": noise,
            "seed": int(seed) if seed else None,
        }
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - register estimators on startup."""
    registry = EstimatorRegistry(overrides=_estimator_overrides())
    loaded = registry.load_all()
    logger.info(f"Registered {loaded} estimators")

    remote_client = get_remote_client()
    if remote_client is None:
        logger.info("No remote forecaster configured, using local estimators only")

    service = ForecastService(registry, remote_client=remote_client)
    init_services(registry, service, datetime.now(), cache=analysis_cache)

    yield

    logger.info("Shutting down crime forecast service")


# Create FastAPI app
app = FastAPI(
    title="Crime Forecast API",
    description="Monthly crime forecasts per precinct and crime type from clustered incident data",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(router, prefix="/api/v1", tags=["forecasts"])


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Crime Forecast API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }


def main():
    """Run the application with uvicorn."""
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))

    uvicorn.run(
        "crime_forecast.main:app",
        host=host,
        port=port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )


if __name__ == "__main__":
    main()
