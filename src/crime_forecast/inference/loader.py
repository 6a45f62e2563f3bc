"""Estimator registration and selection."""

import logging
from datetime import datetime
from typing import Optional

from ..models import (
    BaseEstimator,
    LinearEstimator,
    PolynomialEstimator,
    SeasonalEstimator,
    WeightedRecentEstimator,
)

logger = logging.getLogger(__name__)


# Model configuration: maps model name to estimator class and parameters
MODEL_CONFIG = {
    "linear": {"class": LinearEstimator, "params": {}},
    "polynomial": {"class": PolynomialEstimator, "params": {}},
    "seasonal": {"class": SeasonalEstimator, "params": {}},
    "arima": {"class": WeightedRecentEstimator, "params": {"perturbation": 0.0}},
}

DEFAULT_MODEL = "linear"

VALID_MODELS = list(MODEL_CONFIG.keys())


class EstimatorRegistry:
    """Holds one configured estimator per model name."""

    def __init__(self, overrides: Optional[dict[str, dict]] = None):
        self.overrides = overrides or {}
        self.estimators: dict[str, BaseEstimator] = {}
        self.load_time: Optional[datetime] = None

    def load_all(self) -> int:
        """Instantiate every configured estimator. Returns count of estimators loaded."""
        for name, config in MODEL_CONFIG.items():
            params = {**config["params"], **self.overrides.get(name, {})}
            self.estimators[name] = config["class"](**params)
            logger.info(f"Registered {name} estimator with params {params}")

        self.load_time = datetime.now()
        return len(self.estimators)

    def get_estimator(self, model: Optional[str]) -> BaseEstimator:
        """Get the estimator for ``model``; unknown or missing names use linear."""
        if not self.estimators:
            self.load_all()

        name = (model or "").lower()
        if name not in self.estimators:
            if model:
                logger.warning(f"Unknown model '{model}', falling back to {DEFAULT_MODEL}")
            name = DEFAULT_MODEL
        return self.estimators[name]

    def resolve_name(self, model: Optional[str]) -> str:
        """Name of the estimator that ``get_estimator`` would return."""
        name = (model or "").lower()
        return name if name in MODEL_CONFIG else DEFAULT_MODEL

    def list_models(self) -> list[dict]:
        """List registered estimators with their parameters."""
        if not self.estimators:
            self.load_all()

        return [
            {
                "name": name,
                "description": estimator.description,
                "params": estimator.get_params(),
                "is_default": name == DEFAULT_MODEL,
            }
            for name, estimator in self.estimators.items()
        ]

    @property
    def model_count(self) -> int:
        """Number of registered estimators."""
        return len(self.estimators)
