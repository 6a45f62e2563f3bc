"""Inference module for aggregation, estimation and forecast enrichment."""

from .loader import DEFAULT_MODEL, MODEL_CONFIG, VALID_MODELS, EstimatorRegistry

__all__ = [
    "EstimatorRegistry",
    "MODEL_CONFIG",
    "DEFAULT_MODEL",
    "VALID_MODELS",
]
