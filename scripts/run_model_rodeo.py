#!/usr/bin/env python3
"""
Model Rodeo: Compare the linear, polynomial, seasonal and weighted-recent
estimators on historical cluster data.

For every (precinct, crime type) group the last TEST_MONTHS aggregated months
are held out, each estimator forecasts them from the remaining history, and
the estimator with the lowest MAPE wins the group.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from crime_forecast.api.schemas import Cluster
from crime_forecast.inference import VALID_MODELS, EstimatorRegistry
from crime_forecast.inference.aggregator import aggregate_history, flatten_clusters, group_history

# Configuration
OUTPUT_DIR = Path(__file__).parent.parent / "outputs"

# Test set size
TEST_MONTHS = 3

# Minimum training points per group
MIN_TRAINING = 4

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@dataclass
class RodeoResult:
    """Results from a model rodeo run."""
    precinct: int
    crime_type: int
    model_name: str
    mape: float
    mae: float
    rmse: float
    training_months: int
    test_months: int


def load_clusters(path: Path) -> list[Cluster]:
    """Load clusters from a JSON export."""
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("clusterGroups", [])
    return [Cluster.model_validate(cluster) for cluster in data]


def calculate_metrics(actual: np.ndarray, predicted: np.ndarray) -> tuple[float, float, float]:
    """Calculate MAPE, MAE, and RMSE."""
    # Avoid division by zero for MAPE
    mask = actual != 0
    if not mask.any():
        mape = float("nan")
    else:
        mape = np.mean(np.abs((actual[mask] - predicted[mask]) / actual[mask])) * 100

    mae = np.mean(np.abs(actual - predicted))
    rmse = np.sqrt(np.mean((actual - predicted) ** 2))

    return round(mape, 2), round(mae, 2), round(rmse, 2)


def run_model_rodeo(
    series: list,
    precinct: int,
    crime_type: int,
    registry: EstimatorRegistry,
) -> list[RodeoResult]:
    """Run all estimators on a single precinct/crime type series."""
    if len(series) < TEST_MONTHS + MIN_TRAINING:
        return []

    train = series[:-TEST_MONTHS]
    test = series[-TEST_MONTHS:]
    test_actual = np.array([point.count for point in test], dtype=float)

    results = []
    for model_name in VALID_MODELS:
        estimator = registry.get_estimator(model_name)
        test_predicted = np.array([
            estimator.estimate(train, step + 1, target_month=point.month)
            for step, point in enumerate(test)
        ])

        mape, mae, rmse = calculate_metrics(test_actual, test_predicted)
        results.append(RodeoResult(
            precinct=precinct,
            crime_type=crime_type,
            model_name=model_name,
            mape=mape,
            mae=mae,
            rmse=rmse,
            training_months=len(train),
            test_months=TEST_MONTHS,
        ))

        logger.info(f"  {model_name}: MAPE={mape:.2f}%, MAE={mae:,.2f}")

    return results


def select_best_model(results: list[RodeoResult]) -> Optional[RodeoResult]:
    """Select the best model based on MAPE."""
    valid_results = [r for r in results if not np.isnan(r.mape)]
    if not valid_results:
        return None
    return min(valid_results, key=lambda r: r.mape)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Backtest forecasting models on cluster data")
    parser.add_argument("clusters", type=str, help="Path to cluster data JSON")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(OUTPUT_DIR),
        help="Output directory for results",
    )
    args = parser.parse_args()

    clusters = load_clusters(Path(args.clusters))
    history = aggregate_history(flatten_clusters(clusters))

    registry = EstimatorRegistry()
    registry.load_all()

    all_results = []
    wins: dict[str, int] = {}

    for (precinct, crime_type), series in group_history(history).items():
        logger.info(f"RODEO: precinct {precinct} / crime type {crime_type} ({len(series)} months)")
        results = run_model_rodeo(series, precinct, crime_type, registry)
        if not results:
            logger.warning("  Insufficient data, skipped")
            continue

        all_results.extend(results)
        best = select_best_model(results)
        if best:
            wins[best.model_name] = wins.get(best.model_name, 0) + 1
            logger.info(f"  WINNER: {best.model_name} (MAPE: {best.mape:.2f}%)")

    if not all_results:
        logger.warning("No group had enough history for a backtest")
        return

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    results_df = pd.DataFrame([r.__dict__ for r in all_results])
    csv_path = output_dir / "rodeo_results.csv"
    results_df.to_csv(csv_path, index=False)
    logger.info(f"Detailed results saved to: {csv_path}")

    logger.info("Wins by model:")
    for model_name, count in sorted(wins.items(), key=lambda x: -x[1]):
        logger.info(f"  {model_name}: {count}")


if __name__ == "__main__":
    main()
