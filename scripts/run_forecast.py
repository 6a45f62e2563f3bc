#!/usr/bin/env python3
"""Generate a crime forecast report from exported cluster data.

Reads a JSON file holding a list of clusters (or an object with a
``clusterGroups`` list), runs the local forecast pipeline and writes the
CSV report.

Example:
    python scripts/run_forecast.py clusters.json --model seasonal --months 6
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from crime_forecast.api.schemas import Cluster, ForecastParams
from crime_forecast.inference import VALID_MODELS, EstimatorRegistry
from crime_forecast.inference.export import export_csv, forecast_report
from crime_forecast.inference.predictor import ForecastService

# Configuration
OUTPUT_DIR = Path(__file__).parent.parent / "outputs"

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_clusters(path: Path) -> list[Cluster]:
    """Load clusters from a JSON export."""
    with open(path) as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("clusterGroups", [])

    return [Cluster.model_validate(cluster) for cluster in data]


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Generate a crime forecast report")
    parser.add_argument("clusters", type=str, help="Path to cluster data JSON")
    parser.add_argument(
        "--model",
        type=str,
        default="linear",
        choices=VALID_MODELS,
        help="Forecasting model (default: linear)",
    )
    parser.add_argument(
        "--months",
        type=int,
        default=6,
        help="Months to forecast, 1-12 (default: 6)",
    )
    parser.add_argument(
        "--confidence",
        type=float,
        default=0.95,
        help="Base confidence level, 0.7-0.99 (default: 0.95)",
    )
    parser.add_argument(
        "--csv-only",
        action="store_true",
        help="Write plain CSV without the report header",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(OUTPUT_DIR),
        help="Output directory for the report",
    )

    args = parser.parse_args()

    clusters = load_clusters(Path(args.clusters))
    logger.info(f"Loaded {len(clusters)} clusters from {args.clusters}")

    params = ForecastParams(
        forecast_period=args.months,
        model=args.model,
        confidence=args.confidence,
    )

    registry = EstimatorRegistry()
    registry.load_all()
    service = ForecastService(registry)

    run = asyncio.run(service.predict(clusters, params))
    logger.info(f"Generated {len(run.predictions)} predictions ({run.source}, {run.model})")

    if args.csv_only:
        content = export_csv(run.predictions, service.lookups)
    else:
        content = forecast_report(run.predictions, params, service.lookups)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"crime-forecast-{datetime.now().strftime('%Y-%m-%d-%H%M')}.csv"
    with open(output_path, "w") as f:
        f.write(content)

    logger.info(f"Report saved to: {output_path}")


if __name__ == "__main__":
    main()
