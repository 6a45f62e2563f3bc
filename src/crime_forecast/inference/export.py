"""CSV export and text reports of forecast predictions."""

from datetime import datetime
from typing import Optional, Sequence

import pandas as pd

from ..api.schemas import ForecastParams, ForecastPrediction
from ..config import DEFAULT_LOOKUPS, LookupTables

CSV_COLUMNS = [
    "Date",
    "Precinct",
    "Crime Type",
    "Predicted Count",
    "Confidence",
    "Trend",
    "Risk Level",
]


def predictions_to_frame(
    predictions: Sequence[ForecastPrediction],
    lookups: LookupTables = DEFAULT_LOOKUPS,
) -> pd.DataFrame:
    """One row per prediction with display names and formatted confidence."""
    rows = [
        {
            "Date": f"{p.year}-{p.month:02d}",
            "Precinct": lookups.precinct_name(p.precinct),
            "Crime Type": lookups.crime_type_name(p.crime_type),
            "Predicted Count": p.predicted_count,
            "Confidence": f"{p.confidence * 100:.1f}%",
            "Trend": p.trend,
            "Risk Level": p.risk_level,
        }
        for p in predictions
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def export_csv(
    predictions: Sequence[ForecastPrediction],
    lookups: LookupTables = DEFAULT_LOOKUPS,
) -> str:
    """Render predictions as CSV text with a header row."""
    return predictions_to_frame(predictions, lookups).to_csv(index=False, lineterminator="\n")


def forecast_report(
    predictions: Sequence[ForecastPrediction],
    params: ForecastParams,
    lookups: LookupTables = DEFAULT_LOOKUPS,
    generated_at: Optional[datetime] = None,
) -> str:
    """Markdown-style report header followed by the CSV predictions."""
    generated_at = generated_at or datetime.now()
    high_risk = sum(1 for p in predictions if p.risk_level in ("high", "critical"))
    increasing = sum(1 for p in predictions if p.trend == "increasing")

    lines = [
        "# Crime Forecast Report",
        f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M')}",
        "",
        "## Forecast Parameters",
        f"Forecast Period: {params.forecast_period} months ahead",
        f"Model Used: {params.model.upper()}",
        f"Confidence Level: {params.confidence * 100:.1f}%",
        "",
        "## Forecast Summary",
        f"Total Predictions: {len(predictions)}",
        f"High Risk Periods: {high_risk}",
        f"Increasing Trends: {increasing}",
        "",
        "## Detailed Predictions",
    ]
    return "\n".join(lines) + "\n" + export_csv(predictions, lookups)
