"""Scenario comparison export (CSV and JSON report)."""

import csv
import io
import json
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from .schemas import ScenarioSummary

REPORT_TITLE = "Equity Scenario Comparison"
EXPORT_VERSION = "1.0"

CSV_HEADERS = [
    "Scenario Name",
    "Exit Type",
    "Exit Value",
    "Shares Included",
    "Gross Proceeds",
    "Exercise Cost",
    "Tax Liability",
    "Net Proceeds",
    "ROI (%)",
    "Effective Tax Rate (%)",
]


def _write_summary_rows(writer, summaries: Iterable[ScenarioSummary]) -> None:
    """Write header and one row per summary to a CSV writer.

    Internal function used by both file and string CSV generation.
    """
    writer.writerow(CSV_HEADERS)
    for s in summaries:
        writer.writerow([
            s.scenario_name,
            s.exit_type,
            f"{s.exit_price:.2f}",
            s.shares_included,
            f"{s.gross_proceeds:.2f}",
            f"{s.exercise_cost:.2f}",
            f"{s.tax_liability:.2f}",
            f"{s.net_proceeds:.2f}",
            f"{s.roi_percentage:.2f}",
            f"{s.effective_tax_rate:.2f}",
        ])


def summaries_to_csv(summaries: Iterable[ScenarioSummary]) -> str:
    """Convert scenario summaries to a CSV string."""
    output = io.StringIO()
    writer = csv.writer(output)
    _write_summary_rows(writer, summaries)
    return output.getvalue()


def write_summaries_csv(summaries: Iterable[ScenarioSummary], output_path: Path) -> Path:
    """Write scenario summaries to a CSV file.

    Returns:
        Path to the written file
    """
    with open(output_path, "w", newline="") as csvfile:
        writer = csv.writer(csvfile)
        _write_summary_rows(writer, summaries)

    return output_path


def _per_share(amount: float, shares: int) -> float:
    return amount / shares if shares else 0.0


def summaries_to_report(
    summaries: Iterable[ScenarioSummary],
    generated_at: Optional[datetime] = None,
) -> dict:
    """Build the JSON comparison report.

    Args:
        summaries: Summaries from aggregate_scenarios()
        generated_at: Timestamp to stamp into metadata (defaults to now)

    Returns:
        Dict with "metadata" and "scenarios" keys, JSON-serializable
    """
    summaries: List[ScenarioSummary] = list(summaries)
    generated_at = generated_at or datetime.now()

    scenarios = []
    for s in summaries:
        scenarios.append({
            "name": s.scenario_name,
            "exitType": s.exit_type,
            "exitValue": s.exit_price,
            "sharesIncluded": s.shares_included,
            "grantsIncluded": s.grants_included,
            "financials": {
                "grossProceeds": s.gross_proceeds,
                "exerciseCost": s.exercise_cost,
                "taxLiability": s.tax_liability,
                "netProceeds": s.net_proceeds,
            },
            "metrics": {
                "roi": s.roi_percentage,
                "effectiveTaxRate": s.effective_tax_rate,
                "costBasis": _per_share(s.exercise_cost, s.shares_included),
                "netValuePerShare": _per_share(s.net_proceeds, s.shares_included),
                "profitPerShare": _per_share(s.net_proceeds - s.exercise_cost, s.shares_included),
            },
        })

    return {
        "metadata": {
            "generatedAt": generated_at.isoformat(),
            "title": REPORT_TITLE,
            "scenarioCount": len(summaries),
            "exportVersion": EXPORT_VERSION,
        },
        "scenarios": scenarios,
    }


def write_summaries_json(summaries: Iterable[ScenarioSummary], output_path: Path) -> Path:
    """Write the JSON comparison report to a file.

    Returns:
        Path to the written file
    """
    with open(output_path, "w") as f:
        json.dump(summaries_to_report(summaries), f, indent=2)

    return output_path
