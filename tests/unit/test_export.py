"""Unit tests for scenario comparison export."""

import csv
import io
import json
from datetime import datetime

import pytest

from equitycalc.sdk import (
    ScenarioSummary,
    summaries_to_csv,
    summaries_to_report,
    write_summaries_csv,
    write_summaries_json,
)
from equitycalc.sdk.export import CSV_HEADERS


@pytest.fixture
def summaries():
    return [
        ScenarioSummary(
            scenario_name="IPO",
            exit_type="IPO",
            exit_price=30.0,
            shares_included=1000,
            grants_included=1,
            gross_proceeds=30000.0,
            exercise_cost=1000.0,
            tax_liability=14500.0,
            net_proceeds=14500.0,
        ),
        ScenarioSummary(scenario_name="Nothing", exit_type="Custom"),
    ]


class TestCsvExport:
    """CSV output."""

    def test_header_row(self, summaries):
        rows = list(csv.reader(io.StringIO(summaries_to_csv(summaries))))
        assert rows[0] == CSV_HEADERS
        assert rows[0][0] == "Scenario Name"
        assert rows[0][-1] == "Effective Tax Rate (%)"

    def test_values(self, summaries):
        rows = list(csv.reader(io.StringIO(summaries_to_csv(summaries))))
        assert rows[1] == [
            "IPO", "IPO", "30.00", "1000", "30000.00", "1000.00", "14500.00", "14500.00",
            "1450.00", "48.33",
        ]
        assert rows[2][0] == "Nothing"
        assert rows[2][-2:] == ["0.00", "0.00"]

    def test_write_file(self, summaries, tmp_path):
        path = write_summaries_csv(summaries, tmp_path / "out.csv")
        assert path.read_bytes().decode() == summaries_to_csv(summaries)

    def test_empty(self):
        assert summaries_to_csv([]).strip() == ",".join(CSV_HEADERS)


class TestJsonReport:
    """JSON comparison report."""

    def test_metadata(self, summaries):
        report = summaries_to_report(summaries, generated_at=datetime(2025, 1, 2, 3, 4, 5))
        assert report["metadata"] == {
            "generatedAt": "2025-01-02T03:04:05",
            "title": "Equity Scenario Comparison",
            "scenarioCount": 2,
            "exportVersion": "1.0",
        }

    def test_financials_and_metrics(self, summaries):
        scenario = summaries_to_report(summaries)["scenarios"][0]
        assert scenario["name"] == "IPO"
        assert scenario["financials"]["netProceeds"] == 14500.0
        assert scenario["metrics"]["roi"] == pytest.approx(1450.0)
        assert scenario["metrics"]["costBasis"] == pytest.approx(1.0)
        assert scenario["metrics"]["netValuePerShare"] == pytest.approx(14.5)
        assert scenario["metrics"]["profitPerShare"] == pytest.approx(13.5)

    def test_zero_shares_per_share_metrics(self, summaries):
        metrics = summaries_to_report(summaries)["scenarios"][1]["metrics"]
        assert metrics["costBasis"] == 0
        assert metrics["netValuePerShare"] == 0

    def test_write_file(self, summaries, tmp_path):
        path = write_summaries_json(summaries, tmp_path / "report.json")
        data = json.loads(path.read_text())
        assert data["metadata"]["scenarioCount"] == 2
        assert len(data["scenarios"]) == 2
