"""Tests for MCP server tools (skipped without the 'mcp' extra)."""

import asyncio

import pytest

pytest.importorskip("mcp")

from equitycalc.mcp import server  # noqa: E402


def run(coro):
    return asyncio.run(coro)


class TestMcpTools:
    """Tools return payloads, and errors come back as {"error": ...}."""

    def test_vesting_status(self, portfolio_file):
        result = run(server.get_vesting_status(
            portfolio_path=str(portfolio_file), as_of="2021-01-01", grant_id=None,
        ))
        assert [g["vested_shares"] for g in result["grants"]] == [1200, 100]

    def test_vesting_status_missing_portfolio(self, tmp_path):
        result = run(server.get_vesting_status(
            portfolio_path=str(tmp_path / "missing.yaml"), as_of=None, grant_id=None,
        ))
        assert "error" in result
        assert result["grants"] is None

    def test_exercise_cost(self):
        result = run(server.calculate_exercise_cost(shares="100", strike_price="2.5"))
        assert result["exercise_cost"] == 250.0

    def test_calculate_tax_bad_date(self):
        result = run(server.calculate_tax(
            grant_type="ISO", shares=100, exit_price=10.0, strike_price=1.0, fmv=None,
            grant_date="not-a-date", exercise_date=None, vest_date=None, sale_date=None,
            state=None, comprehensive=False,
        ))
        assert "error" in result

    def test_compare_scenarios(self, portfolio_file):
        result = run(server.compare_scenarios(
            portfolio_path=str(portfolio_file), company=None, timeframe="all", as_of=None,
            include_common=False, reference_price=None, rank=False,
        ))
        assert [s["scenario_name"] for s in result["scenarios"]] == ["IPO", "Acquihire"]

    def test_portfolio_summary(self, portfolio_file):
        result = run(server.get_portfolio_summary(
            portfolio_path=str(portfolio_file), company=None, timeframe="all", as_of="2021-01-01",
        ))
        summary = result["summary"]
        assert summary["vested_shares"] == 1300
        assert summary["current_value"] == 7000
        assert [t["name"] for t in summary["value_by_grant_type"]] == ["ISO", "RSU"]

    def test_portfolio_summary_bad_timeframe(self, portfolio_file):
        result = run(server.get_portfolio_summary(
            portfolio_path=str(portfolio_file), company=None, timeframe="decade", as_of=None,
        ))
        assert "Unknown timeframe" in result["error"]
        assert result["summary"] is None
