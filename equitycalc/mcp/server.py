"""Equity Calc MCP Server - FastMCP implementation for equity calculation tools."""

import json
import logging
from datetime import date
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from equitycalc.sdk import (
    ConfigNotFoundError,
    Grant,
    InvalidInputError,
    OutOfRangeError,
    PortfolioError,
    aggregate_scenarios,
    build_common_scenarios,
    compute_exercise_cost,
    compute_tax,
    load_portfolio,
    load_tax_settings,
    portfolio_summary,
    portfolio_tax_settings,
    rank_scenarios,
    vesting_status,
)
from equitycalc.sdk.taxes import load_rate_table

logger = logging.getLogger(__name__)

# Errors reported back to the client instead of failing the tool call
_TOOL_ERRORS = (InvalidInputError, OutOfRangeError, PortfolioError, ConfigNotFoundError, ValueError)

# Initialize FastMCP server
mcp = FastMCP("equity-calc")


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


# --- Tools ---

@mcp.tool()
async def get_vesting_status(
    portfolio_path: str | None = Field(default=None, description="Portfolio YAML path (default: 'portfolio' setting)"),
    as_of: str | None = Field(default=None, description="Reference date YYYY-MM-DD (default: today)"),
    grant_id: str | None = Field(default=None, description="Only this grant"),
) -> dict[str, Any]:
    """Vested and unvested shares plus the next vesting event for each grant in a portfolio."""
    try:
        portfolio = load_portfolio(portfolio_path)
        as_of_date = _parse_date(as_of) or date.today()

        grants = [g for g in portfolio.grants if not grant_id or g.id == grant_id]
        results = []
        for grant in grants:
            results.append({
                "id": grant.id,
                "company_name": grant.company_name,
                "grant_type": grant.grant_type.value,
                **vesting_status(grant, as_of_date).model_dump(mode="json"),
            })

        return {"as_of": as_of_date.isoformat(), "grants": results}
    except _TOOL_ERRORS as e:
        logger.error(f"Error computing vesting status: {e}")
        return {"error": str(e), "grants": None}


@mcp.tool()
async def calculate_exercise_cost(
    shares: str = Field(description="Number of options to exercise"),
    strike_price: str = Field(description="Exercise price per share"),
) -> dict[str, Any]:
    """Cash needed to exercise options. Unusable input counts as zero."""
    return {"exercise_cost": compute_exercise_cost(shares, strike_price)}


@mcp.tool()
async def calculate_tax(
    grant_type: str = Field(description="ISO, NSO or RSU"),
    shares: int = Field(description="Shares sold"),
    exit_price: float = Field(description="Sale price per share"),
    strike_price: float = Field(default=0.0, description="Exercise price per share"),
    fmv: float | None = Field(default=None, description="Fair market value at exercise/vest (default: exit price)"),
    grant_date: str | None = Field(default=None, description="YYYY-MM-DD"),
    exercise_date: str | None = Field(default=None, description="YYYY-MM-DD (options)"),
    vest_date: str | None = Field(default=None, description="YYYY-MM-DD (RSUs)"),
    sale_date: str | None = Field(default=None, description="YYYY-MM-DD"),
    state: str | None = Field(default=None, description="Two-letter state code (default: profile)"),
    comprehensive: bool = Field(default=False, description="Include AMT"),
) -> dict[str, Any]:
    """Estimate ordinary income, capital gains, tax and net proceeds for selling one block of shares."""
    try:
        exercised = _parse_date(exercise_date)
        grant = Grant(
            grant_type=grant_type,
            total_shares=shares,
            strike_price=strike_price,
            current_fmv=fmv,
            grant_date=_parse_date(grant_date),
            exercise_date=exercised,
        )
        settings = load_tax_settings(
            state=state,
            mode="comprehensive" if comprehensive else None,
            exercise_date=exercised,
            vesting_date=_parse_date(vest_date),
            sale_date=_parse_date(sale_date),
        )
        result = compute_tax(grant, exercise_price=strike_price, exit_price=exit_price,
                             shares=shares, tax_settings=settings)
        return {"result": result.model_dump(mode="json"), "effective_rate": result.effective_rate}
    except _TOOL_ERRORS as e:
        logger.error(f"Error calculating tax: {e}")
        return {"error": str(e), "result": None}


@mcp.tool()
async def compare_scenarios(
    portfolio_path: str | None = Field(default=None, description="Portfolio YAML path (default: 'portfolio' setting)"),
    company: str | None = Field(default=None, description="Only include grants from this company"),
    timeframe: str = Field(default="all", description="'all', 'month', 'quarter' or 'year'"),
    as_of: str | None = Field(default=None, description="End of the timeframe window YYYY-MM-DD"),
    include_common: bool = Field(default=False, description="Add standard IPO / acquisition multiplier scenarios"),
    reference_price: float | None = Field(default=None, description="Price the common multipliers apply to"),
    rank: bool = Field(default=False, description="Sort by net proceeds, highest first"),
) -> dict[str, Any]:
    """Gross proceeds, exercise cost, tax and net proceeds for each exit scenario in a portfolio."""
    try:
        portfolio = load_portfolio(portfolio_path)
        scenarios = list(portfolio.scenarios)
        if include_common:
            scenarios.extend(build_common_scenarios(reference_price=reference_price))

        summaries = aggregate_scenarios(
            scenarios,
            portfolio.grants,
            portfolio_tax_settings(portfolio),
            company=company,
            timeframe=timeframe,
            as_of=_parse_date(as_of),
        )
        if rank:
            summaries = rank_scenarios(summaries)

        return {"scenarios": [s.model_dump(mode="json") for s in summaries]}
    except _TOOL_ERRORS as e:
        logger.error(f"Error comparing scenarios: {e}")
        return {"error": str(e), "scenarios": None}


@mcp.tool()
async def get_portfolio_summary(
    portfolio_path: str | None = Field(default=None, description="Portfolio YAML path (default: 'portfolio' setting)"),
    company: str | None = Field(default=None, description="Only include grants from this company"),
    timeframe: str = Field(default="all", description="'all', 'month', 'quarter' or 'year'"),
    as_of: str | None = Field(default=None, description="Vesting date and end of the timeframe window YYYY-MM-DD"),
) -> dict[str, Any]:
    """Total, vested and unvested shares, vested value, exercise cost and value by grant type and company."""
    try:
        portfolio = load_portfolio(portfolio_path)
        result = portfolio_summary(
            portfolio.grants,
            company=company,
            timeframe=timeframe,
            as_of=_parse_date(as_of),
        )
        return {"summary": result.model_dump(mode="json")}
    except _TOOL_ERRORS as e:
        logger.error(f"Error summarizing portfolio: {e}")
        return {"error": str(e), "summary": None}


# --- Resources ---

@mcp.resource("equitycalc://rates/states")
async def state_rates_resource() -> str:
    """Flat state tax rates used when a state is selected."""
    table = load_rate_table()
    return json.dumps({
        "states": table.states,
        "unknown_state_rate": table.defaults.unknown_state_rate,
    }, indent=2)


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
