"""Exit scenario CLI commands."""

from pathlib import Path

import click
from rich.console import Console

from equitycalc.sdk import (
    InvalidInputError,
    OutOfRangeError,
    TIMEFRAME_DAYS,
    aggregate_scenarios,
    build_common_scenarios,
    get_data_path,
    rank_scenarios,
    summaries_to_csv,
    summaries_to_report,
    write_summaries_csv,
    write_summaries_json,
)

from .common import echo_json, open_portfolio, open_tax_settings, parse_date, wants_json
from .renderers import render_scenarios

TIMEFRAME_CHOICES = ["all", *TIMEFRAME_DAYS]


def _summaries(portfolio, company, timeframe, as_of, state, comprehensive, common, reference_price):
    """Load the portfolio and aggregate its scenarios."""
    data = open_portfolio(portfolio)
    settings = open_tax_settings(
        data,
        state=state,
        mode="comprehensive" if comprehensive else None,
    )

    scenarios = list(data.scenarios)
    if common:
        scenarios.extend(build_common_scenarios(reference_price=reference_price))
    if not scenarios:
        raise click.ClickException(
            "Portfolio has no scenarios. Add a 'scenarios' section or use --common."
        )

    try:
        return aggregate_scenarios(
            scenarios,
            data.grants,
            settings,
            company=company,
            timeframe=timeframe,
            as_of=parse_date(as_of, "--as-of"),
        )
    except (InvalidInputError, OutOfRangeError) as e:
        raise click.ClickException(str(e))


_common_options = [
    click.argument("portfolio", required=False, type=click.Path()),
    click.option("--company", help="Only include grants from this company."),
    click.option("--timeframe", type=click.Choice(TIMEFRAME_CHOICES), default="all", show_default=True,
                 help="Only include grants granted within this window before --as-of."),
    click.option("--as-of", help="End of the timeframe window (YYYY-MM-DD). Defaults to today."),
    click.option("--state", help="Override the tax state."),
    click.option("--comprehensive", is_flag=True, help="Include AMT."),
    click.option("--common", is_flag=True, help="Add the standard IPO / acquisition multiplier scenarios."),
    click.option("--reference-price", type=float,
                 help="Price the --common multipliers apply to (default: each grant's current_fmv)."),
]


def _with_common_options(func):
    for option in reversed(_common_options):
        func = option(func)
    return func


@click.group()
def scenarios():
    """Compare and export exit scenarios."""
    pass


@scenarios.command("compare")
@_with_common_options
@click.option("--rank", is_flag=True, help="Sort by net proceeds, highest first.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def scenarios_compare(portfolio, company, timeframe, as_of, state, comprehensive, common,
                      reference_price, rank, as_json):
    """Side-by-side totals for every scenario in PORTFOLIO.

    \b
    Examples:
      equity-calc scenarios compare grants.yaml
      equity-calc scenarios compare grants.yaml --company Acme --timeframe year
      equity-calc scenarios compare grants.yaml --common --reference-price 4.50 --rank
    """
    summaries = _summaries(portfolio, company, timeframe, as_of, state, comprehensive,
                           common, reference_price)
    if rank:
        summaries = rank_scenarios(summaries)

    if wants_json(as_json):
        echo_json([s.model_dump(mode="json") for s in summaries])
        return

    render_scenarios(Console(), summaries)


@scenarios.command("export")
@_with_common_options
@click.option("--format", "fmt", type=click.Choice(["csv", "json"]), default="csv", show_default=True)
@click.option("--output", "-o", type=click.Path(), help="Output file ('-' for stdout, default: data dir).")
def scenarios_export(portfolio, company, timeframe, as_of, state, comprehensive, common,
                     reference_price, fmt, output):
    """Export scenario comparison for PORTFOLIO as CSV or a JSON report."""
    summaries = _summaries(portfolio, company, timeframe, as_of, state, comprehensive,
                           common, reference_price)

    if output == "-":
        if fmt == "csv":
            click.echo(summaries_to_csv(summaries), nl=False)
        else:
            echo_json(summaries_to_report(summaries))
        return

    path = Path(output) if output else get_data_path() / f"scenario-comparison.{fmt}"
    if fmt == "csv":
        write_summaries_csv(summaries, path)
    else:
        write_summaries_json(summaries, path)
    click.echo(f"Exported {len(summaries)} scenario(s) to {path}")
