"""Equity Calc CLI - Command-line interface for equity compensation calculations."""

import logging
import os
from datetime import date

import click
from pydantic import ValidationError
from rich.console import Console

from equitycalc import __version__
from equitycalc.sdk import (
    Grant,
    GrantType,
    InvalidInputError,
    OutOfRangeError,
    TIMEFRAME_DAYS,
    compute_exercise_cost,
    compute_tax,
    portfolio_summary,
    vesting_schedule,
    vesting_status,
)

from .common import echo_json, open_portfolio, open_tax_settings, parse_date, wants_json
from .profile_commands import profile as profile_group
from .renderers import render_portfolio_summary, render_schedule, render_tax_result, render_vesting_table
from .scenarios_commands import scenarios as scenarios_group
from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="equity-calc")
def cli():
    """Equity Calc - Startup equity vesting, tax and exit scenario tools.

    Grants and scenarios are read from a portfolio YAML file. Tax rates
    come from the profile, overridden by the portfolio's 'tax' section.

    Configuration is loaded from (in order):

    \b
    1. EQUITY_CALC_CONFIG_PATH environment variable
    2. ~/.config/equity-calc/ (XDG default)

    Run 'equity-calc profile show' to see the active tax profile.
    """
    pass


cli.add_command(profile_group)
cli.add_command(settings_group)
cli.add_command(scenarios_group)


@cli.command("vest")
@click.argument("portfolio", required=False, type=click.Path())
@click.option("--as-of", help="Reference date (YYYY-MM-DD). Defaults to today.")
@click.option("--grant", "grant_id", help="Only show this grant id.")
@click.option("--schedule", is_flag=True, help="Include each grant's full vesting schedule.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def vest(portfolio, as_of, grant_id, schedule, as_json):
    """Show vested shares for every grant in PORTFOLIO.

    PORTFOLIO defaults to the 'portfolio' setting.

    \b
    Examples:
      equity-calc vest grants.yaml
      equity-calc vest grants.yaml --as-of 2026-01-01 --schedule
    """
    as_of_date = parse_date(as_of, "--as-of") or date.today()
    data = open_portfolio(portfolio)

    grants = data.grants
    if grant_id:
        grants = [g for g in grants if g.id == grant_id]
        if not grants:
            raise click.ClickException(f"Grant '{grant_id}' not found in portfolio")

    try:
        rows = [(grant, vesting_status(grant, as_of_date)) for grant in grants]
    except OutOfRangeError as e:
        raise click.ClickException(str(e))

    if wants_json(as_json):
        output = []
        for grant, status in rows:
            entry = {
                "id": grant.id,
                "company_name": grant.company_name,
                "grant_type": grant.grant_type.value,
                **status.model_dump(mode="json"),
            }
            if schedule:
                entry["schedule"] = [e.model_dump(mode="json") for e in vesting_schedule(grant)]
            output.append(entry)
        echo_json({"as_of": as_of_date.isoformat(), "grants": output})
        return

    if not rows:
        click.echo("No grants in portfolio.")
        return

    console = Console()
    render_vesting_table(console, rows)
    if schedule:
        for grant, _ in rows:
            render_schedule(console, grant, vesting_schedule(grant))


@cli.command("summary")
@click.argument("portfolio", required=False, type=click.Path())
@click.option("--company", help="Only include grants from this company.")
@click.option("--timeframe", type=click.Choice(["all", *TIMEFRAME_DAYS]), default="all", show_default=True,
              help="Only include grants granted within this window before --as-of.")
@click.option("--as-of", help="Vesting date and end of the timeframe window (YYYY-MM-DD). Defaults to today.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def summary(portfolio, company, timeframe, as_of, as_json):
    """Portfolio totals: shares, vested value, exercise cost and breakdowns.

    \b
    Examples:
      equity-calc summary grants.yaml
      equity-calc summary grants.yaml --company Acme --timeframe year
    """
    data = open_portfolio(portfolio)

    try:
        result = portfolio_summary(
            data.grants,
            company=company,
            timeframe=timeframe,
            as_of=parse_date(as_of, "--as-of"),
        )
    except (InvalidInputError, OutOfRangeError) as e:
        raise click.ClickException(str(e))

    if wants_json(as_json):
        echo_json(result.model_dump(mode="json"))
        return

    render_portfolio_summary(Console(), result)


@cli.command("exercise-cost")
@click.argument("shares")
@click.argument("strike")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def exercise_cost(shares, strike, as_json):
    """Cash needed to exercise SHARES options at STRIKE per share.

    Accepts form-style input ("1,000", "$1.50"); unusable values count as zero.
    """
    cost = compute_exercise_cost(shares, strike)
    if wants_json(as_json):
        echo_json({"shares": shares, "strike_price": strike, "exercise_cost": cost})
    else:
        click.echo(f"Exercise cost: ${cost:,.2f}")


@cli.command("tax")
@click.option("--type", "grant_type", required=True,
              type=click.Choice([t.value for t in GrantType], case_sensitive=False),
              help="Grant type.")
@click.option("--shares", required=True, type=int, help="Shares sold.")
@click.option("--strike", type=float, default=0.0, show_default=True, help="Exercise price per share.")
@click.option("--exit-price", required=True, type=float, help="Sale price per share.")
@click.option("--fmv", type=float, help="Fair market value at exercise/vest (default: exit price).")
@click.option("--grant-date", help="Grant date (YYYY-MM-DD).")
@click.option("--exercise-date", help="Exercise date for options (YYYY-MM-DD).")
@click.option("--vest-date", help="Vesting date for RSUs (YYYY-MM-DD).")
@click.option("--sale-date", help="Sale date (YYYY-MM-DD).")
@click.option("--state", help="Two-letter state code (default: profile).")
@click.option("--filing-status", type=click.Choice(["single", "mfj"]), help="Filing status (default: profile).")
@click.option("--comprehensive", is_flag=True, help="Include AMT.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def tax(grant_type, shares, strike, exit_price, fmv, grant_date, exercise_date, vest_date,
        sale_date, state, filing_status, comprehensive, as_json):
    """Estimate tax and net proceeds for selling one block of shares.

    \b
    Examples:
      equity-calc tax --type ISO --shares 1000 --strike 1 --exit-price 30 \\
          --fmv 5 --grant-date 2022-01-01 --exercise-date 2023-01-01 --sale-date 2025-06-01
      equity-calc tax --type RSU --shares 500 --exit-price 40 --state NY
    """
    exercised = parse_date(exercise_date, "--exercise-date")

    try:
        grant = Grant(
            grant_type=grant_type,
            total_shares=shares,
            strike_price=strike,
            current_fmv=fmv,
            grant_date=parse_date(grant_date, "--grant-date"),
            exercise_date=exercised,
        )
    except ValidationError as e:
        raise click.ClickException(f"Invalid grant: {e}")

    settings = open_tax_settings(
        state=state,
        filing_status=filing_status,
        mode="comprehensive" if comprehensive else None,
        exercise_date=exercised,
        vesting_date=parse_date(vest_date, "--vest-date"),
        sale_date=parse_date(sale_date, "--sale-date"),
    )

    try:
        result = compute_tax(grant, exercise_price=strike, exit_price=exit_price,
                             shares=shares, tax_settings=settings)
    except InvalidInputError as e:
        raise click.ClickException(str(e))

    if wants_json(as_json):
        output = result.model_dump(mode="json")
        output["effective_rate"] = result.effective_rate
        echo_json(output)
        return

    render_tax_result(Console(), result)


def main():
    """Entry point for the CLI."""
    log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
        datefmt="%H:%M:%S"
    )
    cli()


if __name__ == "__main__":
    main()
