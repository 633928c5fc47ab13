"""Helpers shared by CLI command modules."""

import json
from datetime import date, datetime
from typing import Optional

import click

from equitycalc.sdk import (
    ConfigNotFoundError,
    PortfolioError,
    get_setting,
    load_portfolio,
    load_tax_settings,
    portfolio_tax_settings,
)


def parse_date(value: Optional[str], option: str) -> Optional[date]:
    """Parse YYYY-MM-DD or raise BadParameter naming the option."""
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"Invalid date format '{value}'. Use YYYY-MM-DD.", param_hint=option)


def wants_json(as_json: bool) -> bool:
    """--json flag, else settings.json default_output_format."""
    if as_json:
        return True
    try:
        return get_setting("default_output_format") == "json"
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))


def echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def open_portfolio(path: Optional[str]):
    """Load a portfolio, converting SDK errors to ClickException."""
    try:
        return load_portfolio(path)
    except (PortfolioError, ConfigNotFoundError) as e:
        raise click.ClickException(str(e))


def open_tax_settings(portfolio=None, **overrides):
    """Tax settings from profile (+ portfolio), converting SDK errors to ClickException."""
    try:
        if portfolio is not None:
            return portfolio_tax_settings(portfolio, **overrides)
        return load_tax_settings(**overrides)
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))
