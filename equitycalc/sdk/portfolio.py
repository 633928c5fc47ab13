"""Portfolio file loading.

A portfolio is a YAML file with three top-level keys:

    grants:
      - id: g1
        company_name: Acme
        grant_type: ISO
        total_shares: 4800
        strike_price: 1.00
        vesting_start_date: 2022-01-01
        vesting_months: 48
        cliff_months: 12
    scenarios:
      - scenario_name: IPO
        exit_price: 30
        grant_ids: [g1]
    tax:
      state: NY
"""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from .config import build_tax_settings, get_setting, load_profile
from .schemas import Portfolio, TaxSettings

logger = logging.getLogger(__name__)


class PortfolioError(Exception):
    """Raised when a portfolio file is missing or malformed."""
    pass


def resolve_portfolio_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Explicit path, else the 'portfolio' setting.

    Raises:
        PortfolioError: If neither is available
    """
    if path:
        return Path(path).expanduser()
    configured = get_setting("portfolio")
    if configured:
        return Path(configured).expanduser()
    raise PortfolioError(
        "No portfolio given.\n\n"
        "Pass a path or set a default with: equity-calc settings set portfolio /path/to/portfolio.yaml"
    )


def load_portfolio(path: Optional[Union[str, Path]] = None) -> Portfolio:
    """Load and validate a portfolio YAML file.

    Raises:
        PortfolioError: If the file is missing, unreadable or invalid
    """
    portfolio_path = resolve_portfolio_path(path)
    if not portfolio_path.exists():
        raise PortfolioError(f"Portfolio not found: {portfolio_path}")

    with open(portfolio_path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise PortfolioError(f"Invalid YAML in {portfolio_path}: {e}") from e

    if not isinstance(data, dict):
        raise PortfolioError(f"Portfolio must be a mapping with grants/scenarios: {portfolio_path}")

    try:
        portfolio = Portfolio.model_validate(data)
    except ValidationError as e:
        raise PortfolioError(f"Invalid portfolio {portfolio_path}:\n{e}") from e

    logger.info(
        f"Loaded portfolio {portfolio_path}: {len(portfolio.grants)} grant(s), "
        f"{len(portfolio.scenarios)} scenario(s)"
    )
    return portfolio


def portfolio_tax_settings(portfolio: Portfolio, **overrides) -> TaxSettings:
    """Profile 'tax' section overlaid with the portfolio's 'tax' section."""
    profile = load_profile(require_exists=False)
    tax = dict(profile.get("tax", {}) or {})
    tax.update(portfolio.tax)
    if "state" in portfolio.tax and "state_rate" not in portfolio.tax:
        tax.pop("state_rate", None)
    return build_tax_settings(tax, **overrides)
