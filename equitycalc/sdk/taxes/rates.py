"""Rate table loading and lookups."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml

from .schemas import RateTable, YearRules


def _get_rate_table_path() -> Path:
    """Get the packaged tax_rates.yaml path."""
    return Path(__file__).parent.parent.parent / "config" / "tax_rates.yaml"


@lru_cache(maxsize=1)
def load_rate_table() -> RateTable:
    """Load and validate config/tax_rates.yaml."""
    config_file = _get_rate_table_path()
    if not config_file.exists():
        raise FileNotFoundError(f"Tax rate table not found: {config_file}")

    with open(config_file, "r") as f:
        return RateTable.model_validate(yaml.safe_load(f))


def get_state_rate(state: str) -> float:
    """Flat state rate for a two-letter state code (unknown states use the fallback)."""
    table = load_rate_table()
    return table.states.get(state.upper(), table.defaults.unknown_state_rate)


def get_year_rules(year: Optional[int]) -> YearRules:
    """Rules for a tax year with fallback to the nearest prior year.

    Years before the earliest table use the earliest; None or years after
    the latest use the latest.
    """
    table = load_rate_table()
    available = sorted(table.years)
    if year is None:
        return table.years[available[-1]]

    candidates = [y for y in available if y <= year]
    if not candidates:
        return table.years[available[0]]
    return table.years[candidates[-1]]


def calculate_bracket_tax(taxable_income: float, tax_brackets: list) -> float:
    """Calculate progressive tax on taxable income from a bracket list."""
    tax_owed = 0.0
    previous_bracket_max = 0.0

    sorted_brackets = sorted(
        tax_brackets,
        key=lambda b: b.up_to if b.up_to is not None else float("inf"),
    )

    for bracket in sorted_brackets:
        if bracket.up_to is not None:
            if taxable_income > previous_bracket_max:
                income_in_this_bracket = min(taxable_income, bracket.up_to) - previous_bracket_max
                tax_owed += income_in_this_bracket * bracket.rate
            previous_bracket_max = bracket.up_to

        elif bracket.over is not None:
            if taxable_income > bracket.over:
                tax_owed += (taxable_income - bracket.over) * bracket.rate

    return tax_owed
