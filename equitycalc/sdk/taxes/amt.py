"""Alternative minimum tax strategies.

compute_tax delegates AMT to a strategy object so the rule set can be
swapped without touching the per-grant-type logic. `NoAmt` is used in
simple mode; `ExemptionPhaseoutAmt` in comprehensive mode.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from ..schemas import TaxSettings
from .rates import calculate_bracket_tax, get_year_rules


@dataclass
class AmtResult:
    """Breakdown of an AMT calculation."""

    amt_income: float = 0.0
    exemption: float = 0.0
    tentative_minimum_tax: float = 0.0
    regular_tax: float = 0.0
    amt_due: float = 0.0
    credit_used: float = 0.0

    @property
    def new_credit(self) -> float:
        """AMT paid this year becomes a credit for future years."""
        return self.amt_due


class AmtStrategy(Protocol):
    """Computes AMT for one calculation."""

    def calculate(
        self,
        ordinary_income: float,
        amt_preference: float,
        tax_settings: TaxSettings,
        year: Optional[int] = None,
    ) -> AmtResult:
        ...


class NoAmt:
    """Ignores AMT entirely."""

    def calculate(self, ordinary_income, amt_preference, tax_settings, year=None) -> AmtResult:
        return AmtResult()


class ExemptionPhaseoutAmt:
    """AMT with exemption phase-out and the two-rate schedule.

    Regular tax comes from the year's ordinary brackets after the standard
    deduction. Prior-year credits are only usable when regular tax exceeds
    the tentative minimum tax.
    """

    def calculate(self, ordinary_income, amt_preference, tax_settings, year=None) -> AmtResult:
        rules = get_year_rules(year or tax_settings.tax_year)
        status_rules = rules.for_status(tax_settings.filing_status)
        rates = rules.amt_rates

        income = tax_settings.other_income + ordinary_income
        regular_taxable = max(0.0, income - status_rules.standard_deduction)
        regular_tax = calculate_bracket_tax(regular_taxable, status_rules.tax_brackets)

        amt_income = income + max(amt_preference, 0.0)
        phaseout = max(0.0, amt_income - status_rules.amt.phaseout_threshold) * rates.phaseout_rate
        exemption = max(0.0, status_rules.amt.exemption - phaseout)
        amt_base = max(0.0, amt_income - exemption)

        tentative = (
            min(amt_base, rates.high_rate_threshold) * rates.low_rate
            + max(0.0, amt_base - rates.high_rate_threshold) * rates.high_rate
        )

        amt_due = max(0.0, tentative - regular_tax)
        credit_room = max(0.0, regular_tax - tentative)
        credit_used = min(tax_settings.prior_amt_credits, credit_room)

        return AmtResult(
            amt_income=amt_income,
            exemption=exemption,
            tentative_minimum_tax=tentative,
            regular_tax=regular_tax,
            amt_due=amt_due,
            credit_used=credit_used,
        )


def strategy_for(tax_settings: TaxSettings) -> AmtStrategy:
    """Default strategy for the settings' mode."""
    if tax_settings.mode == "comprehensive":
        return ExemptionPhaseoutAmt()
    return NoAmt()
