"""Holding-period classification.

Classification happens once per calculation and the result drives rate
selection for both the ordinary-income and capital-gains legs, so the two
can never disagree about the same sale.
"""

from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from ..constants import ISO_GRANT_HOLDING_YEARS, LONG_TERM_HOLDING_YEARS, GrantType
from ..schemas import Grant, HoldingPeriod, TaxSettings


def held_at_least(start: Optional[date], end: Optional[date], years: int) -> bool:
    """True if end is at least `years` calendar years after start."""
    if start is None or end is None:
        return False
    return end >= start + relativedelta(years=years)


def acquisition_date(grant: Grant, tax_settings: TaxSettings) -> Optional[date]:
    """Date the shares were acquired for holding-period purposes.

    Options: the exercise date (grant record, then settings, then the sale
    date for a cashless exercise at exit). RSUs: the vest date from
    settings, falling back to the end of vesting.
    """
    if grant.grant_type == GrantType.RSU:
        return tax_settings.vesting_date or grant.vesting_end or tax_settings.sale_date
    return grant.exercise_date or tax_settings.exercise_date or tax_settings.sale_date


def classify_holding_period(grant: Grant, tax_settings: TaxSettings) -> HoldingPeriod:
    """Classify a sale as short-term, qualifying or disqualifying long-term.

    A sale with no known sale date is short-term. ISO sales qualify only if
    held a year from exercise and two years from grant.
    """
    sale = tax_settings.sale_date
    acquired = acquisition_date(grant, tax_settings)

    if not held_at_least(acquired, sale, LONG_TERM_HOLDING_YEARS):
        return HoldingPeriod.SHORT_TERM

    if grant.grant_type == GrantType.ISO and held_at_least(
        grant.effective_grant_date, sale, ISO_GRANT_HOLDING_YEARS
    ):
        return HoldingPeriod.LONG_TERM_QUALIFYING

    return HoldingPeriod.LONG_TERM_DISQUALIFYING


def is_qualifying_disposition(grant: Grant, tax_settings: TaxSettings) -> bool:
    """True if an ISO sale meets both holding requirements."""
    return classify_holding_period(grant, tax_settings) is HoldingPeriod.LONG_TERM_QUALIFYING
