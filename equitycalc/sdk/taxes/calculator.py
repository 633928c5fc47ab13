"""Per-grant tax calculation for a sale at an exit price.

Income is split into an ordinary-income leg and a capital-gains leg:

- ISO, qualifying disposition: the whole gain over the exercise price is
  long-term capital gain.
- ISO, disqualifying disposition: the bargain element at exercise (capped
  at the actual gain) is ordinary income, the rest is capital gain.
- NSO: the bargain element is ordinary income at exercise, appreciation
  after exercise is capital gain.
- RSU: value at vest is ordinary income, appreciation after vest is
  capital gain. No exercise cost.

Basis is always exercise cost plus ordinary income already recognized, so
capital gains = gross proceeds - exercise cost - ordinary income.

In comprehensive mode with residency periods, the state rate is replaced by
the workday-weighted blend of the states the grant vested in.
"""

import logging
from typing import Any, Iterable, Optional

from ..coerce import to_optional_price, to_price, to_shares
from ..constants import GrantType
from ..errors import InvalidInputError
from ..exercise import compute_exercise_cost
from ..schemas import Grant, HoldingPeriod, TaxResult, TaxSettings, as_grant
from .amt import AmtStrategy, strategy_for
from .holding import acquisition_date, classify_holding_period
from .states import apply_state_tax, blended_state_rate, state_allocation_for

logger = logging.getLogger(__name__)


def _require_shares(shares: Any) -> int:
    if shares is None:
        raise InvalidInputError("shares is required for tax calculation")
    count = to_shares(shares, default=-1)
    if count < 0:
        raise InvalidInputError(f"shares must be a non-negative number, got {shares!r}")
    return count


def _require_exit_price(exit_price: Any) -> float:
    price = to_optional_price(exit_price)
    if price is None:
        raise InvalidInputError("exit_price is required for tax calculation")
    if price < 0:
        raise InvalidInputError(f"exit_price must be non-negative, got {exit_price!r}")
    return price


def select_rates(holding_period: HoldingPeriod, tax_settings: TaxSettings) -> tuple[float, float]:
    """Return (ordinary_rate, capital_gains_rate) including state tax."""
    ordinary_rate = tax_settings.federal_short_term_rate + tax_settings.state_rate
    if holding_period.is_long_term:
        capital_rate = tax_settings.federal_long_term_rate + tax_settings.state_rate
    else:
        capital_rate = tax_settings.federal_short_term_rate + tax_settings.state_rate
    return ordinary_rate, capital_rate


def _amt_preference(grant: Grant, tax_settings: TaxSettings, strike: float, fmv: float, shares: int) -> float:
    """ISO spread counted as AMT income.

    A sale in the same calendar year as the exercise removes the adjustment.
    """
    if grant.grant_type != GrantType.ISO:
        return 0.0
    exercised = acquisition_date(grant, tax_settings)
    sale = tax_settings.sale_date
    if exercised and sale and exercised.year == sale.year:
        return 0.0
    return max(0.0, fmv - strike) * shares


def _tax_year(grant: Grant, tax_settings: TaxSettings) -> Optional[int]:
    if tax_settings.tax_year:
        return tax_settings.tax_year
    acquired = acquisition_date(grant, tax_settings)
    if acquired:
        return acquired.year
    return None


def apply_amt(
    strategy: AmtStrategy,
    base_tax: float,
    ordinary_income: float,
    amt_preference: float,
    tax_settings: TaxSettings,
    year: Optional[int] = None,
) -> float:
    """AMT due net of prior-year credits. Credits never push tax below zero."""
    result = strategy.calculate(ordinary_income, amt_preference, tax_settings, year)
    return result.amt_due - min(result.credit_used, base_tax)


def combined_amt(
    results: Iterable[TaxResult],
    tax_settings: TaxSettings,
    amt_strategy: Optional[AmtStrategy] = None,
) -> float:
    """AMT for several sales in one tax year, computed once on their combined income.

    Other income, the exemption and prior-year credits count once for the
    whole set. `results` must come from compute_tax with NoAmt so their
    total_tax is regular tax only.
    """
    results = list(results)
    if not results:
        return 0.0
    years = [r.tax_year for r in results if r.tax_year]
    return apply_amt(
        amt_strategy or strategy_for(tax_settings),
        sum(r.total_tax for r in results),
        sum(r.ordinary_income for r in results),
        sum(r.amt_preference for r in results),
        tax_settings,
        max(years) if years else None,
    )


def compute_tax(
    grant: Any,
    exercise_price: Any = None,
    exit_price: Any = None,
    shares: Any = None,
    tax_settings: Optional[TaxSettings] = None,
    amt_strategy: Optional[AmtStrategy] = None,
) -> TaxResult:
    """Compute ordinary income, capital gains, total tax and net proceeds.

    Args:
        grant: Grant (or stored record mapping) being sold
        exercise_price: Per-share exercise price; defaults to grant.strike_price
        exit_price: Per-share sale price (required)
        shares: Number of shares sold (required); 0 yields an all-zero result
        tax_settings: Rates and dates; defaults to TaxSettings()
        amt_strategy: Overrides the AMT strategy chosen by tax_settings.mode

    Returns:
        TaxResult with net_proceeds = gross_proceeds - exercise_cost - total_tax

    Raises:
        InvalidInputError: If grant, exit_price or shares is missing or malformed
    """
    grant = as_grant(grant)
    if grant is None:
        raise InvalidInputError("grant is required for tax calculation")

    price = _require_exit_price(exit_price)
    count = _require_shares(shares)
    settings = tax_settings or TaxSettings()

    if count == 0:
        return TaxResult.zero(grant.grant_type)

    if exercise_price is None:
        strike = grant.strike_price
    else:
        strike = to_price(exercise_price, default=grant.strike_price)

    holding = classify_holding_period(grant, settings)
    fmv = grant.current_fmv if grant.current_fmv is not None else price
    gross = price * count

    if grant.grant_type == GrantType.RSU:
        cost = 0.0
        ordinary = fmv * count
    else:
        cost = float(compute_exercise_cost(count, strike))
        bargain = max(0.0, fmv - strike) * count
        if grant.grant_type == GrantType.ISO:
            if holding is HoldingPeriod.LONG_TERM_QUALIFYING:
                ordinary = 0.0
            else:
                ordinary = min(bargain, max(0.0, gross - cost))
        else:
            ordinary = bargain

    capital = gross - cost - ordinary

    allocation = state_allocation_for(grant, settings)
    rate_settings = settings
    if allocation:
        rate_settings = settings.model_copy(update={"state_rate": blended_state_rate(allocation)})
        allocation = apply_state_tax(allocation, ordinary + max(capital, 0.0))

    ordinary_rate, capital_rate = select_rates(holding, rate_settings)
    ordinary_tax = ordinary * ordinary_rate
    capital_tax = max(capital, 0.0) * capital_rate
    base_tax = ordinary_tax + capital_tax

    preference = _amt_preference(grant, settings, strike, fmv, count)
    year = _tax_year(grant, settings)
    amt = apply_amt(amt_strategy or strategy_for(settings), base_tax, ordinary, preference, settings, year)

    total_tax = base_tax + amt
    net = gross - cost - total_tax

    logger.debug(
        f"compute_tax: {grant.grant_type.value} {count} sh @ {price} "
        f"({holding.value}) ordinary={ordinary:.2f} capital={capital:.2f} tax={total_tax:.2f}"
    )

    return TaxResult(
        grant_type=grant.grant_type,
        holding_period=holding,
        shares=count,
        gross_proceeds=gross,
        exercise_cost=cost,
        ordinary_income=ordinary,
        capital_gains=capital,
        ordinary_income_tax=ordinary_tax,
        capital_gains_tax=capital_tax,
        amt=amt,
        amt_preference=preference,
        tax_year=year,
        state_allocation=allocation,
        total_tax=total_tax,
        net_proceeds=net,
    )
