"""taxes - Tax liability for selling equity at an exit price.

Scope:
- Holding-period classification (short-term, qualifying, disqualifying)
- Per-grant ordinary income / capital gains split and flat-rate tax
- AMT as a pluggable strategy (comprehensive mode), once per set of sales
- Workday allocation of the state leg across residency periods
- Rate tables loaded from config/tax_rates.yaml

Constraints:
- Pure calculation - no profile or portfolio access
- Receives records, returns TaxResult

Usage:
    from equitycalc.sdk.taxes import compute_tax, TaxSettings

    result = compute_tax(grant, exercise_price=1.0, exit_price=30.0, shares=1000,
                         tax_settings=TaxSettings.for_state("NY"))
"""

from ..schemas import HoldingPeriod, TaxResult, TaxSettings

from .holding import (
    classify_holding_period,
    is_qualifying_disposition,
    acquisition_date,
)

from .amt import (
    AmtResult,
    AmtStrategy,
    NoAmt,
    ExemptionPhaseoutAmt,
    strategy_for,
)

from .rates import (
    load_rate_table,
    get_state_rate,
    get_year_rules,
    calculate_bracket_tax,
)

from .states import (
    count_workdays,
    allocate_workdays,
    blended_state_rate,
    state_allocation_for,
)

from .calculator import apply_amt, combined_amt, compute_tax, select_rates

__all__ = [
    # Calculator
    "compute_tax",
    "select_rates",
    "apply_amt",
    "combined_amt",
    "TaxResult",
    "TaxSettings",
    # Holding period
    "HoldingPeriod",
    "classify_holding_period",
    "is_qualifying_disposition",
    "acquisition_date",
    # AMT
    "AmtResult",
    "AmtStrategy",
    "NoAmt",
    "ExemptionPhaseoutAmt",
    "strategy_for",
    # Rates
    "load_rate_table",
    "get_state_rate",
    "get_year_rules",
    "calculate_bracket_tax",
    # Multi-state allocation
    "count_workdays",
    "allocate_workdays",
    "blended_state_rate",
    "state_allocation_for",
]
