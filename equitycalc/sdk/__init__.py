"""Equity Calc SDK - Vesting, exercise, tax and exit scenario calculations."""

from .constants import (
    GrantType,
    VestingFrequency,
    TAX_RATES,
    COMMON_SCENARIOS,
    TIMEFRAME_DAYS,
)

from .errors import InvalidInputError, OutOfRangeError

from .schemas import (
    Computed,
    Overridden,
    VestingSource,
    Grant,
    HoldingPeriod,
    TaxSettings,
    TaxResult,
    Scenario,
    ScenarioSummary,
    VestEvent,
    VestingStatus,
    MonthlyVesting,
    StateResidency,
    StateAllocation,
    ValueShare,
    PortfolioSummary,
    Portfolio,
)

from .vesting import (
    compute_vested_shares,
    vesting_schedule,
    vesting_status,
    upcoming_vesting_events,
    combined_vesting_schedule,
)

from .exercise import (
    compute_exercise_cost,
    compute_current_value,
    compute_vesting_percentage,
    compute_return_percentage,
)

from .taxes import compute_tax, combined_amt, classify_holding_period, allocate_workdays

from .scenarios import (
    filter_grants,
    aggregate_scenarios,
    build_common_scenarios,
    rank_scenarios,
)

from .analytics import portfolio_summary

from .export import (
    summaries_to_csv,
    write_summaries_csv,
    summaries_to_report,
    write_summaries_json,
)

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    unset_setting,
    get_profile_path,
    load_profile,
    save_profile,
    init_profile,
    get_profile_value,
    set_profile_value,
    build_tax_settings,
    load_tax_settings,
    get_data_path,
    ConfigNotFoundError,
    ProfileNotFoundError,
)

from .portfolio import (
    load_portfolio,
    resolve_portfolio_path,
    portfolio_tax_settings,
    PortfolioError,
)

__all__ = [
    # Constants
    "GrantType",
    "VestingFrequency",
    "TAX_RATES",
    "COMMON_SCENARIOS",
    "TIMEFRAME_DAYS",
    # Errors
    "InvalidInputError",
    "OutOfRangeError",
    # Records
    "Computed",
    "Overridden",
    "VestingSource",
    "Grant",
    "HoldingPeriod",
    "TaxSettings",
    "TaxResult",
    "Scenario",
    "ScenarioSummary",
    "VestEvent",
    "VestingStatus",
    "MonthlyVesting",
    "StateResidency",
    "StateAllocation",
    "ValueShare",
    "PortfolioSummary",
    "Portfolio",
    # Vesting
    "compute_vested_shares",
    "vesting_schedule",
    "vesting_status",
    "upcoming_vesting_events",
    "combined_vesting_schedule",
    # Exercise
    "compute_exercise_cost",
    "compute_current_value",
    "compute_vesting_percentage",
    "compute_return_percentage",
    # Tax
    "compute_tax",
    "combined_amt",
    "classify_holding_period",
    "allocate_workdays",
    # Scenarios
    "filter_grants",
    "aggregate_scenarios",
    "build_common_scenarios",
    "rank_scenarios",
    # Analytics
    "portfolio_summary",
    # Export
    "summaries_to_csv",
    "write_summaries_csv",
    "summaries_to_report",
    "write_summaries_json",
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "unset_setting",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "init_profile",
    "get_profile_value",
    "set_profile_value",
    "build_tax_settings",
    "load_tax_settings",
    "get_data_path",
    "ConfigNotFoundError",
    "ProfileNotFoundError",
    # Portfolio
    "load_portfolio",
    "resolve_portfolio_path",
    "portfolio_tax_settings",
    "PortfolioError",
]
