"""Exit scenario aggregation.

Combines grants and hypothetical exits into one summary per scenario for
side-by-side comparison. Grants are filtered (company, timeframe) before
aggregation; a scenario whose grants are all filtered out or missing gets
a zeroed summary rather than an error.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .constants import COMMON_SCENARIOS, TIMEFRAME_DAYS
from .errors import InvalidInputError
from .schemas import Grant, Scenario, ScenarioSummary, TaxSettings, as_grant
from .taxes import AmtStrategy, NoAmt, combined_amt, compute_tax
from .vesting import compute_vested_shares

logger = logging.getLogger(__name__)


def filter_grants(
    grants: Iterable[Any],
    company: Optional[str] = None,
    timeframe: Optional[str] = None,
    as_of: Optional[date] = None,
) -> List[Grant]:
    """Filter grants by company name and by grant date within a timeframe.

    Args:
        grants: Grants or stored record mappings (None entries are skipped)
        company: Exact company name, or None / "all" for every company
        timeframe: "month", "quarter", "year", or None / "all"
        as_of: End of the timeframe window (defaults to today)

    Raises:
        InvalidInputError: If timeframe is not recognized
    """
    window = None
    if timeframe and timeframe != "all":
        if timeframe not in TIMEFRAME_DAYS:
            raise InvalidInputError(
                f"Unknown timeframe '{timeframe}'. Use one of: all, {', '.join(TIMEFRAME_DAYS)}"
            )
        window = TIMEFRAME_DAYS[timeframe]
    as_of = as_of or date.today()

    filtered = []
    for raw in grants or []:
        grant = as_grant(raw)
        if grant is None:
            continue
        if company and company != "all" and grant.company_name != company:
            continue
        if window is not None:
            granted = grant.effective_grant_date
            if granted is None or (as_of - granted).days > window:
                continue
        filtered.append(grant)
    return filtered


def resolve_exit_price(scenario: Scenario, grant: Grant) -> float:
    """Per-share exit price for a grant under a scenario.

    An explicit exit_price wins; otherwise multiplier x reference price,
    where the reference is the scenario's reference_price or the grant's
    current_fmv.

    Raises:
        InvalidInputError: If no exit price can be determined
    """
    if scenario.exit_price is not None:
        return scenario.exit_price

    if scenario.multiplier is not None:
        reference = scenario.reference_price
        if reference is None:
            reference = grant.current_fmv
        if reference is None:
            raise InvalidInputError(
                f"Scenario '{scenario.scenario_name}' uses a multiplier but neither the scenario "
                f"nor grant {grant.id or 'unknown'} has a reference price"
            )
        return scenario.multiplier * reference

    raise InvalidInputError(
        f"Scenario '{scenario.scenario_name}' needs an exit_price or a multiplier"
    )


def resolve_shares(scenario: Scenario, grant: Grant) -> int:
    """Shares sold from a grant: shares_included, else vested at exit_date, else all."""
    if scenario.shares_included is not None:
        return scenario.shares_included
    if scenario.exit_date is not None:
        return compute_vested_shares(grant, scenario.exit_date)
    return grant.shares


def _settings_for_scenario(scenario: Scenario, tax_settings: TaxSettings) -> TaxSettings:
    if scenario.exit_date and tax_settings.sale_date is None:
        return tax_settings.model_copy(update={"sale_date": scenario.exit_date})
    return tax_settings


def summarize_scenario(
    scenario: Any,
    grants_by_id: Dict[str, Grant],
    tax_settings: Optional[TaxSettings] = None,
    amt_strategy: Optional[AmtStrategy] = None,
) -> ScenarioSummary:
    """Compute totals for one scenario across the grants it references.

    A scenario with no grant_ids applies to every grant in grants_by_id.
    Each grant is taxed at flat rates; AMT is then computed once over the
    combined income of all the scenario's sales.
    """
    scenario = scenario if isinstance(scenario, Scenario) else Scenario.model_validate(scenario)
    settings = _settings_for_scenario(scenario, tax_settings or TaxSettings())

    if scenario.grant_ids:
        grants = [grants_by_id[gid] for gid in scenario.grant_ids if gid in grants_by_id]
        missing = [gid for gid in scenario.grant_ids if gid not in grants_by_id]
        if missing:
            logger.debug(f"Scenario '{scenario.scenario_name}': grants not available: {missing}")
    else:
        grants = list(grants_by_id.values())

    summary = ScenarioSummary(scenario_name=scenario.scenario_name, exit_type=scenario.exit_type)

    results = []
    for grant in grants:
        result = compute_tax(
            grant,
            exercise_price=grant.strike_price,
            exit_price=resolve_exit_price(scenario, grant),
            shares=resolve_shares(scenario, grant),
            tax_settings=settings,
            amt_strategy=NoAmt(),
        )
        results.append(result)
        summary.shares_included += result.shares
        summary.grants_included += 1
        summary.gross_proceeds += result.gross_proceeds
        summary.exercise_cost += result.exercise_cost
        summary.tax_liability += result.total_tax

    summary.tax_liability += combined_amt(results, settings, amt_strategy)
    summary.net_proceeds = summary.gross_proceeds - summary.exercise_cost - summary.tax_liability
    if scenario.exit_price is not None:
        summary.exit_price = scenario.exit_price
    elif summary.shares_included:
        summary.exit_price = summary.gross_proceeds / summary.shares_included

    return summary


def aggregate_scenarios(
    scenarios: Iterable[Any],
    grants: Iterable[Any],
    tax_settings: Optional[TaxSettings] = None,
    *,
    company: Optional[str] = None,
    timeframe: Optional[str] = None,
    as_of: Optional[date] = None,
    amt_strategy: Optional[AmtStrategy] = None,
) -> List[ScenarioSummary]:
    """One summary per scenario, in input order.

    Args:
        scenarios: Scenarios or stored record mappings (None entries are skipped)
        grants: Grants or stored record mappings
        tax_settings: Rates and dates shared by every scenario
        company: Optional company filter applied before aggregation
        timeframe: Optional grant-date timeframe filter applied before aggregation
        as_of: Reference date for the timeframe filter
        amt_strategy: Optional AMT strategy override

    Returns:
        List of ScenarioSummary with
        net_proceeds == gross_proceeds - exercise_cost - tax_liability

    Raises:
        InvalidInputError: If two grants share an id
    """
    filtered = filter_grants(grants, company=company, timeframe=timeframe, as_of=as_of)

    grants_by_id = {}
    for index, grant in enumerate(filtered):
        key = grant.id or f"grant-{index + 1}"
        if key in grants_by_id:
            raise InvalidInputError(f"Duplicate grant id '{key}': scenario grant references are ambiguous")
        grants_by_id[key] = grant

    summaries = []
    for scenario in scenarios or []:
        if scenario is None:
            continue
        summaries.append(summarize_scenario(scenario, grants_by_id, tax_settings, amt_strategy))

    logger.debug(
        f"aggregate_scenarios: {len(summaries)} scenario(s) over {len(grants_by_id)} grant(s)"
    )
    return summaries


def build_common_scenarios(
    reference_price: Optional[float] = None,
    grant_ids: Optional[List[str]] = None,
    exit_date: Optional[date] = None,
) -> List[Scenario]:
    """Scenarios for the standard IPO / acquisition multipliers."""
    return [
        Scenario(
            scenario_name=preset["name"],
            exit_type=preset["exit_type"],
            multiplier=preset["multiplier"],
            reference_price=reference_price,
            grant_ids=list(grant_ids or []),
            exit_date=exit_date,
        )
        for preset in COMMON_SCENARIOS
    ]


def rank_scenarios(summaries: Iterable[ScenarioSummary]) -> List[ScenarioSummary]:
    """Summaries sorted by net proceeds, highest first."""
    return sorted(summaries, key=lambda s: s.net_proceeds, reverse=True)
