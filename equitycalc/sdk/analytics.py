"""Portfolio analytics.

Totals across a filtered set of grants: share counts, the value and
exercise cost of vested shares, and breakdowns by grant type and company.
Uses the same company / timeframe filters as scenario aggregation.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .constants import GrantType
from .exercise import compute_current_value, compute_exercise_cost
from .scenarios import filter_grants
from .schemas import PortfolioSummary, ValueShare
from .vesting import compute_vested_shares

logger = logging.getLogger(__name__)


def _breakdown(values: Dict[str, float]) -> List[ValueShare]:
    """Sorted by value, highest first, with each entry's share of the total."""
    total = sum(values.values())
    return [
        ValueShare(name=name, value=value, percentage=value / total * 100 if total > 0 else 0.0)
        for name, value in sorted(values.items(), key=lambda item: item[1], reverse=True)
    ]


def portfolio_summary(
    grants: Iterable[Any],
    company: Optional[str] = None,
    timeframe: Optional[str] = None,
    as_of: Optional[date] = None,
) -> PortfolioSummary:
    """Summarize vested position and value across grants.

    Args:
        grants: Grants or stored record mappings
        company: Optional company filter
        timeframe: Optional grant-date timeframe filter ("month", "quarter", "year")
        as_of: Vesting date and end of the timeframe window (defaults to today)

    Returns:
        PortfolioSummary; values use each grant's current_fmv (0 when unknown)

    Raises:
        InvalidInputError: If timeframe is not recognized
        OutOfRangeError: If a vested share override exceeds a grant's total
    """
    as_of = as_of or date.today()
    filtered = filter_grants(grants, company=company, timeframe=timeframe, as_of=as_of)

    summary = PortfolioSummary(as_of=as_of, grants_included=len(filtered))
    by_type: Dict[str, float] = {}
    by_company: Dict[str, float] = {}

    for grant in filtered:
        vested = compute_vested_shares(grant, as_of)
        value = compute_current_value(vested, grant.current_fmv)

        summary.total_shares += grant.shares
        summary.vested_shares += vested
        summary.unvested_shares += max(grant.shares - vested, 0)
        summary.current_value += value
        summary.exercise_cost += compute_exercise_cost(vested, grant.strike_price)

        by_type[grant.grant_type.value] = by_type.get(grant.grant_type.value, 0.0) + value
        if grant.company_name:
            by_company[grant.company_name] = by_company.get(grant.company_name, 0.0) + value
        if grant.grant_type == GrantType.ISO:
            summary.iso_value += value
        elif grant.grant_type == GrantType.RSU:
            summary.rsu_value += value

    summary.value_by_grant_type = _breakdown(by_type)
    summary.value_by_company = _breakdown(by_company)

    logger.debug(
        f"portfolio_summary: {summary.grants_included} grant(s), "
        f"{summary.vested_shares}/{summary.total_shares} vested as of {as_of}"
    )
    return summary
