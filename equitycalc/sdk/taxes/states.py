"""Multi-state allocation of equity income.

Income earned over a vesting window is sourced to each state in proportion
to the workdays (Monday to Friday) spent resident there during the window.
Workdays outside every residency period are not counted, so percentages
always sum to 1 across the states that were covered.
"""

from datetime import date, timedelta
from typing import Any, Dict, Iterable, List

from ..schemas import StateAllocation, StateResidency, TaxSettings, as_grant
from .rates import get_state_rate


def count_workdays(start: date, end: date) -> int:
    """Weekdays from start through end, inclusive."""
    if end < start:
        return 0
    weeks, remainder = divmod((end - start).days + 1, 7)
    count = weeks * 5
    tail = start + timedelta(days=weeks * 7)
    for offset in range(remainder):
        if (tail + timedelta(days=offset)).weekday() < 5:
            count += 1
    return count


def allocate_workdays(
    residency: Iterable[StateResidency],
    start: date,
    end: date,
) -> List[StateAllocation]:
    """Split the window [start, end] across residency periods by workdays.

    Returns:
        One StateAllocation per state in first-seen order, or [] when no
        residency period overlaps the window
    """
    workdays: Dict[str, int] = {}
    rates: Dict[str, float] = {}
    for period in residency:
        period = period if isinstance(period, StateResidency) else StateResidency.model_validate(period)
        first = max(start, period.start_date)
        last = min(end, period.end_date) if period.end_date else end
        days = count_workdays(first, last)
        if not days:
            continue
        workdays[period.state] = workdays.get(period.state, 0) + days
        if period.state not in rates:
            rates[period.state] = period.rate if period.rate is not None else get_state_rate(period.state)

    covered = sum(workdays.values())
    if not covered:
        return []
    return [
        StateAllocation(state=state, workdays=days, percentage=days / covered, rate=rates[state])
        for state, days in workdays.items()
    ]


def blended_state_rate(allocation: Iterable[StateAllocation]) -> float:
    """Workday-weighted state rate."""
    return sum(a.percentage * a.rate for a in allocation)


def state_allocation_for(grant: Any, tax_settings: TaxSettings) -> List[StateAllocation]:
    """Workday allocation of a grant's vesting window.

    Empty outside comprehensive mode, without residency periods, or when the
    grant has no vesting window.
    """
    if tax_settings.mode != "comprehensive" or not tax_settings.residency:
        return []
    grant = as_grant(grant)
    if grant is None:
        return []
    start = grant.vesting_start_date or grant.grant_date
    end = grant.vesting_end
    if start is None or end is None:
        return []
    return allocate_workdays(tax_settings.residency, start, end)


def apply_state_tax(allocation: List[StateAllocation], taxable_income: float) -> List[StateAllocation]:
    """Fill in allocated income and state tax for each state."""
    return [
        a.model_copy(update={
            "allocated_income": taxable_income * a.percentage,
            "state_tax": taxable_income * a.percentage * a.rate,
        })
        for a in allocation
    ]
