"""Vesting calculations.

Vesting is measured in whole calendar-month periods from the vesting start
date (1, 3 or 12 months per period). Nothing vests before the cliff; at the
cliff every period already elapsed vests at once; on or after the end date
the grant is fully vested. Share counts are always rounded down.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Any, Iterable, List, Optional

from dateutil.relativedelta import relativedelta

from .errors import OutOfRangeError
from .schemas import (
    Computed,
    Grant,
    MonthlyVesting,
    Overridden,
    VestEvent,
    VestingStatus,
    as_grant,
)

logger = logging.getLogger(__name__)


def _periods_elapsed(start: date, as_of: date, period_months: int) -> int:
    """Whole vesting periods between start and as_of."""
    if as_of < start:
        return 0
    delta = relativedelta(as_of, start)
    periods = (delta.years * 12 + delta.months) // period_months
    # Month-end starts clamp (Jan 31 + 1 month = Feb 28), so step forward while the next boundary has passed
    while start + relativedelta(months=(periods + 1) * period_months) <= as_of:
        periods += 1
    return periods


def _total_periods(start: date, end: date, period_months: int) -> int:
    """Vesting periods from start to end, counting a trailing partial period."""
    periods = _periods_elapsed(start, end, period_months)
    if start + relativedelta(months=periods * period_months) < end:
        periods += 1
    return max(periods, 1)


def _schedule_vested(grant: Grant, as_of: date) -> int:
    """Shares vested by the time-based schedule alone."""
    total = grant.shares
    start = grant.vesting_start_date
    end = grant.vesting_end
    if total == 0 or start is None or end is None:
        return 0
    if as_of < grant.cliff_date:
        return 0
    if as_of >= end:
        return total

    period_months = grant.vesting_frequency.months
    elapsed = _periods_elapsed(start, as_of, period_months)
    return total * elapsed // _total_periods(start, end, period_months)


def compute_vested_shares(grant: Any, as_of: Optional[date] = None) -> int:
    """Number of vested shares as of a date.

    Args:
        grant: Grant, stored record mapping, or None (returns 0)
        as_of: Reference date (defaults to today)

    Returns:
        Vested share count, 0 <= result <= total_shares

    Raises:
        OutOfRangeError: If an override or computed value exceeds total_shares
    """
    grant = as_grant(grant)
    if grant is None:
        return 0

    if isinstance(grant.vesting, Overridden):
        value = grant.vesting.value
        if grant.total_shares is not None and value > grant.total_shares:
            raise OutOfRangeError(
                f"vested share override {value} exceeds total shares {grant.total_shares}"
                f" (grant {grant.id or 'unknown'})"
            )
        return value

    as_of = as_of or date.today()

    if grant.double_trigger and (
        grant.liquidity_event_date is None or as_of < grant.liquidity_event_date
    ):
        return 0

    vested = _schedule_vested(grant, as_of)
    if not 0 <= vested <= grant.shares:
        raise OutOfRangeError(
            f"computed vested shares {vested} outside [0, {grant.shares}] (grant {grant.id or 'unknown'})"
        )
    return vested


def vesting_schedule(grant: Any) -> List[VestEvent]:
    """Every date on which shares vest, with newly vested and cumulative counts.

    Uses the time-based schedule only: overrides and double-trigger
    liquidity requirements are ignored.
    """
    grant = as_grant(grant)
    if grant is None:
        return []

    start = grant.vesting_start_date
    end = grant.vesting_end
    if grant.shares == 0 or start is None or end is None:
        return []

    plan = grant.model_copy(update={"vesting": Computed(), "double_trigger": False})
    period_months = grant.vesting_frequency.months
    cliff = grant.cliff_date

    # The cliff is always a boundary; one past the end date vests everything at once
    boundaries = {cliff, end}
    for n in range(1, _total_periods(start, end, period_months) + 1):
        boundary = min(start + relativedelta(months=n * period_months), end)
        if boundary >= cliff:
            boundaries.add(boundary)

    events = []
    previous = 0
    for vest_date in sorted(boundaries):
        cumulative = _schedule_vested(plan, vest_date)
        shares = cumulative - previous
        if shares <= 0:
            continue
        if not events and grant.cliff_months > 0:
            label = "cliff"
        elif vest_date >= end:
            label = "final"
        else:
            label = "vest"
        events.append(VestEvent(vest_date=vest_date, shares=shares, cumulative_shares=cumulative, event=label))
        previous = cumulative

    return events


def vesting_status(grant: Any, as_of: Optional[date] = None) -> VestingStatus:
    """Vested / unvested position and next vesting event as of a date."""
    as_of = as_of or date.today()
    grant = as_grant(grant)
    if grant is None:
        return VestingStatus(
            as_of=as_of, total_shares=0, vested_shares=0, unvested_shares=0,
            vested_percentage=0.0, is_cliff_passed=False, is_fully_vested=False,
        )

    total = grant.shares
    vested = compute_vested_shares(grant, as_of)
    cliff = grant.cliff_date

    next_event = None
    if vested < total:
        next_event = next((e for e in vesting_schedule(grant) if e.vest_date > as_of), None)

    return VestingStatus(
        as_of=as_of,
        total_shares=total,
        vested_shares=vested,
        unvested_shares=max(total - vested, 0),
        vested_percentage=(vested / total * 100) if total else 0.0,
        is_cliff_passed=cliff is None or as_of >= cliff,
        is_fully_vested=total > 0 and vested >= total,
        source="overridden" if grant.is_overridden else "computed",
        next_vesting_date=next_event.vest_date if next_event else None,
        next_vesting_shares=next_event.shares if next_event else 0,
        days_until_next_vesting=(next_event.vest_date - as_of).days if next_event else None,
    )


def upcoming_vesting_events(
    grant: Any,
    as_of: Optional[date] = None,
    months_ahead: int = 6,
) -> List[VestEvent]:
    """Vesting events after as_of and within months_ahead months."""
    as_of = as_of or date.today()
    horizon = as_of + relativedelta(months=months_ahead)
    return [e for e in vesting_schedule(grant) if as_of < e.vest_date <= horizon]


def combined_vesting_schedule(
    grants: Iterable[Any],
    start: Optional[date] = None,
    months_ahead: int = 36,
) -> List[MonthlyVesting]:
    """Aggregate vesting across grants by calendar month.

    Values use each grant's current_fmv (0 when unknown). Months are sorted
    and carry running cumulative totals.
    """
    start = start or date.today()
    end = start + relativedelta(months=months_ahead)
    by_month = defaultdict(lambda: {"shares": 0, "value": 0.0, "details": []})

    for raw in grants or []:
        grant = as_grant(raw)
        if grant is None:
            continue
        fmv = grant.current_fmv or 0.0
        for event in vesting_schedule(grant):
            if not start <= event.vest_date <= end:
                continue
            month = by_month[event.vest_date.strftime("%Y-%m")]
            value = event.shares * fmv
            month["shares"] += event.shares
            month["value"] += value
            month["details"].append({
                "grant_id": grant.id,
                "company": grant.company_name,
                "grant_type": grant.grant_type.value,
                "shares": event.shares,
                "value": value,
            })

    schedule = []
    cumulative_shares = 0
    cumulative_value = 0.0
    for key in sorted(by_month):
        month = by_month[key]
        cumulative_shares += month["shares"]
        cumulative_value += month["value"]
        schedule.append(MonthlyVesting(
            month=key,
            shares=month["shares"],
            value=month["value"],
            cumulative_shares=cumulative_shares,
            cumulative_value=cumulative_value,
            details=month["details"],
        ))

    logger.debug(f"combined_vesting_schedule: {len(schedule)} month(s) from {start} to {end}")
    return schedule
