"""Late-payment penalties on unpaid historical periods.

For every period before the target that still has an unpaid remainder
(owed minus confirmed payments attributed to that period), the penalty is

    remainder x daily_rate_percent / 100 x days_late

where ``days_late`` counts whole days between the period's due date (at
midnight) and ``as_of``. Per-unit penalties are summed over all periods and
rounded to cents, half away from zero. Units whose overall arrears are zero
are never penalised.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Union

from .allocation import DEFAULT_RULES, AllocationRules
from .arrears import ArrearsBreakdown, accumulate_arrears
from .snapshot import ZERO, BillingRules, BillingSnapshot, Period

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

AsOf = Union[date, datetime]


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def due_date_for(period: Period, due_day: int) -> date:
    # A due day past the end of the month rolls into the next one (31 Feb -> 3 Mar).
    return date(period.year, period.month, 1) + timedelta(days=due_day - 1)


def as_naive_datetime(as_of: AsOf) -> datetime:
    if isinstance(as_of, datetime):
        return as_of.replace(tzinfo=None)
    return datetime.combine(as_of, datetime.min.time())


def days_late(due: date, as_of: AsOf) -> int:
    elapsed = as_naive_datetime(as_of) - datetime.combine(due, datetime.min.time())
    if elapsed <= timedelta(0):
        return 0
    return elapsed.days


def compute_penalties(
    snapshot: BillingSnapshot,
    target: Period,
    billing_rules: Optional[BillingRules],
    as_of: AsOf,
    rules: AllocationRules = DEFAULT_RULES,
    breakdown: Optional[ArrearsBreakdown] = None,
) -> Dict[int, Decimal]:
    penalties = {unit.id: ZERO for unit in snapshot.units}
    if billing_rules is None or not billing_rules.is_complete:
        return penalties

    if breakdown is None:
        breakdown = accumulate_arrears(snapshot, target, rules)
    daily_rate = billing_rules.daily_penalty_rate_percent / HUNDRED

    for unit in snapshot.units:
        if breakdown.arrears.get(unit.id, ZERO) <= 0:
            continue
        total = ZERO
        for period in breakdown.periods:
            unpaid = max(ZERO, breakdown.owed_in(unit.id, period) - breakdown.paid_in(unit.id, period))
            if unpaid <= 0:
                continue
            late = days_late(due_date_for(period, billing_rules.due_day), as_of)
            if late > 0:
                total += unpaid * daily_rate * Decimal(late)
        penalties[unit.id] = round_money(total)

    logger.debug(
        "Penalties for association %s at %s: %s",
        snapshot.association_id,
        target,
        {unit_id: str(amount) for unit_id, amount in penalties.items() if amount > 0},
    )
    return penalties
