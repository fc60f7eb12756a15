from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from .allocation import DEFAULT_RULES, AllocationRules
from .ledger import PeriodLedger, build_period_ledger
from .snapshot import ZERO, BillingSnapshot, Period

logger = logging.getLogger(__name__)


@dataclass
class ArrearsBreakdown:
    target: Period
    periods: List[Period] = field(default_factory=list)
    ledgers: Dict[Period, PeriodLedger] = field(default_factory=dict)
    total_owed: Dict[int, Decimal] = field(default_factory=dict)
    total_paid: Dict[int, Decimal] = field(default_factory=dict)
    # unit_id -> attributed period -> confirmed amount paid for that period
    paid_by_period: Dict[int, Dict[Period, Decimal]] = field(default_factory=dict)
    arrears: Dict[int, Decimal] = field(default_factory=dict)

    def owed_in(self, unit_id: int, period: Period) -> Decimal:
        ledger = self.ledgers.get(period)
        if ledger is None:
            return ZERO
        return ledger.owed.get(unit_id, ZERO)

    def paid_in(self, unit_id: int, period: Period) -> Decimal:
        return self.paid_by_period.get(unit_id, {}).get(period, ZERO)


def prior_periods(snapshot: BillingSnapshot, target: Period) -> List[Period]:
    """Periods strictly before ``target`` with at least one recorded expense."""
    return [period for period in snapshot.expense_periods() if period < target]


def accumulate_arrears(
    snapshot: BillingSnapshot,
    target: Period,
    rules: AllocationRules = DEFAULT_RULES,
) -> ArrearsBreakdown:
    unit_ids = [unit.id for unit in snapshot.units]
    breakdown = ArrearsBreakdown(
        target=target,
        periods=prior_periods(snapshot, target),
        total_owed={unit_id: ZERO for unit_id in unit_ids},
        total_paid={unit_id: ZERO for unit_id in unit_ids},
        paid_by_period={unit_id: {} for unit_id in unit_ids},
    )

    for period in breakdown.periods:
        ledger = build_period_ledger(snapshot, period, rules)
        breakdown.ledgers[period] = ledger
        for unit_id in unit_ids:
            breakdown.total_owed[unit_id] += ledger.owed[unit_id]

    # Payments count even when the period they settle has no expenses.
    for payment in snapshot.confirmed_payments():
        if payment.unit_id not in breakdown.total_paid:
            continue
        by_period = breakdown.paid_by_period[payment.unit_id]
        by_period[payment.period] = by_period.get(payment.period, ZERO) + payment.amount
        if payment.period < target:
            breakdown.total_paid[payment.unit_id] += payment.amount

    for unit_id in unit_ids:
        breakdown.arrears[unit_id] = max(ZERO, breakdown.total_owed[unit_id] - breakdown.total_paid[unit_id])

    logger.debug(
        "Arrears for association %s before %s: %d prior periods, %d units in debt",
        snapshot.association_id,
        target,
        len(breakdown.periods),
        sum(1 for amount in breakdown.arrears.values() if amount > 0),
    )
    return breakdown


def compute_arrears(
    snapshot: BillingSnapshot,
    target: Period,
    rules: AllocationRules = DEFAULT_RULES,
) -> Dict[int, Decimal]:
    return dict(accumulate_arrears(snapshot, target, rules).arrears)
