from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from .allocation import DEFAULT_RULES, AllocationRules
from .arrears import accumulate_arrears
from .ledger import build_period_ledger
from .penalties import AsOf, compute_penalties
from .snapshot import ZERO, BillingRules, BillingSnapshot, Period

logger = logging.getLogger(__name__)


@dataclass
class UnitStatement:
    unit_id: int
    label: str
    expenses: Dict[str, Decimal]
    maintenance: Decimal
    funds: Decimal
    arrears: Decimal
    penalty: Decimal

    @property
    def total(self) -> Decimal:
        return self.maintenance + self.funds + self.arrears + self.penalty


@dataclass
class StatementTotals:
    categories: Dict[str, Decimal] = field(default_factory=dict)
    maintenance: Decimal = ZERO
    funds: Decimal = ZERO
    arrears: Decimal = ZERO
    penalties: Decimal = ZERO
    total: Decimal = ZERO


@dataclass
class BillingStatement:
    association_id: int
    period: Period
    as_of: AsOf
    categories: List[str] = field(default_factory=list)
    units: List[UnitStatement] = field(default_factory=list)
    totals: StatementTotals = field(default_factory=StatementTotals)
    has_expenses: bool = False
    penalties_applied: bool = False

    def for_unit(self, unit_id: int) -> Optional[UnitStatement]:
        return next((line for line in self.units if line.unit_id == unit_id), None)


def assemble_statement(
    snapshot: BillingSnapshot,
    period: Period,
    as_of: AsOf,
    rules: AllocationRules = DEFAULT_RULES,
    billing_rules: Optional[BillingRules] = None,
) -> BillingStatement:
    """One statement per unit for ``period``, plus association-wide totals.

    ``billing_rules`` defaults to the snapshot's own rules. When they lack a due
    day or a penalty rate, penalties are skipped and ``penalties_applied`` is
    False.
    """
    billing_rules = billing_rules if billing_rules is not None else snapshot.billing_rules
    statement = BillingStatement(association_id=snapshot.association_id, period=period, as_of=as_of)
    if not snapshot.units:
        statement.has_expenses = bool(snapshot.expenses_for(period))
        logger.info("Association %s has no units; returning an empty statement", snapshot.association_id)
        return statement

    current = build_period_ledger(snapshot, period, rules)
    breakdown = accumulate_arrears(snapshot, period, rules)
    statement.penalties_applied = billing_rules.is_complete
    if not statement.penalties_applied:
        logger.warning(
            "Association %s has no due day or penalty rate configured; penalties skipped for %s",
            snapshot.association_id,
            period,
        )
    penalties = compute_penalties(snapshot, period, billing_rules, as_of, rules, breakdown=breakdown)

    statement.categories = list(current.categories)
    statement.has_expenses = current.has_expenses
    totals = statement.totals
    for label in current.categories:
        totals.categories[label] = current.category_totals.get(label, ZERO)

    for unit in snapshot.units:
        line = UnitStatement(
            unit_id=unit.id,
            label=unit.label,
            expenses=dict(current.expense_shares.get(unit.id, {})),
            maintenance=current.maintenance_for(unit.id),
            funds=current.funds_per_unit,
            arrears=breakdown.arrears.get(unit.id, ZERO),
            penalty=penalties.get(unit.id, ZERO),
        )
        statement.units.append(line)
        totals.maintenance += line.maintenance
        totals.funds += line.funds
        totals.arrears += line.arrears
        totals.penalties += line.penalty
        totals.total += line.total

    logger.info(
        "Assembled statement for association %s, %s: %d units, total %s",
        snapshot.association_id,
        period,
        len(statement.units),
        totals.total,
    )
    return statement


def default_as_of() -> datetime:
    return datetime.now(timezone.utc)
