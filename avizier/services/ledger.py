from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from .allocation import DEFAULT_RULES, AllocationRules, allocate_expense
from .snapshot import ZERO, BillingSnapshot, Period

logger = logging.getLogger(__name__)


@dataclass
class PeriodLedger:
    period: Period
    # unit_id -> expense shares + recurring funds for the period
    owed: Dict[int, Decimal] = field(default_factory=dict)
    # unit_id -> category label -> share
    expense_shares: Dict[int, Dict[str, Decimal]] = field(default_factory=dict)
    # category label -> sum of allocated shares
    category_totals: Dict[str, Decimal] = field(default_factory=dict)
    # category label -> sum of invoiced amounts
    category_amounts: Dict[str, Decimal] = field(default_factory=dict)
    categories: List[str] = field(default_factory=list)
    funds_per_unit: Decimal = ZERO
    expense_count: int = 0

    @property
    def has_expenses(self) -> bool:
        return self.expense_count > 0

    def maintenance_for(self, unit_id: int) -> Decimal:
        return sum(self.expense_shares.get(unit_id, {}).values(), ZERO)


def build_period_ledger(
    snapshot: BillingSnapshot,
    period: Period,
    rules: AllocationRules = DEFAULT_RULES,
) -> PeriodLedger:
    units = snapshot.units
    expenses = snapshot.expenses_for(period)
    funds_per_unit = snapshot.monthly_funds_total
    ledger = PeriodLedger(
        period=period,
        owed={unit.id: ZERO for unit in units},
        expense_shares={unit.id: {} for unit in units},
        funds_per_unit=funds_per_unit,
        expense_count=len(expenses),
    )

    for expense in expenses:
        label = expense.category_label
        if label not in ledger.categories:
            ledger.categories.append(label)
        ledger.category_amounts[label] = ledger.category_amounts.get(label, ZERO) + expense.amount
        shares = allocate_expense(expense, units, rules)
        for unit_id, share in shares.items():
            unit_shares = ledger.expense_shares[unit_id]
            unit_shares[label] = unit_shares.get(label, ZERO) + share
            ledger.owed[unit_id] += share
            ledger.category_totals[label] = ledger.category_totals.get(label, ZERO) + share

    for unit in units:
        ledger.owed[unit.id] += funds_per_unit

    logger.debug(
        "Ledger %s for association %s: %d expenses over %d units",
        period,
        snapshot.association_id,
        len(expenses),
        len(units),
    )
    return ledger
