"""Splitting one expense across the units of an association.

Each distribution mode is served by a strategy with a single method,
``allocate(expense, units) -> {unit_id: share}``. ``AllocationRules`` maps
modes to strategies; the default rules follow the association's notice-board
semantics:

* ``BY_QUOTA_SHARE``: amount x quota / sum(quota)
* ``BY_OCCUPANT_COUNT``: amount x occupants / sum(occupants)
* ``BY_UNIT_EQUAL``: amount / number of units
* ``MANUAL`` and ``BY_CONSUMPTION``: zero, unless an extension strategy
  (``ManualAllocation``, ``MeteredConsumptionAllocation``) is plugged in
* ``UNRECOGNIZED``: any other stored mode, split by quota share

A zero denominator always yields a zero share for every unit.
"""

from __future__ import annotations

import enum
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional, Protocol, Sequence, Tuple

from ..constants import CATEGORY_METER_TYPES, STORED_DISTRIBUTION_MODES
from .snapshot import (
    ZERO,
    ExpenseRecord,
    ManualEntryRecord,
    MeterReadingRecord,
    Period,
    UnitRecord,
)


class DistributionMode(str, enum.Enum):
    BY_QUOTA_SHARE = "BY_QUOTA_SHARE"
    BY_OCCUPANT_COUNT = "BY_OCCUPANT_COUNT"
    BY_UNIT_EQUAL = "BY_UNIT_EQUAL"
    MANUAL = "MANUAL"
    BY_CONSUMPTION = "BY_CONSUMPTION"
    UNRECOGNIZED = "UNRECOGNIZED"


def resolve_mode(raw) -> DistributionMode:
    if isinstance(raw, DistributionMode):
        return raw
    code = str(raw or "").strip().upper()
    code = STORED_DISTRIBUTION_MODES.get(code, code)
    try:
        mode = DistributionMode(code)
    except ValueError:
        return DistributionMode.UNRECOGNIZED
    return mode


class AllocationStrategy(Protocol):
    def allocate(self, expense: ExpenseRecord, units: Sequence[UnitRecord]) -> Dict[int, Decimal]:
        ...


def _weighted_split(amount: Decimal, weights: Mapping[int, Decimal]) -> Dict[int, Decimal]:
    total_weight = sum(weights.values(), ZERO)
    if total_weight <= 0:
        return {unit_id: ZERO for unit_id in weights}
    return {unit_id: amount * weight / total_weight for unit_id, weight in weights.items()}


class QuotaShareAllocation:
    def allocate(self, expense: ExpenseRecord, units: Sequence[UnitRecord]) -> Dict[int, Decimal]:
        return _weighted_split(expense.amount, {unit.id: unit.quota_share for unit in units})


class OccupantCountAllocation:
    def allocate(self, expense: ExpenseRecord, units: Sequence[UnitRecord]) -> Dict[int, Decimal]:
        return _weighted_split(expense.amount, {unit.id: Decimal(unit.occupant_count) for unit in units})


class EqualAllocation:
    def allocate(self, expense: ExpenseRecord, units: Sequence[UnitRecord]) -> Dict[int, Decimal]:
        if not units:
            return {}
        share = expense.amount / Decimal(len(units))
        return {unit.id: share for unit in units}


class ZeroAllocation:
    """Placeholder for modes whose per-unit amounts come from elsewhere."""

    def allocate(self, expense: ExpenseRecord, units: Sequence[UnitRecord]) -> Dict[int, Decimal]:
        return {unit.id: ZERO for unit in units}


class ManualAllocation:
    """Amounts typed in per unit by the administrator for a given expense."""

    def __init__(self, entries: Iterable[ManualEntryRecord]) -> None:
        self._amounts: Dict[Tuple[int, int], Decimal] = defaultdict(lambda: ZERO)
        for entry in entries:
            self._amounts[(entry.expense_id, entry.unit_id)] += entry.amount

    def allocate(self, expense: ExpenseRecord, units: Sequence[UnitRecord]) -> Dict[int, Decimal]:
        return {unit.id: self._amounts.get((expense.id, unit.id), ZERO) for unit in units}


class MeteredConsumptionAllocation:
    """Split by each unit's meter consumption in the expense's period.

    Consumption is the period's index minus the previous month's index of the
    same meter type, floored at zero. Units without both readings consume
    nothing. When the expense category is not metered, or nobody consumed
    anything, the expense falls back to the quota-share split.
    """

    def __init__(self, readings: Iterable[MeterReadingRecord], fallback: Optional[AllocationStrategy] = None) -> None:
        self._readings: Dict[Tuple[int, str, Period], Decimal] = defaultdict(lambda: ZERO)
        for reading in readings:
            self._readings[(reading.unit_id, reading.meter_type, reading.period)] += reading.value
        self._fallback = fallback or QuotaShareAllocation()

    def consumption(self, unit_id: int, meter_type: str, period: Period) -> Decimal:
        current = self._readings.get((unit_id, meter_type, period))
        previous = self._readings.get((unit_id, meter_type, period.previous()))
        if current is None or previous is None:
            return ZERO
        return max(ZERO, current - previous)

    def allocate(self, expense: ExpenseRecord, units: Sequence[UnitRecord]) -> Dict[int, Decimal]:
        meter_type = CATEGORY_METER_TYPES.get(expense.category_code or "")
        if meter_type is None:
            return self._fallback.allocate(expense, units)
        consumption = {unit.id: self.consumption(unit.id, meter_type, expense.period) for unit in units}
        if sum(consumption.values(), ZERO) <= 0:
            return self._fallback.allocate(expense, units)
        return _weighted_split(expense.amount, consumption)


class AllocationRules:
    """Immutable mapping from distribution mode to strategy."""

    def __init__(self, strategies: Mapping[DistributionMode, AllocationStrategy]) -> None:
        missing = set(DistributionMode) - set(strategies)
        if missing:
            raise ValueError(f"No allocation strategy for: {', '.join(sorted(mode.value for mode in missing))}")
        self._strategies = dict(strategies)

    def strategy_for(self, mode: DistributionMode) -> AllocationStrategy:
        return self._strategies[mode]

    def with_strategy(self, mode: DistributionMode, strategy: AllocationStrategy) -> "AllocationRules":
        strategies = dict(self._strategies)
        strategies[mode] = strategy
        return AllocationRules(strategies)


DEFAULT_RULES = AllocationRules(
    {
        DistributionMode.BY_QUOTA_SHARE: QuotaShareAllocation(),
        DistributionMode.BY_OCCUPANT_COUNT: OccupantCountAllocation(),
        DistributionMode.BY_UNIT_EQUAL: EqualAllocation(),
        DistributionMode.MANUAL: ZeroAllocation(),
        DistributionMode.BY_CONSUMPTION: ZeroAllocation(),
        DistributionMode.UNRECOGNIZED: QuotaShareAllocation(),
    }
)


def allocate_expense(
    expense: ExpenseRecord,
    units: Sequence[UnitRecord],
    rules: AllocationRules = DEFAULT_RULES,
) -> Dict[int, Decimal]:
    strategy = rules.strategy_for(resolve_mode(expense.distribution_mode))
    shares = strategy.allocate(expense, units)
    return {unit.id: shares.get(unit.id, ZERO) for unit in units}


def share_of(
    expense: ExpenseRecord,
    unit: UnitRecord,
    units: Sequence[UnitRecord],
    rules: AllocationRules = DEFAULT_RULES,
) -> Decimal:
    return allocate_expense(expense, units, rules).get(unit.id, ZERO)


def extended_rules(
    snapshot,
    *,
    metered_consumption: bool = False,
    manual_allocations: bool = False,
    base: AllocationRules = DEFAULT_RULES,
) -> AllocationRules:
    """Plug the snapshot's meter readings and manual entries into ``base``."""
    rules = base
    if metered_consumption:
        rules = rules.with_strategy(
            DistributionMode.BY_CONSUMPTION,
            MeteredConsumptionAllocation(snapshot.meter_readings),
        )
    if manual_allocations:
        rules = rules.with_strategy(DistributionMode.MANUAL, ManualAllocation(snapshot.manual_entries))
    return rules
