"""Read-only input records for the billing engine.

The engine works on a point-in-time ``BillingSnapshot`` of one association:
its units, expenses, recurring funds, payments and billing rules. Nothing in
``avizier.services`` queries the database except :func:`load_snapshot`, which
is the adapter between the ORM rows and these records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from sqlalchemy.orm import Session

from ..constants import PAYMENT_STATUS_CONFIRMED, category_label
from ..core.errors import AssociationNotFoundError
from ..models.models import (
    Association,
    Expense,
    ManualAllocationEntry,
    MeterReading,
    Payment,
    RecurringFund,
    Unit,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def as_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Period(NamedTuple):
    year: int
    month: int

    def previous(self) -> "Period":
        if self.month == 1:
            return Period(self.year - 1, 12)
        return Period(self.year, self.month - 1)

    def next(self) -> "Period":
        if self.month == 12:
            return Period(self.year + 1, 1)
        return Period(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year}-{self.month:02d}"


@dataclass(frozen=True)
class UnitRecord:
    id: int
    association_id: int
    quota_share: Decimal = ZERO
    occupant_count: int = 0
    label: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "quota_share", as_decimal(self.quota_share))
        object.__setattr__(self, "occupant_count", int(self.occupant_count or 0))
        if not self.label:
            object.__setattr__(self, "label", str(self.id))


@dataclass(frozen=True)
class ExpenseRecord:
    id: int
    association_id: int
    amount: Decimal
    distribution_mode: Any
    month: int
    year: int
    category_label: str = ""
    category_code: Optional[str] = None
    invoice_date: Optional[date] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", as_decimal(self.amount))
        if not self.category_label:
            object.__setattr__(self, "category_label", category_label(self.category_code or "ALTE_CHELTUIELI"))

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)


@dataclass(frozen=True)
class FundRecord:
    id: int
    association_id: int
    monthly_amount: Decimal
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "monthly_amount", as_decimal(self.monthly_amount))


@dataclass(frozen=True)
class PaymentRecord:
    id: int
    unit_id: int
    amount: Decimal
    status: str
    attributed_month: int
    attributed_year: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", as_decimal(self.amount))

    @property
    def period(self) -> Period:
        return Period(self.attributed_year, self.attributed_month)

    @property
    def is_confirmed(self) -> bool:
        return self.status == PAYMENT_STATUS_CONFIRMED


@dataclass(frozen=True)
class MeterReadingRecord:
    unit_id: int
    meter_type: str
    month: int
    year: int
    value: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", as_decimal(self.value))

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)


@dataclass(frozen=True)
class ManualEntryRecord:
    expense_id: int
    unit_id: int
    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", as_decimal(self.amount))


@dataclass(frozen=True)
class BillingRules:
    due_day: Optional[int] = None
    daily_penalty_rate_percent: Optional[Decimal] = None

    def __post_init__(self) -> None:
        if self.daily_penalty_rate_percent is not None:
            object.__setattr__(self, "daily_penalty_rate_percent", as_decimal(self.daily_penalty_rate_percent))

    @property
    def is_complete(self) -> bool:
        return self.due_day is not None and self.daily_penalty_rate_percent is not None


@dataclass(frozen=True)
class BillingSnapshot:
    association_id: int
    units: Tuple[UnitRecord, ...] = ()
    expenses: Tuple[ExpenseRecord, ...] = ()
    funds: Tuple[FundRecord, ...] = ()
    payments: Tuple[PaymentRecord, ...] = ()
    billing_rules: BillingRules = field(default_factory=BillingRules)
    meter_readings: Tuple[MeterReadingRecord, ...] = ()
    manual_entries: Tuple[ManualEntryRecord, ...] = ()

    @classmethod
    def for_association(
        cls,
        association_id: int,
        *,
        units: Iterable[UnitRecord] = (),
        expenses: Iterable[ExpenseRecord] = (),
        funds: Iterable[FundRecord] = (),
        payments: Iterable[PaymentRecord] = (),
        billing_rules: Optional[BillingRules] = None,
        meter_readings: Iterable[MeterReadingRecord] = (),
        manual_entries: Iterable[ManualEntryRecord] = (),
    ) -> "BillingSnapshot":
        """Build a snapshot keeping only the records that belong to ``association_id``."""
        own_units = tuple(unit for unit in units if unit.association_id == association_id)
        unit_ids = {unit.id for unit in own_units}
        own_expenses = tuple(expense for expense in expenses if expense.association_id == association_id)
        expense_ids = {expense.id for expense in own_expenses}
        return cls(
            association_id=association_id,
            units=own_units,
            expenses=own_expenses,
            funds=tuple(fund for fund in funds if fund.association_id == association_id),
            payments=tuple(payment for payment in payments if payment.unit_id in unit_ids),
            billing_rules=billing_rules or BillingRules(),
            meter_readings=tuple(reading for reading in meter_readings if reading.unit_id in unit_ids),
            manual_entries=tuple(
                entry
                for entry in manual_entries
                if entry.expense_id in expense_ids and entry.unit_id in unit_ids
            ),
        )

    @property
    def monthly_funds_total(self) -> Decimal:
        return sum((fund.monthly_amount for fund in self.funds), ZERO)

    def expenses_for(self, period: Period) -> List[ExpenseRecord]:
        return [expense for expense in self.expenses if expense.period == period]

    def expense_periods(self) -> List[Period]:
        return sorted({expense.period for expense in self.expenses})

    def confirmed_payments(self) -> List[PaymentRecord]:
        return [payment for payment in self.payments if payment.is_confirmed]


def _unit_label(unit: Unit) -> str:
    if unit.staircase:
        return f"{unit.staircase}-{unit.number}"
    return unit.number


def load_snapshot(session: Session, association_id: int) -> BillingSnapshot:
    association = session.get(Association, association_id)
    if not association:
        raise AssociationNotFoundError(association_id)

    units = (
        session.query(Unit)
        .filter(Unit.association_id == association_id)
        .order_by(Unit.staircase.asc(), Unit.id.asc())
        .all()
    )
    unit_ids = [unit.id for unit in units]
    expenses = (
        session.query(Expense)
        .filter(Expense.association_id == association_id)
        .order_by(Expense.year.asc(), Expense.month.asc(), Expense.id.asc())
        .all()
    )
    funds = (
        session.query(RecurringFund)
        .filter(RecurringFund.association_id == association_id)
        .order_by(RecurringFund.id.asc())
        .all()
    )
    payments: List[Payment] = []
    readings: List[MeterReading] = []
    manual_entries: List[ManualAllocationEntry] = []
    if unit_ids:
        payments = session.query(Payment).filter(Payment.unit_id.in_(unit_ids)).order_by(Payment.id.asc()).all()
        readings = session.query(MeterReading).filter(MeterReading.unit_id.in_(unit_ids)).all()
    if expenses:
        manual_entries = (
            session.query(ManualAllocationEntry)
            .filter(ManualAllocationEntry.expense_id.in_([expense.id for expense in expenses]))
            .all()
        )

    rate = association.daily_penalty_rate_percent
    snapshot = BillingSnapshot.for_association(
        association_id,
        units=[
            UnitRecord(
                id=unit.id,
                association_id=unit.association_id,
                quota_share=unit.quota_share or 0,
                occupant_count=unit.occupant_count or 0,
                label=_unit_label(unit),
            )
            for unit in units
        ],
        expenses=[
            ExpenseRecord(
                id=expense.id,
                association_id=expense.association_id,
                amount=expense.amount,
                distribution_mode=expense.distribution_mode,
                month=expense.month,
                year=expense.year,
                category_label=category_label(expense.category),
                category_code=expense.category,
                invoice_date=expense.invoice_date,
            )
            for expense in expenses
        ],
        funds=[
            FundRecord(
                id=fund.id,
                association_id=fund.association_id,
                monthly_amount=fund.monthly_amount,
                name=fund.name,
            )
            for fund in funds
        ],
        payments=[
            PaymentRecord(
                id=payment.id,
                unit_id=payment.unit_id,
                amount=payment.amount,
                status=payment.status,
                attributed_month=payment.attributed_month,
                attributed_year=payment.attributed_year,
            )
            for payment in payments
        ],
        billing_rules=BillingRules(
            due_day=association.due_day,
            daily_penalty_rate_percent=rate,
        ),
        meter_readings=[
            MeterReadingRecord(
                unit_id=reading.unit_id,
                meter_type=reading.meter_type,
                month=reading.month,
                year=reading.year,
                value=reading.value,
            )
            for reading in readings
        ],
        manual_entries=[
            ManualEntryRecord(expense_id=entry.expense_id, unit_id=entry.unit_id, amount=entry.amount)
            for entry in manual_entries
        ],
    )
    logger.debug(
        "Loaded snapshot for association %s: %d units, %d expenses, %d payments",
        association_id,
        len(snapshot.units),
        len(snapshot.expenses),
        len(snapshot.payments),
    )
    return snapshot


def snapshot_summary(snapshot: BillingSnapshot) -> Dict[str, int]:
    return {
        "units": len(snapshot.units),
        "expenses": len(snapshot.expenses),
        "funds": len(snapshot.funds),
        "payments": len(snapshot.payments),
    }
