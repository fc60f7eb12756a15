from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from .penalties import AsOf, as_naive_datetime, due_date_for, round_money
from .snapshot import BillingSnapshot, Period
from .statements import BillingStatement


@dataclass(frozen=True)
class ReceiptLine:
    label: str
    amount: Decimal
    kind: str  # expense|fund


@dataclass
class Receipt:
    number: int
    unit_id: int
    unit_label: str
    period: Period
    maintenance: Decimal
    funds: Decimal
    arrears: Decimal
    penalty: Decimal
    total: Decimal
    due_date: Optional[date]
    lines: List[ReceiptLine] = field(default_factory=list)


def _add_month(value: date) -> date:
    # Keeps the day-of-month overflow behaviour of due_date_for.
    following = Period(value.year, value.month).next()
    return date(following.year, following.month, 1) + timedelta(days=value.day - 1)


def receipt_due_date(period: Period, due_day: Optional[int], as_of: AsOf) -> Optional[date]:
    """Due date printed on the receipt; pushed one month out if already past."""
    if due_day is None:
        return None
    due = due_date_for(period, due_day)
    if as_naive_datetime(as_of) > datetime.combine(due, datetime.min.time()):
        due = _add_month(due)
    return due


def build_receipts(statement: BillingStatement, snapshot: BillingSnapshot, start_number: int = 1) -> List[Receipt]:
    due = receipt_due_date(statement.period, snapshot.billing_rules.due_day, statement.as_of)
    receipts: List[Receipt] = []
    number = start_number
    for line in statement.units:
        lines = [
            ReceiptLine(label=label, amount=round_money(amount), kind="expense")
            for label, amount in line.expenses.items()
            if amount > 0
        ]
        lines.extend(
            ReceiptLine(label=fund.name or f"Fond #{fund.id}", amount=round_money(fund.monthly_amount), kind="fund")
            for fund in snapshot.funds
        )
        receipts.append(
            Receipt(
                number=number,
                unit_id=line.unit_id,
                unit_label=line.label,
                period=statement.period,
                maintenance=round_money(line.maintenance),
                funds=round_money(line.funds),
                arrears=round_money(line.arrears),
                penalty=round_money(line.penalty),
                total=round_money(line.total),
                due_date=due,
                lines=lines,
            )
        )
        number += 1
    return receipts
