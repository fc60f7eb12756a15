from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class UnitStatementRead(BaseModel):
    unit_id: int
    label: str
    expenses: Dict[str, Decimal]
    maintenance: Decimal
    funds: Decimal
    arrears: Decimal
    penalty: Decimal
    total: Decimal


class StatementTotalsRead(BaseModel):
    """Association footer. `total` is rounded from the exact sum; `units_total` adds up
    the printed per-unit totals and is the figure the exported notice reconciles to."""

    categories: Dict[str, Decimal]
    maintenance: Decimal
    funds: Decimal
    arrears: Decimal
    penalties: Decimal
    total: Decimal
    units_total: Decimal


class StatementRead(BaseModel):
    association_id: int
    year: int
    month: int
    as_of: datetime
    categories: List[str]
    units: List[UnitStatementRead]
    totals: StatementTotalsRead
    has_expenses: bool
    penalties_applied: bool


class ReceiptLineRead(BaseModel):
    label: str
    amount: Decimal
    kind: str

    model_config = ConfigDict(from_attributes=True)


class ReceiptRead(BaseModel):
    number: int
    unit_id: int
    unit_label: str
    year: int
    month: int
    maintenance: Decimal
    funds: Decimal
    arrears: Decimal
    penalty: Decimal
    total: Decimal
    due_date: Optional[date]
    lines: List[ReceiptLineRead]


class HealthRead(BaseModel):
    status: str
