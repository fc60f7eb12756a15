from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from ..api.dependencies import get_db
from ..config import settings
from ..core.errors import UnitNotFoundError
from ..schemas.schemas import (
    ReceiptLineRead,
    ReceiptRead,
    StatementRead,
    StatementTotalsRead,
    UnitStatementRead,
)
from ..services.allocation import extended_rules
from ..services.penalties import round_money
from ..services.receipts import Receipt, build_receipts
from ..services.snapshot import BillingSnapshot, Period, load_snapshot
from ..services.statements import BillingStatement, UnitStatement, assemble_statement, default_as_of

router = APIRouter()


def _serialize_unit(line: UnitStatement) -> UnitStatementRead:
    return UnitStatementRead(
        unit_id=line.unit_id,
        label=line.label,
        expenses={label: round_money(amount) for label, amount in line.expenses.items()},
        maintenance=round_money(line.maintenance),
        funds=round_money(line.funds),
        arrears=round_money(line.arrears),
        penalty=round_money(line.penalty),
        total=round_money(line.total),
    )


def serialize_statement(statement: BillingStatement) -> StatementRead:
    totals = statement.totals
    units = [_serialize_unit(line) for line in statement.units]
    return StatementRead(
        association_id=statement.association_id,
        year=statement.period.year,
        month=statement.period.month,
        as_of=statement.as_of,
        categories=statement.categories,
        units=units,
        totals=StatementTotalsRead(
            categories={label: round_money(amount) for label, amount in totals.categories.items()},
            maintenance=round_money(totals.maintenance),
            funds=round_money(totals.funds),
            arrears=round_money(totals.arrears),
            penalties=round_money(totals.penalties),
            total=round_money(totals.total),
            units_total=sum((line.total for line in units), Decimal("0.00")),
        ),
        has_expenses=statement.has_expenses,
        penalties_applied=statement.penalties_applied,
    )


def _serialize_receipt(receipt: Receipt) -> ReceiptRead:
    return ReceiptRead(
        number=receipt.number,
        unit_id=receipt.unit_id,
        unit_label=receipt.unit_label,
        year=receipt.period.year,
        month=receipt.period.month,
        maintenance=receipt.maintenance,
        funds=receipt.funds,
        arrears=receipt.arrears,
        penalty=receipt.penalty,
        total=receipt.total,
        due_date=receipt.due_date,
        lines=[ReceiptLineRead.model_validate(line) for line in receipt.lines],
    )


def _statement_for(
    db: Session, association_id: int, year: int, month: int, as_of: Optional[datetime]
) -> tuple[BillingSnapshot, BillingStatement]:
    snapshot = load_snapshot(db, association_id)
    rules = extended_rules(
        snapshot,
        metered_consumption=settings.metered_consumption,
        manual_allocations=settings.manual_allocations,
    )
    statement = assemble_statement(snapshot, Period(year, month), as_of or default_as_of(), rules)
    return snapshot, statement


@router.get(
    "/associations/{association_id}/statements/{year}/{month}",
    response_model=StatementRead,
)
def get_statement(
    association_id: int,
    year: int = Path(..., ge=1900, le=9999),
    month: int = Path(..., ge=1, le=12),
    as_of: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
) -> StatementRead:
    _, statement = _statement_for(db, association_id, year, month, as_of)
    return serialize_statement(statement)


@router.get(
    "/associations/{association_id}/statements/{year}/{month}/units/{unit_id}",
    response_model=UnitStatementRead,
)
def get_unit_statement(
    association_id: int,
    unit_id: int,
    year: int = Path(..., ge=1900, le=9999),
    month: int = Path(..., ge=1, le=12),
    as_of: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
) -> UnitStatementRead:
    _, statement = _statement_for(db, association_id, year, month, as_of)
    line = statement.for_unit(unit_id)
    if not line:
        raise UnitNotFoundError(unit_id)
    return _serialize_unit(line)


@router.get(
    "/associations/{association_id}/receipts/{year}/{month}",
    response_model=List[ReceiptRead],
)
def list_receipts(
    association_id: int,
    year: int = Path(..., ge=1900, le=9999),
    month: int = Path(..., ge=1, le=12),
    as_of: Optional[datetime] = Query(None),
    start_number: int = Query(1, ge=1),
    db: Session = Depends(get_db),
) -> List[ReceiptRead]:
    snapshot, statement = _statement_for(db, association_id, year, month, as_of)
    return [_serialize_receipt(receipt) for receipt in build_receipts(statement, snapshot, start_number)]
