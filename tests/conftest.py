import sys
from collections.abc import Callable, Generator
from decimal import Decimal
from pathlib import Path
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from avizier.config import Base  # noqa: E402
# Import the full models module so all tables register with Base metadata.
from avizier.models import models as _all_models  # noqa: E402,F401
from avizier.models.models import Association, Expense, Unit  # noqa: E402
from avizier.services.snapshot import (  # noqa: E402
    BillingRules,
    BillingSnapshot,
    ExpenseRecord,
    FundRecord,
    PaymentRecord,
    UnitRecord,
)

ASSOCIATION_ID = 1


@pytest.fixture
def db_session(tmp_path) -> Generator[Session, None, None]:
    """Provide a fresh SQLite database for each test."""
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def unit() -> Callable[..., UnitRecord]:
    def _create(unit_id: int, quota_share=0, occupant_count: int = 0, association_id: int = ASSOCIATION_ID) -> UnitRecord:
        return UnitRecord(
            id=unit_id,
            association_id=association_id,
            quota_share=quota_share,
            occupant_count=occupant_count,
            label=f"Ap. {unit_id}",
        )

    return _create


@pytest.fixture
def expense() -> Callable[..., ExpenseRecord]:
    counter = {"value": 0}

    def _create(
        amount,
        year: int = 2025,
        month: int = 1,
        mode: str = "BY_QUOTA_SHARE",
        code: str = "CURATENIE",
        association_id: int = ASSOCIATION_ID,
    ) -> ExpenseRecord:
        counter["value"] += 1
        return ExpenseRecord(
            id=counter["value"],
            association_id=association_id,
            amount=amount,
            distribution_mode=mode,
            month=month,
            year=year,
            category_code=code,
        )

    return _create


@pytest.fixture
def payment() -> Callable[..., PaymentRecord]:
    counter = {"value": 0}

    def _create(unit_id: int, amount, year: int = 2025, month: int = 1, status: str = "CONFIRMED") -> PaymentRecord:
        counter["value"] += 1
        return PaymentRecord(
            id=counter["value"],
            unit_id=unit_id,
            amount=amount,
            status=status,
            attributed_month=month,
            attributed_year=year,
        )

    return _create


@pytest.fixture
def fund() -> Callable[..., FundRecord]:
    counter = {"value": 0}

    def _create(amount, name: Optional[str] = None) -> FundRecord:
        counter["value"] += 1
        return FundRecord(
            id=counter["value"],
            association_id=ASSOCIATION_ID,
            monthly_amount=amount,
            name=name or f"Fond {counter['value']}",
        )

    return _create


@pytest.fixture
def make_snapshot() -> Callable[..., BillingSnapshot]:
    def _create(
        units=(),
        expenses=(),
        funds=(),
        payments=(),
        due_day: Optional[int] = 25,
        rate: Optional[str] = "0.02",
        **extra,
    ) -> BillingSnapshot:
        return BillingSnapshot.for_association(
            ASSOCIATION_ID,
            units=units,
            expenses=expenses,
            funds=funds,
            payments=payments,
            billing_rules=BillingRules(
                due_day=due_day,
                daily_penalty_rate_percent=Decimal(rate) if rate is not None else None,
            ),
            **extra,
        )

    return _create


@pytest.fixture
def create_association(db_session: Session) -> Callable[..., Association]:
    def _create(name: str = "Asociația Bloc A1", due_day: Optional[int] = 25, rate: Optional[float] = 0.02) -> Association:
        association = Association(name=name, due_day=due_day, daily_penalty_rate_percent=rate)
        db_session.add(association)
        db_session.commit()
        return association

    return _create


@pytest.fixture
def seed_two_units(db_session: Session, create_association) -> Callable[..., dict]:
    """Two units of equal quota and one 100 lei expense in January 2025."""

    def _create(**association_kwargs) -> dict:
        association = create_association(**association_kwargs)
        first = Unit(association_id=association.id, number="1", staircase="A", quota_share=50, occupant_count=2)
        second = Unit(association_id=association.id, number="2", staircase="A", quota_share=50, occupant_count=1)
        db_session.add_all([first, second])
        db_session.flush()
        db_session.add(
            Expense(
                association_id=association.id,
                category="CURATENIE",
                amount=Decimal("100.00"),
                distribution_mode="COTA_INDIVIZA",
                month=1,
                year=2025,
            )
        )
        db_session.commit()
        return {"association": association, "units": [first, second]}

    return _create
