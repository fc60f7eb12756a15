#!/usr/bin/env python
"""
Seed script to populate the database with a demo association for local development.

Usage:
    python scripts/seed_data.py --apartments 20 --year 2025 --month 1
"""

import argparse
import random
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from avizier.config import Base, SessionLocal, engine  # noqa: E402
from avizier.constants import DEMO_ASSOCIATION  # noqa: E402
from avizier.models.models import Association, Expense, RecurringFund, Unit  # noqa: E402

DEMO_EXPENSES = [
    ("APA_RECE", Decimal("1200.00"), "PERSOANE"),
    ("CURATENIE", Decimal("400.00"), "APARTAMENT"),
    ("ASCENSOR", Decimal("350.00"), "APARTAMENT"),
    ("CURENT_COMUN", Decimal("280.00"), "COTA_INDIVIZA"),
]


def create_association(session) -> Association:
    existing = session.query(Association).filter(Association.name == DEMO_ASSOCIATION["name"]).first()
    if existing:
        return existing
    association = Association(
        name=DEMO_ASSOCIATION["name"],
        address="Str. Exemplu nr. 10, București",
        due_day=DEMO_ASSOCIATION["due_day"],
        daily_penalty_rate_percent=DEMO_ASSOCIATION["daily_penalty_rate_percent"],
    )
    session.add(association)
    session.flush()
    for name, amount in DEMO_ASSOCIATION["funds"]:
        session.add(RecurringFund(association_id=association.id, name=name, monthly_amount=Decimal(str(amount))))
    return association


def create_units(session, association: Association, count: int) -> None:
    if association.units:
        return
    for index in range(1, count + 1):
        session.add(
            Unit(
                association_id=association.id,
                number=str(index),
                staircase="A",
                quota_share=5,
                occupant_count=random.randint(1, 4),
            )
        )


def create_expenses(session, association: Association, year: int, month: int) -> None:
    for category, amount, mode in DEMO_EXPENSES:
        session.add(
            Expense(
                association_id=association.id,
                category=category,
                amount=amount,
                distribution_mode=mode,
                month=month,
                year=year,
                invoice_date=date(year, month, 1),
            )
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo homeowner association.")
    parser.add_argument("--apartments", type=int, default=20, help="Number of apartments to create.")
    parser.add_argument("--year", type=int, default=date.today().year)
    parser.add_argument("--month", type=int, default=date.today().month)
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        association = create_association(session)
        session.flush()
        create_units(session, association, args.apartments)
        create_expenses(session, association, args.year, args.month)
        session.commit()
        print(f"Seeded association #{association.id} ({association.name}) for {args.year}-{args.month:02d}.")


if __name__ == "__main__":
    main()
