from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship as orm_relationship

from ..config import Base
from ..constants import PAYMENT_STATUS_CONFIRMED


def utcnow():
    return datetime.now(timezone.utc)


class Association(Base):
    __tablename__ = "associations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    # Either left empty means no late-payment penalties are charged.
    due_day = Column(Integer, nullable=True)
    daily_penalty_rate_percent = Column(Float, nullable=True)  # 0.02 = 0.02% per day
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    units = orm_relationship("Unit", back_populates="association", cascade="all, delete-orphan")
    expenses = orm_relationship("Expense", back_populates="association", cascade="all, delete-orphan")
    funds = orm_relationship("RecurringFund", back_populates="association", cascade="all, delete-orphan")


class Unit(Base):
    __tablename__ = "units"
    __table_args__ = (UniqueConstraint("association_id", "number", name="uq_unit_number"),)

    id = Column(Integer, primary_key=True, index=True)
    association_id = Column(Integer, ForeignKey("associations.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(String, nullable=False)
    staircase = Column(String, nullable=True)
    quota_share = Column(Float, nullable=True)
    occupant_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    association = orm_relationship("Association", back_populates="units")
    payments = orm_relationship("Payment", back_populates="unit", cascade="all, delete-orphan")
    meter_readings = orm_relationship("MeterReading", back_populates="unit", cascade="all, delete-orphan")


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    association_id = Column(Integer, ForeignKey("associations.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String, nullable=False)  # APA_RECE|GAZ|CURATENIE|...
    description = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    distribution_mode = Column(String, nullable=False, default="COTA_INDIVIZA")
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    invoice_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    association = orm_relationship("Association", back_populates="expenses")
    manual_entries = orm_relationship("ManualAllocationEntry", back_populates="expense", cascade="all, delete-orphan")


class RecurringFund(Base):
    __tablename__ = "recurring_funds"

    id = Column(Integer, primary_key=True, index=True)
    association_id = Column(Integer, ForeignKey("associations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    monthly_amount = Column(Numeric(12, 2), nullable=False, default=0)

    association = orm_relationship("Association", back_populates="funds")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    unit_id = Column(Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String, nullable=False, default=PAYMENT_STATUS_CONFIRMED)
    # Billing period the payer settles, not the date the money arrived.
    attributed_month = Column(Integer, nullable=False)
    attributed_year = Column(Integer, nullable=False)
    date_received = Column(DateTime, default=utcnow, nullable=False)
    reference = Column(String, nullable=True)

    unit = orm_relationship("Unit", back_populates="payments")


class MeterReading(Base):
    __tablename__ = "meter_readings"
    __table_args__ = (
        UniqueConstraint("unit_id", "meter_type", "month", "year", name="uq_meter_reading_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    unit_id = Column(Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    meter_type = Column(String, nullable=False)  # APA_RECE|APA_CALDA|GAZ|CURENT|CALDURA
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    value = Column(Float, nullable=False)

    unit = orm_relationship("Unit", back_populates="meter_readings")


class ManualAllocationEntry(Base):
    __tablename__ = "manual_allocation_entries"
    __table_args__ = (UniqueConstraint("expense_id", "unit_id", name="uq_manual_allocation"),)

    id = Column(Integer, primary_key=True, index=True)
    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = Column(Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)

    expense = orm_relationship("Expense", back_populates="manual_entries")
