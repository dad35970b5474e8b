"""SQLAlchemy models for the paramiyonet database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    Boolean,
    JSON,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_record_id() -> str:
    return uuid.uuid4().hex


class Account(Base):
    """Account model; credit card and gold columns are nullable."""

    __tablename__ = "accounts"

    id = Column(String(32), primary_key=True, default=new_record_id)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    color = Column(String, nullable=False, default="#007AFF")
    icon = Column(String, nullable=False, default="wallet")
    is_active = Column(Boolean, nullable=False, default=True)
    include_in_total_balance = Column(Boolean, nullable=False, default=True)
    limit = Column("credit_limit", Numeric(14, 2), nullable=True)
    current_debt = Column(Numeric(14, 2), nullable=True)
    statement_day = Column(Integer, nullable=True)
    due_day = Column(Integer, nullable=True)
    interest_rate = Column(Numeric(6, 2), nullable=True)
    min_payment_rate = Column(Numeric(6, 4), nullable=True)
    gold_holdings = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(32), primary_key=True, default=new_record_id)
    user_id = Column(String, nullable=False, index=True)
    account_id = Column(String(32), nullable=False, index=True)
    type = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    date = Column(DateTime, nullable=False)
    operation = Column(String, nullable=True)
    debt_change = Column(Numeric(14, 2), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class RecurringPayment(Base):
    """Recurring payment model."""

    __tablename__ = "recurring_payments"

    id = Column(String(32), primary_key=True, default=new_record_id)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(String, nullable=False)
    account_id = Column(String(32), nullable=False)
    frequency = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    next_payment_date = Column(Date, nullable=False)
    last_payment_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    auto_create_transaction = Column(Boolean, nullable=False, default=True)
    reminder_days = Column(Integer, nullable=False, default=1)
    total_paid = Column(Numeric(14, 2), nullable=False, default=0)
    payment_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Debt(Base):
    """Person-to-person debt model; payments are kept inline as JSON."""

    __tablename__ = "debts"

    id = Column(String(32), primary_key=True, default=new_record_id)
    user_id = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)
    person_name = Column(String, nullable=False)
    original_amount = Column(Numeric(14, 2), nullable=False)
    current_amount = Column(Numeric(14, 2), nullable=False)
    paid_amount = Column(Numeric(14, 2), nullable=False, default=0)
    account_id = Column(String(32), nullable=False)
    description = Column(String, nullable=False, default="")
    status = Column(String, nullable=False)
    due_date = Column(DateTime, nullable=True)
    payments = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)



class Budget(Base):
    """Category budget model; progress columns hold the last refresh."""

    __tablename__ = "budgets"

    id = Column(String(32), primary_key=True, default=new_record_id)
    user_id = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    budgeted_amount = Column(Numeric(14, 2), nullable=False)
    spent_amount = Column(Numeric(14, 2), nullable=False, default=0)
    remaining_amount = Column(Numeric(14, 2), nullable=False, default=0)
    progress_percentage = Column(Numeric(8, 2), nullable=False, default=0)
    period = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    color = Column(String, nullable=False, default="#007AFF")
    icon = Column(String, nullable=False, default="wallet")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
