"""Recurring payment domain service."""

from datetime import date, datetime, time, timedelta, UTC
from decimal import Decimal
from typing import Optional

import structlog
from dateutil.relativedelta import relativedelta

from paramiyonet.database.base import RECURRING_PAYMENTS, Database, WriteOp
from paramiyonet.database.mappers import recurring_payment_from_record
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.entities import RecurringFrequency
from paramiyonet.domain.entities import RecurringPayment as RecurringPaymentEntity
from paramiyonet.domain.entities import RecurringSummary, TransactionType
from paramiyonet.domain.errors import (
    DomainError,
    PartiallyAppliedError,
    RecordNotFound,
    ValidationError,
    non_positive_amount,
    record_not_found,
)
from paramiyonet.domain.operations import LedgerOperations

logger = structlog.get_logger()

_ZERO = Decimal("0")
_CENTS = Decimal("0.01")

UPCOMING_WINDOW = timedelta(days=7)

# Approximate number of occurrences per month
_MONTHLY_FACTORS = {
    RecurringFrequency.DAILY: Decimal("30"),
    RecurringFrequency.WEEKLY: Decimal("4.33"),
    RecurringFrequency.MONTHLY: Decimal("1"),
    RecurringFrequency.YEARLY: Decimal("1") / Decimal("12"),
}


def next_payment_date(current: date, frequency: RecurringFrequency) -> date:
    """Date of the occurrence following ``current``.

    Month and year steps clamp to the end of shorter months
    (Jan 31 + 1 month is Feb 28/29).
    """
    if frequency == RecurringFrequency.DAILY:
        return current + timedelta(days=1)
    if frequency == RecurringFrequency.WEEKLY:
        return current + timedelta(weeks=1)
    if frequency == RecurringFrequency.MONTHLY:
        return current + relativedelta(months=1)
    return current + relativedelta(years=1)


def monthly_equivalent(payment: RecurringPaymentEntity) -> Decimal:
    return payment.amount * _MONTHLY_FACTORS[payment.frequency]


def _advance_fields(payment: RecurringPaymentEntity) -> dict:
    """Schedule fields after paying the current occurrence."""
    return {
        "last_payment_date": payment.next_payment_date,
        "next_payment_date": next_payment_date(payment.next_payment_date, payment.frequency),
        "total_paid": payment.total_paid + payment.amount,
        "payment_count": payment.payment_count + 1,
    }


class RecurringPaymentService:
    """Service for scheduling and processing recurring payments."""

    def __init__(self, db: Database):
        """Initialize recurring payment service.

        Args:
            db: Database instance
        """
        self.db = db
        self.accounts = AccountService(db)
        self.ledger = LedgerOperations(db)

    def create_recurring_payment(
        self,
        user_id: str,
        name: str,
        amount: Decimal,
        category: str,
        account_id: str,
        frequency: RecurringFrequency,
        start_date: date,
        end_date: Optional[date] = None,
        description: str = "",
        auto_create_transaction: bool = True,
        reminder_days: int = 1,
    ) -> str:
        """Schedule a recurring payment; the first occurrence is ``start_date``.

        Returns:
            Recurring payment ID

        Raises:
            ValidationError: If name is empty, amount is not positive or the
                end date precedes the start date
            AccountNotFound: If the account doesn't exist
        """
        if not name or not name.strip():
            raise ValidationError("Recurring payment name is required")
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        if end_date is not None and end_date < start_date:
            raise ValidationError("End date cannot be before the start date")
        if reminder_days < 0:
            raise ValidationError("Reminder days cannot be negative")
        self.accounts.require_account(account_id)

        payment_id = self.db.create_record(
            RECURRING_PAYMENTS,
            {
                "user_id": user_id,
                "name": name.strip(),
                "description": description,
                "amount": amount,
                "category": category,
                "account_id": account_id,
                "frequency": frequency.value,
                "start_date": start_date,
                "end_date": end_date,
                "next_payment_date": start_date,
                "is_active": True,
                "auto_create_transaction": auto_create_transaction,
                "reminder_days": reminder_days,
                "total_paid": _ZERO,
                "payment_count": 0,
            },
        )
        logger.info("recurring_payment_created", payment_id=payment_id, frequency=frequency.value)
        return payment_id

    def get_recurring_payment(self, payment_id: str) -> Optional[RecurringPaymentEntity]:
        record = self.db.get_record(RECURRING_PAYMENTS, payment_id)
        if record is None:
            return None
        return recurring_payment_from_record(record)

    def _require(self, payment_id: str) -> RecurringPaymentEntity:
        payment = self.get_recurring_payment(payment_id)
        if payment is None:
            raise RecordNotFound(record_not_found(RECURRING_PAYMENTS, payment_id))
        return payment

    def list_recurring_payments(
        self, user_id: str, active_only: bool = False
    ) -> list[RecurringPaymentEntity]:
        """List a user's recurring payments, soonest next payment first."""
        filters = {"user_id": user_id}
        if active_only:
            filters["is_active"] = True
        payments = [
            recurring_payment_from_record(r)
            for r in self.db.query_records(RECURRING_PAYMENTS, filters)
        ]
        return sorted(payments, key=lambda p: p.next_payment_date)

    def process_payment(self, payment_id: str) -> RecurringPaymentEntity:
        """Mark the current occurrence as paid and advance the schedule.

        Raises:
            RecordNotFound: If the recurring payment doesn't exist
        """
        payment = self._require(payment_id)
        self.db.update_fields(RECURRING_PAYMENTS, payment_id, _advance_fields(payment))
        return self._require(payment_id)

    def deactivate(self, payment_id: str) -> None:
        self._require(payment_id)
        self.db.update_fields(RECURRING_PAYMENTS, payment_id, {"is_active": False})

    def delete_recurring_payment(self, payment_id: str) -> None:
        self._require(payment_id)
        self.db.delete_record(RECURRING_PAYMENTS, payment_id)

    def process_due(self, user_id: str, today: Optional[date] = None) -> list[str]:
        """Create transactions for every due, auto-creating payment.

        Each due payment produces one expense on its account dated at the
        scheduled day and its schedule advances by one occurrence, both in
        one write batch. A payment whose next date lies past its end date
        is deactivated instead. A payment that is rejected, or whose batch
        failed cleanly, is logged and skipped.

        Returns:
            IDs of the created transactions

        Raises:
            PartiallyAppliedError: If a non-atomic store posted the
                transaction but failed to advance the schedule
        """
        today = today or date.today()
        created = []
        for payment in self.list_recurring_payments(user_id, active_only=True):
            if not payment.auto_create_transaction or payment.next_payment_date > today:
                continue
            if payment.end_date is not None and payment.next_payment_date > payment.end_date:
                self.deactivate(payment.id)
                logger.info("recurring_payment_ended", payment_id=payment.id)
                continue
            operation = "process_recurring_payment"
            try:
                ops = self.ledger.posting_ops(
                    user_id,
                    payment.account_id,
                    TransactionType.EXPENSE,
                    payment.amount,
                    payment.category,
                    payment.description or payment.name,
                    datetime.combine(payment.next_payment_date, time.min, tzinfo=UTC),
                    operation=operation,
                )
                transaction_index = len(ops) - 1
                ops.append(WriteOp(RECURRING_PAYMENTS, "update", payment.id, _advance_fields(payment)))
                record_ids = self.ledger.persist(operation, ops)
            except PartiallyAppliedError:
                raise
            except DomainError as e:
                logger.warning(
                    "recurring_payment_failed", payment_id=payment.id, name=payment.name, error=str(e)
                )
                continue
            created.append(record_ids[transaction_index])
            logger.info("recurring_payment_processed", payment_id=payment.id, name=payment.name)
        return created

    def summary(self, user_id: str, today: Optional[date] = None) -> RecurringSummary:
        """Monthly/yearly totals and upcoming/overdue counts of active payments."""
        today = today or date.today()
        active = self.list_recurring_payments(user_id, active_only=True)
        monthly = sum((monthly_equivalent(p) for p in active), _ZERO).quantize(_CENTS)
        upcoming = [p for p in active if today <= p.next_payment_date <= today + UPCOMING_WINDOW]
        overdue = [p for p in active if p.next_payment_date < today]
        return RecurringSummary(
            total_monthly_amount=monthly,
            total_yearly_amount=monthly * 12,
            active_count=len(active),
            upcoming_count=len(upcoming),
            overdue_count=len(overdue),
        )
