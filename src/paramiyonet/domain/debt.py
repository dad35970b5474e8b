"""Person-to-person debt domain service."""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

import structlog

from paramiyonet.database.base import DEBTS, Database
from paramiyonet.database.mappers import debt_from_record, debt_payments_to_record
from paramiyonet.database.models import new_record_id
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.entities import Debt as DebtEntity
from paramiyonet.domain.entities import DebtPayment, DebtStatus, DebtType
from paramiyonet.domain.errors import (
    ConflictError,
    RecordNotFound,
    ValidationError,
    non_positive_amount,
    record_not_found,
)

logger = structlog.get_logger()

_ZERO = Decimal("0")


def payment_outcome(original: Decimal, paid: Decimal) -> tuple[Decimal, DebtStatus]:
    """Remaining amount and status after ``paid`` of ``original`` is repaid."""
    remaining = original - paid
    if remaining <= 0:
        return _ZERO, DebtStatus.PAID
    if paid > 0:
        return remaining, DebtStatus.PARTIAL
    return remaining, DebtStatus.ACTIVE


class DebtService:
    """Service for tracking money lent to and borrowed from people."""

    def __init__(self, db: Database):
        """Initialize debt service.

        Args:
            db: Database instance
        """
        self.db = db
        self.accounts = AccountService(db)

    def create_debt(
        self,
        user_id: str,
        debt_type: DebtType,
        person_name: str,
        amount: Decimal,
        account_id: str,
        description: str = "",
        due_date: Optional[datetime] = None,
    ) -> str:
        """Create a debt.

        Args:
            user_id: Owning user ID
            debt_type: Lent or borrowed
            person_name: Counterparty
            amount: Original amount
            account_id: Account the debt is associated with
            description: Optional description
            due_date: Optional due date

        Returns:
            Debt ID

        Raises:
            ValidationError: If person name is empty or amount is not positive
            AccountNotFound: If the account doesn't exist
        """
        if not person_name or not person_name.strip():
            raise ValidationError("Person name is required")
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        self.accounts.require_account(account_id)

        debt_id = self.db.create_record(
            DEBTS,
            {
                "user_id": user_id,
                "type": debt_type.value,
                "person_name": person_name.strip(),
                "original_amount": amount,
                "current_amount": amount,
                "paid_amount": _ZERO,
                "account_id": account_id,
                "description": description,
                "status": DebtStatus.ACTIVE.value,
                "due_date": due_date,
                "payments": [],
            },
        )
        logger.info("debt_created", debt_id=debt_id, type=debt_type.value, amount=str(amount))
        return debt_id

    def get_debt(self, debt_id: str) -> Optional[DebtEntity]:
        """Get debt by ID, or None if not found."""
        record = self.db.get_record(DEBTS, debt_id)
        if record is None:
            return None
        return debt_from_record(record)

    def list_debts(self, user_id: str, account_id: Optional[str] = None) -> list[DebtEntity]:
        """List a user's debts, newest first."""
        filters = {"user_id": user_id}
        if account_id is not None:
            filters["account_id"] = account_id
        debts = [debt_from_record(r) for r in self.db.query_records(DEBTS, filters)]
        return sorted(debts, key=lambda d: d.created_at, reverse=True)

    def add_payment(
        self,
        debt_id: str,
        amount: Decimal,
        date: Optional[datetime] = None,
        description: str = "",
    ) -> DebtEntity:
        """Record a repayment and update the remaining amount and status.

        Returns:
            The updated debt

        Raises:
            RecordNotFound: If the debt doesn't exist
            ValidationError: If amount is not positive
            ConflictError: If the debt is already paid
        """
        debt = self.get_debt(debt_id)
        if debt is None:
            raise RecordNotFound(record_not_found(DEBTS, debt_id))
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        if debt.status == DebtStatus.PAID:
            raise ConflictError(f"Debt with {debt.person_name} is already paid")

        now = datetime.now(UTC)
        payment = DebtPayment(
            id=new_record_id(),
            amount=amount,
            date=date or now,
            description=description,
            created_at=now,
        )
        paid = debt.paid_amount + amount
        remaining, status = payment_outcome(debt.original_amount, paid)

        self.db.update_fields(
            DEBTS,
            debt_id,
            {
                "paid_amount": paid,
                "current_amount": remaining,
                "status": status.value,
                "payments": debt_payments_to_record(debt.payments + (payment,)),
            },
        )
        logger.info("debt_payment_added", debt_id=debt_id, amount=str(amount), status=status.value)
        return self.get_debt(debt_id)

    def delete_debt(self, debt_id: str) -> None:
        """Delete a debt.

        Raises:
            RecordNotFound: If the debt doesn't exist
        """
        if self.get_debt(debt_id) is None:
            raise RecordNotFound(record_not_found(DEBTS, debt_id))
        self.db.delete_record(DEBTS, debt_id)
