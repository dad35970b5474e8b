"""Transaction domain service."""

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import structlog

from paramiyonet.database.base import ACCOUNTS, TRANSACTIONS, Database, WriteOp
from paramiyonet.database.mappers import transaction_from_record
from paramiyonet.domain import credit_card
from paramiyonet.domain.entities import MonthlyStats
from paramiyonet.domain.entities import Transaction as TransactionEntity
from paramiyonet.domain.entities import TransactionType
from paramiyonet.domain.errors import ConflictError, RecordNotFound, record_not_found
from paramiyonet.domain.operations import LedgerOperations

logger = structlog.get_logger()

_ZERO = Decimal("0")

# Operations whose transaction is one side of a transfer between accounts
LINKED_OPERATIONS = frozenset({"pay_credit_card", "sell_gold"})


def _day(value: datetime) -> date:
    return value.date()


class TransactionService:
    """Service for recording and querying transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = LedgerOperations(db)

    def record_transaction(
        self,
        user_id: str,
        account_id: str,
        transaction_type: TransactionType,
        amount: Decimal,
        category: str,
        description: str = "",
        date: Optional[datetime] = None,
    ) -> str:
        """Record a transaction and post it to its account.

        Args:
            user_id: Owning user ID
            account_id: Account the transaction belongs to
            transaction_type: Income or expense
            amount: Positive amount
            category: Category label
            description: Optional description
            date: Transaction time (defaults to now)

        Returns:
            Transaction ID

        Raises:
            ValidationError: If amount is not positive or the account is a gold account
            AccountNotFound: If the account doesn't exist
            LimitExceeded: If a credit card expense exceeds the available limit
        """
        result = self.ledger.post_transaction(
            user_id, account_id, transaction_type, amount, category, description, date
        )
        return result.transaction_id

    def get_transaction(self, transaction_id: str) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        record = self.db.get_record(TRANSACTIONS, transaction_id)
        if record is None:
            return None
        return transaction_from_record(record)

    def list_transactions(
        self,
        user_id: str,
        account_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[TransactionEntity]:
        """List a user's transactions, newest first.

        Args:
            user_id: Owning user ID
            account_id: Optional account filter
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)
            transaction_type: Optional income/expense filter
        """
        filters = {"user_id": user_id}
        if account_id is not None:
            filters["account_id"] = account_id
        if transaction_type is not None:
            filters["type"] = transaction_type.value

        transactions = []
        for record in self.db.query_records(TRANSACTIONS, filters):
            txn = transaction_from_record(record)
            if start_date is not None and _day(txn.date) < start_date:
                continue
            if end_date is not None and _day(txn.date) > end_date:
                continue
            transactions.append(txn)
        return sorted(transactions, key=lambda t: (t.date, t.created_at), reverse=True)

    def monthly_stats(self, user_id: str, year: int, month: int) -> MonthlyStats:
        """Income/expense totals of one calendar month."""
        income = _ZERO
        expense = _ZERO
        count = 0
        for txn in self.list_transactions(user_id):
            if txn.date.year != year or txn.date.month != month:
                continue
            count += 1
            if txn.transaction_type == TransactionType.INCOME:
                income += txn.amount
            else:
                expense += txn.amount
        return MonthlyStats(
            total_income=income,
            total_expense=expense,
            net_amount=income - expense,
            transaction_count=count,
        )

    def category_breakdown(
        self,
        user_id: str,
        transaction_type: TransactionType = TransactionType.EXPENSE,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[tuple[str, Decimal]]:
        """Totals per category, largest first."""
        totals: dict[str, Decimal] = defaultdict(lambda: _ZERO)
        for txn in self.list_transactions(
            user_id, start_date=start_date, end_date=end_date, transaction_type=transaction_type
        ):
            totals[txn.category] += txn.amount
        return sorted(totals.items(), key=lambda item: (-item[1], item[0]))

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction and reverse its effect on the account.

        Credit card expenses give their debt back to the available limit;
        credit card income restores the debt it paid off, never past the
        card's limit. Transactions of deleted or gold accounts are removed
        without a balance change.

        Raises:
            RecordNotFound: If the transaction doesn't exist
            ConflictError: If the transaction is one side of a card payment
                or gold sale
        """
        txn = self.get_transaction(transaction_id)
        if txn is None:
            raise RecordNotFound(record_not_found(TRANSACTIONS, transaction_id))
        if txn.operation in LINKED_OPERATIONS:
            raise ConflictError(
                f"Transaction '{transaction_id}' was recorded by {txn.operation} "
                f"and moved money between accounts; it cannot be deleted on its own"
            )

        ops = []
        account = self.ledger.accounts.get_account(txn.account_id)
        if account is not None and account.is_credit_card:
            debt = credit_card.current_debt(account)
            if txn.transaction_type == TransactionType.EXPENSE:
                charged = txn.debt_change if txn.debt_change is not None else txn.amount
                debt_delta = -min(charged, debt)
            else:
                paid_off = -txn.debt_change if txn.debt_change is not None else txn.amount
                debt_delta = min(paid_off, credit_card.card_available_limit(account))
            ops.append(
                WriteOp(ACCOUNTS, "increment", account.id, {"current_debt": debt_delta, "balance": -debt_delta})
            )
        elif account is not None and not account.is_gold:
            ops.append(WriteOp(ACCOUNTS, "increment", account.id, {"balance": -txn.signed_amount}))
        ops.append(WriteOp(TRANSACTIONS, "delete", transaction_id))

        self.ledger.persist("delete_transaction", ops)
        logger.info("transaction_deleted", transaction_id=transaction_id, account_id=txn.account_id)
