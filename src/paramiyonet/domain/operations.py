"""Orchestrated multi-account ledger operations.

Each operation loads the accounts it touches, runs the pure ledger rules
from ``credit_card``/``gold``/``balance`` and then persists every write as
one unit. All validation happens before the first write. When the store's
batch is atomic the writes go through ``batch_write``; otherwise they are
issued one by one in a fixed order (debit source, credit destination,
transaction record last) and a failure after the first write raises
``PartiallyAppliedError`` for reconciliation.
"""

from dataclasses import dataclass
from datetime import datetime, UTC
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional

import structlog

from paramiyonet.database.base import ACCOUNTS, TRANSACTIONS, Database, WriteOp
from paramiyonet.database.mappers import gold_holdings_to_record
from paramiyonet.domain import balance as balance_ledger
from paramiyonet.domain import credit_card, gold
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.entities import Account, AccountType, GoldType, TransactionType
from paramiyonet.domain.errors import (
    DomainError,
    InsufficientFunds,
    PartiallyAppliedError,
    ValidationError,
    insufficient_funds,
    non_positive_amount,
    wrong_account_type,
)

logger = structlog.get_logger()

_ZERO = Decimal("0")

CARD_PAYMENT_CATEGORY = "Credit Card Payment"
CARD_PURCHASE_CATEGORY = "Credit Card Purchase"
GOLD_SALE_CATEGORY = "Gold Sale"

BELOW_MINIMUM_WARNING = (
    "Payment is below the minimum payment; interest may be charged on the remaining debt"
)


class OperationState(str, Enum):
    """Lifecycle of an orchestrated operation."""

    PENDING = "pending"
    VALIDATED = "validated"
    APPLIED = "applied"
    PERSISTED = "persisted"
    REJECTED = "rejected"
    PARTIALLY_APPLIED = "partially_applied"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a successfully persisted operation."""

    operation: str
    state: OperationState
    record_ids: tuple[str, ...]
    transaction_id: Optional[str] = None
    amount: Decimal = _ZERO
    warning: Optional[str] = None


def _now() -> datetime:
    return datetime.now(UTC)


class LedgerOperations:
    """Coordinates ledger mutations that span several records."""

    def __init__(self, db: Database, price_source=None):
        """Initialize ledger operations.

        Args:
            db: Database instance
            price_source: Optional PriceQuoteCache used to mark gold
                accounts to market after their lots change
        """
        self.db = db
        self.accounts = AccountService(db)
        self.price_source = price_source

    # Persistence

    def _write_one(self, op: WriteOp) -> str:
        if op.operation == "create":
            return self.db.create_record(op.collection, op.fields)
        if op.operation == "update":
            self.db.update_fields(op.collection, op.record_id, op.fields)
        elif op.operation == "increment":
            self.db.increment_fields(op.collection, op.record_id, op.fields)
        elif op.operation == "delete":
            self.db.delete_record(op.collection, op.record_id)
        else:
            raise ValidationError(f"Unknown write operation '{op.operation}'")
        return op.record_id

    def persist(self, operation: str, ops: list[WriteOp]) -> list[str]:
        """Persist ``ops`` as one logical unit.

        Returns:
            Record ID of each op, in order

        Raises:
            PartiallyAppliedError: If a non-atomic store failed after at
                least one write was persisted
        """
        if self.db.supports_atomic_batch:
            return self.db.batch_write(ops)

        record_ids: list[str] = []
        completed: list[str] = []
        for op in ops:
            try:
                record_id = self._write_one(op)
            except DomainError as e:
                if not completed:
                    raise
                touched = [o.record_id for o in ops if o.operation != "create"]
                touched += [rid for o, rid in zip(ops, record_ids) if o.operation == "create"]
                logger.error(
                    "operation_state",
                    operation=operation,
                    state=OperationState.PARTIALLY_APPLIED.value,
                    completed=completed,
                    error=str(e),
                )
                raise PartiallyAppliedError(operation, touched, completed, e) from e
            record_ids.append(record_id)
            completed.append(f"{op.operation} {op.collection}/{record_id}")
        return record_ids

    def _transaction_op(
        self,
        user_id: str,
        account_id: str,
        transaction_type: TransactionType,
        amount: Decimal,
        category: str,
        description: str,
        date: Optional[datetime],
        operation: str,
        debt_change: Optional[Decimal] = None,
    ) -> WriteOp:
        return WriteOp(
            TRANSACTIONS,
            "create",
            fields={
                "user_id": user_id,
                "account_id": account_id,
                "type": transaction_type.value,
                "amount": amount,
                "category": category,
                "description": description,
                "date": date or _now(),
                "operation": operation,
                "debt_change": debt_change,
            },
        )

    def _rejected(self, operation: str, error: DomainError, **context) -> None:
        logger.info(
            "operation_state",
            operation=operation,
            state=OperationState.REJECTED.value,
            reason=type(error).__name__,
            **context,
        )

    def _state(self, operation: str, state: OperationState, **context) -> None:
        logger.debug("operation_state", operation=operation, state=state.value, **context)

    # Credit card

    def pay_credit_card(
        self,
        user_id: str,
        card_id: str,
        source_account_id: str,
        amount: Decimal,
        date: Optional[datetime] = None,
    ) -> OperationResult:
        """Pay card debt from a balance-bearing source account.

        Raises:
            AccountNotFound: If either account does not exist
            ValidationError: If amount is not positive or an account has the wrong type
            OverpaymentRejected: If amount exceeds the card's current debt
            InsufficientFunds: If amount exceeds the source balance
        """
        operation = "pay_credit_card"
        self._state(operation, OperationState.PENDING, card_id=card_id, amount=str(amount))
        try:
            card = self.accounts.require_account(card_id)
            source = self.accounts.require_account(source_account_id)
            new_debt = credit_card.apply_payment(card, amount)
            balance_ledger.posting_delta(source, -amount)
            if amount > source.balance:
                raise InsufficientFunds(insufficient_funds(source.name, source.balance, amount))
        except DomainError as e:
            self._rejected(operation, e, card_id=card_id, source_account_id=source_account_id)
            raise
        self._state(operation, OperationState.VALIDATED, card_id=card_id)

        warning = BELOW_MINIMUM_WARNING if credit_card.is_below_minimum(card, amount) else None
        debt_delta = new_debt - credit_card.current_debt(card)
        ops = [
            WriteOp(ACCOUNTS, "increment", source.id, {"balance": -amount}),
            WriteOp(ACCOUNTS, "increment", card.id, {"current_debt": debt_delta, "balance": -debt_delta}),
            self._transaction_op(
                user_id,
                source.id,
                TransactionType.EXPENSE,
                amount,
                CARD_PAYMENT_CATEGORY,
                f"Credit card payment: {card.name}",
                date,
                operation,
            ),
        ]
        self._state(operation, OperationState.APPLIED, card_id=card_id, new_debt=str(new_debt))
        record_ids = self.persist(operation, ops)

        logger.info(
            "credit_card_payment_applied",
            card_id=card.id,
            source_account_id=source.id,
            amount=str(amount),
            new_debt=str(new_debt),
        )
        return OperationResult(
            operation=operation,
            state=OperationState.PERSISTED,
            record_ids=(source.id, card.id),
            transaction_id=record_ids[-1],
            amount=amount,
            warning=warning,
        )

    def record_card_purchase(
        self,
        user_id: str,
        card_id: str,
        amount: Decimal,
        category: str = CARD_PURCHASE_CATEGORY,
        description: str = "",
        date: Optional[datetime] = None,
    ) -> OperationResult:
        """Charge a purchase to a credit card.

        Raises:
            AccountNotFound: If the card does not exist
            ValidationError: If amount is not positive or the account is not a card
            LimitExceeded: If amount exceeds the available limit
        """
        operation = "record_card_purchase"
        try:
            card = self.accounts.require_account(card_id)
            new_debt = credit_card.apply_purchase(card, amount)
        except DomainError as e:
            self._rejected(operation, e, card_id=card_id)
            raise
        self._state(operation, OperationState.VALIDATED, card_id=card_id)

        ops = [
            WriteOp(ACCOUNTS, "increment", card.id, {"current_debt": amount, "balance": -amount}),
            self._transaction_op(
                user_id,
                card.id,
                TransactionType.EXPENSE,
                amount,
                category,
                description,
                date,
                operation,
                debt_change=amount,
            ),
        ]
        record_ids = self.persist(operation, ops)
        logger.info("credit_card_purchase_applied", card_id=card.id, amount=str(amount), new_debt=str(new_debt))
        return OperationResult(
            operation=operation,
            state=OperationState.PERSISTED,
            record_ids=(card.id,),
            transaction_id=record_ids[-1],
            amount=amount,
        )

    # Generic postings

    def posting_ops(
        self,
        user_id: str,
        account_id: str,
        transaction_type: TransactionType,
        amount: Decimal,
        category: str,
        description: str = "",
        date: Optional[datetime] = None,
        operation: str = "post_transaction",
    ) -> list[WriteOp]:
        """Validate an income/expense entry and build its writes.

        The account write comes first and the transaction create last, so
        callers can append further writes to the same batch. Expenses on a
        credit card are purchases; income on a credit card reduces its
        debt, clamped at zero. Gold accounts reject postings.

        Raises:
            AccountNotFound: If the account does not exist
            ValidationError: If amount is not positive or the account is gold
            LimitExceeded: If a card expense exceeds the available limit
        """
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        account = self.accounts.require_account(account_id)

        debt_delta = None
        if account.is_credit_card:
            if transaction_type == TransactionType.EXPENSE:
                credit_card.apply_purchase(account, amount)
                debt_delta = amount
            else:
                debt = credit_card.current_debt(account)
                debt_delta = max(debt - amount, _ZERO) - debt
            account_op = WriteOp(
                ACCOUNTS, "increment", account.id, {"current_debt": debt_delta, "balance": -debt_delta}
            )
        else:
            signed = amount if transaction_type == TransactionType.INCOME else -amount
            delta = balance_ledger.posting_delta(account, signed)
            account_op = WriteOp(ACCOUNTS, "increment", account.id, {"balance": delta})

        return [
            account_op,
            self._transaction_op(
                user_id,
                account.id,
                transaction_type,
                amount,
                category,
                description,
                date,
                operation,
                debt_change=debt_delta,
            ),
        ]

    def post_transaction(
        self,
        user_id: str,
        account_id: str,
        transaction_type: TransactionType,
        amount: Decimal,
        category: str,
        description: str = "",
        date: Optional[datetime] = None,
    ) -> OperationResult:
        """Record an income/expense entry and post it to its account."""
        operation = "post_transaction"
        try:
            ops = self.posting_ops(
                user_id, account_id, transaction_type, amount, category, description, date, operation
            )
        except DomainError as e:
            self._rejected(operation, e, account_id=account_id)
            raise

        record_ids = self.persist(operation, ops)
        logger.info(
            "transaction_posted",
            account_id=account_id,
            type=transaction_type.value,
            amount=str(amount),
        )
        return OperationResult(
            operation=operation,
            state=OperationState.PERSISTED,
            record_ids=(account_id,),
            transaction_id=record_ids[-1],
            amount=amount,
        )

    # Gold

    def _require_gold(self, account: Account) -> None:
        if not account.is_gold:
            raise ValidationError(wrong_account_type(account.name, [AccountType.GOLD.value]))

    def _gold_balance(
        self,
        holdings: Mapping[GoldType, tuple],
        gold_type: GoldType,
        unit_price: Decimal,
    ) -> Decimal:
        """Value holdings at the best known prices after a lot change."""
        prices: dict[GoldType, Decimal] = {}
        if self.price_source is not None:
            prices.update(self.price_source.get(_now()).prices)
        prices[gold_type] = unit_price
        return gold.best_known_value(holdings, prices)

    def add_gold(
        self,
        user_id: str,
        gold_account_id: str,
        gold_type: GoldType,
        quantity: Decimal,
        unit_price: Decimal,
        purchase_date: Optional[datetime] = None,
    ) -> OperationResult:
        """Append a purchase lot to a gold account and revalue it."""
        operation = "add_gold"
        try:
            account = self.accounts.require_account(gold_account_id)
            self._require_gold(account)
            holdings = gold.add_lot(
                account.gold_holdings, gold_type, quantity, unit_price, purchase_date or _now()
            )
        except DomainError as e:
            self._rejected(operation, e, account_id=gold_account_id)
            raise

        new_balance = self._gold_balance(holdings, gold_type, unit_price)
        ops = [
            WriteOp(
                ACCOUNTS,
                "update",
                account.id,
                {"gold_holdings": gold_holdings_to_record(holdings), "balance": new_balance},
            )
        ]
        self.persist(operation, ops)
        logger.info(
            "gold_lot_added",
            user_id=user_id,
            account_id=account.id,
            gold_type=gold_type.value,
            quantity=str(quantity),
        )
        return OperationResult(
            operation=operation,
            state=OperationState.PERSISTED,
            record_ids=(account.id,),
            amount=quantity * unit_price,
        )

    def sell_gold(
        self,
        user_id: str,
        gold_account_id: str,
        target_account_id: str,
        gold_type: GoldType,
        quantity: Decimal,
        unit_price: Decimal,
        date: Optional[datetime] = None,
    ) -> OperationResult:
        """Sell gold FIFO and credit the proceeds to a target account.

        Persists the reduced holdings, the target balance credit and an
        income transaction on the target account as one unit.

        Raises:
            AccountNotFound: If either account does not exist
            ValidationError: If quantity/price are invalid or account types are wrong
            InsufficientHoldings: If quantity exceeds the lots held of ``gold_type``
            PartiallyAppliedError: If a non-atomic store failed midway
        """
        operation = "sell_gold"
        self._state(operation, OperationState.PENDING, account_id=gold_account_id)
        try:
            account = self.accounts.require_account(gold_account_id)
            target = self.accounts.require_account(target_account_id)
            self._require_gold(account)
            if unit_price <= 0:
                raise ValidationError(f"Unit price must be positive (got {unit_price})")
            holdings, sale_value = gold.sell(account.gold_holdings, gold_type, quantity, unit_price)
            balance_ledger.posting_delta(target, sale_value)
        except DomainError as e:
            self._rejected(operation, e, account_id=gold_account_id, target_account_id=target_account_id)
            raise
        self._state(operation, OperationState.VALIDATED, account_id=account.id)

        new_balance = self._gold_balance(holdings, gold_type, unit_price)
        ops = [
            WriteOp(
                ACCOUNTS,
                "update",
                account.id,
                {"gold_holdings": gold_holdings_to_record(holdings), "balance": new_balance},
            ),
            WriteOp(ACCOUNTS, "increment", target.id, {"balance": sale_value}),
            self._transaction_op(
                user_id,
                target.id,
                TransactionType.INCOME,
                sale_value,
                GOLD_SALE_CATEGORY,
                f"Sold {quantity} {gold_type.name.lower()} gold from {account.name}",
                date,
                operation,
            ),
        ]
        self._state(operation, OperationState.APPLIED, account_id=account.id)
        record_ids = self.persist(operation, ops)

        logger.info(
            "gold_sold",
            account_id=account.id,
            target_account_id=target.id,
            gold_type=gold_type.value,
            quantity=str(quantity),
            sale_value=str(sale_value),
        )
        return OperationResult(
            operation=operation,
            state=OperationState.PERSISTED,
            record_ids=(account.id, target.id),
            transaction_id=record_ids[-1],
            amount=sale_value,
        )
