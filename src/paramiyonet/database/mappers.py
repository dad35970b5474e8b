"""Mapper functions between stored records and domain entities.

Records leave the storage layer as plain dictionaries. Every read goes
through one of the ``*_from_record`` functions, which either produce a fully
typed entity or raise ``RecordDecodeError``; the ledger rules never see a
partially-shaped record.
"""

from datetime import date, datetime, UTC
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping, TypeVar

from paramiyonet.domain import entities as domain
from paramiyonet.domain.errors import RecordDecodeError

T = TypeVar("T")

_MISSING = object()


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from storage."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _field(record: Mapping[str, Any], key: str, kind: str, convert: Callable[[Any], T], default: Any = _MISSING) -> T:
    value = record.get(key)
    if value is None:
        if default is not _MISSING:
            return default
        raise RecordDecodeError(f"{kind} record {record.get('id')!r} is missing '{key}'")
    try:
        return convert(value)
    except (ValueError, TypeError, InvalidOperation, KeyError) as e:
        raise RecordDecodeError(
            f"{kind} record {record.get('id')!r} has invalid '{key}': {value!r}"
        ) from e


def _decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def _datetime(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        raise TypeError(f"expected datetime, got {type(value).__name__}")
    return as_utc(value)


def _date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value)
    if not isinstance(value, date):
        raise TypeError(f"expected date, got {type(value).__name__}")
    return value


def gold_holdings_to_record(holdings: Mapping[domain.GoldType, tuple[domain.GoldLot, ...]]) -> dict[str, list[dict[str, str]]]:
    """Encode gold holdings as JSON-safe data."""
    return {
        gold_type.value: [
            {
                "quantity": str(lot.quantity),
                "initial_price": str(lot.initial_price),
                "purchase_date": as_utc(lot.purchase_date).isoformat(),
            }
            for lot in lots
        ]
        for gold_type, lots in holdings.items()
        if lots
    }


def gold_holdings_from_record(data: Mapping[str, Any]) -> dict[domain.GoldType, tuple[domain.GoldLot, ...]]:
    """Decode JSON gold holdings, keeping lots in purchase order."""
    holdings = {}
    for code, lots in data.items():
        gold_type = domain.GoldType(code)
        decoded = []
        for lot in lots:
            decoded.append(
                domain.GoldLot(
                    gold_type=gold_type,
                    quantity=_field(lot, "quantity", "Gold lot", _decimal),
                    initial_price=_field(lot, "initial_price", "Gold lot", _decimal),
                    purchase_date=_field(lot, "purchase_date", "Gold lot", _datetime),
                )
            )
        if decoded:
            holdings[gold_type] = tuple(sorted(decoded, key=lambda lot: lot.purchase_date))
    return holdings


def account_from_record(record: Mapping[str, Any]) -> domain.Account:
    """Decode an ``accounts`` record into an Account entity."""
    kind = "Account"
    return domain.Account(
        id=_field(record, "id", kind, str),
        user_id=_field(record, "user_id", kind, str),
        name=_field(record, "name", kind, str),
        account_type=_field(record, "type", kind, domain.AccountType),
        balance=_field(record, "balance", kind, _decimal),
        created_at=_field(record, "created_at", kind, _datetime),
        updated_at=_field(record, "updated_at", kind, _datetime),
        color=_field(record, "color", kind, str, default="#007AFF"),
        icon=_field(record, "icon", kind, str, default="wallet"),
        is_active=_field(record, "is_active", kind, bool, default=True),
        include_in_total_balance=_field(record, "include_in_total_balance", kind, bool, default=True),
        limit=_field(record, "limit", kind, _decimal, default=None),
        current_debt=_field(record, "current_debt", kind, _decimal, default=None),
        statement_day=_field(record, "statement_day", kind, int, default=None),
        due_day=_field(record, "due_day", kind, int, default=None),
        interest_rate=_field(record, "interest_rate", kind, _decimal, default=None),
        min_payment_rate=_field(record, "min_payment_rate", kind, _decimal, default=None),
        gold_holdings=_field(record, "gold_holdings", kind, gold_holdings_from_record, default={}),
    )


def transaction_from_record(record: Mapping[str, Any]) -> domain.Transaction:
    """Decode a ``transactions`` record into a Transaction entity."""
    kind = "Transaction"
    return domain.Transaction(
        id=_field(record, "id", kind, str),
        user_id=_field(record, "user_id", kind, str),
        account_id=_field(record, "account_id", kind, str),
        transaction_type=_field(record, "type", kind, domain.TransactionType),
        amount=_field(record, "amount", kind, _decimal),
        category=_field(record, "category", kind, str),
        description=_field(record, "description", kind, str, default=""),
        date=_field(record, "date", kind, _datetime),
        created_at=_field(record, "created_at", kind, _datetime),
        operation=_field(record, "operation", kind, str, default=None),
        debt_change=_field(record, "debt_change", kind, _decimal, default=None),
    )


def debt_payments_to_record(payments: tuple[domain.DebtPayment, ...]) -> list[dict[str, str]]:
    """Encode debt payments as JSON-safe data."""
    return [
        {
            "id": payment.id,
            "amount": str(payment.amount),
            "date": as_utc(payment.date).isoformat(),
            "description": payment.description,
            "created_at": as_utc(payment.created_at).isoformat(),
        }
        for payment in payments
    ]


def _debt_payments(data: list[Mapping[str, Any]]) -> tuple[domain.DebtPayment, ...]:
    kind = "Debt payment"
    return tuple(
        domain.DebtPayment(
            id=_field(item, "id", kind, str),
            amount=_field(item, "amount", kind, _decimal),
            date=_field(item, "date", kind, _datetime),
            description=_field(item, "description", kind, str, default=""),
            created_at=_field(item, "created_at", kind, _datetime),
        )
        for item in data
    )


def debt_from_record(record: Mapping[str, Any]) -> domain.Debt:
    """Decode a ``debts`` record into a Debt entity."""
    kind = "Debt"
    return domain.Debt(
        id=_field(record, "id", kind, str),
        user_id=_field(record, "user_id", kind, str),
        debt_type=_field(record, "type", kind, domain.DebtType),
        person_name=_field(record, "person_name", kind, str),
        original_amount=_field(record, "original_amount", kind, _decimal),
        current_amount=_field(record, "current_amount", kind, _decimal),
        paid_amount=_field(record, "paid_amount", kind, _decimal),
        account_id=_field(record, "account_id", kind, str),
        description=_field(record, "description", kind, str, default=""),
        status=_field(record, "status", kind, domain.DebtStatus),
        due_date=_field(record, "due_date", kind, _datetime, default=None),
        created_at=_field(record, "created_at", kind, _datetime),
        updated_at=_field(record, "updated_at", kind, _datetime),
        payments=_field(record, "payments", kind, _debt_payments, default=()),
    )


def recurring_payment_from_record(record: Mapping[str, Any]) -> domain.RecurringPayment:
    """Decode a ``recurringPayments`` record into a RecurringPayment entity."""
    kind = "Recurring payment"
    return domain.RecurringPayment(
        id=_field(record, "id", kind, str),
        user_id=_field(record, "user_id", kind, str),
        name=_field(record, "name", kind, str),
        amount=_field(record, "amount", kind, _decimal),
        category=_field(record, "category", kind, str),
        account_id=_field(record, "account_id", kind, str),
        frequency=_field(record, "frequency", kind, domain.RecurringFrequency),
        start_date=_field(record, "start_date", kind, _date),
        next_payment_date=_field(record, "next_payment_date", kind, _date),
        created_at=_field(record, "created_at", kind, _datetime),
        description=_field(record, "description", kind, str, default=""),
        end_date=_field(record, "end_date", kind, _date, default=None),
        last_payment_date=_field(record, "last_payment_date", kind, _date, default=None),
        is_active=_field(record, "is_active", kind, bool, default=True),
        auto_create_transaction=_field(record, "auto_create_transaction", kind, bool, default=True),
        reminder_days=_field(record, "reminder_days", kind, int, default=1),
        total_paid=_field(record, "total_paid", kind, _decimal, default=Decimal("0")),
        payment_count=_field(record, "payment_count", kind, int, default=0),
    )


def budget_from_record(record: Mapping[str, Any]) -> domain.Budget:
    """Decode a ``budgets`` record into a Budget entity."""
    kind = "Budget"
    return domain.Budget(
        id=_field(record, "id", kind, str),
        user_id=_field(record, "user_id", kind, str),
        category=_field(record, "category", kind, str),
        budgeted_amount=_field(record, "budgeted_amount", kind, _decimal),
        period=_field(record, "period", kind, domain.BudgetPeriod),
        start_date=_field(record, "start_date", kind, _date),
        end_date=_field(record, "end_date", kind, _date),
        created_at=_field(record, "created_at", kind, _datetime),
        updated_at=_field(record, "updated_at", kind, _datetime),
        spent_amount=_field(record, "spent_amount", kind, _decimal, default=Decimal("0")),
        remaining_amount=_field(record, "remaining_amount", kind, _decimal, default=Decimal("0")),
        progress_percentage=_field(record, "progress_percentage", kind, _decimal, default=Decimal("0")),
        color=_field(record, "color", kind, str, default="#007AFF"),
        icon=_field(record, "icon", kind, str, default="wallet"),
    )
