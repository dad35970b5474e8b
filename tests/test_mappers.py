"""Tests for record decoding."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from paramiyonet.database.mappers import (
    account_from_record,
    as_utc,
    budget_from_record,
    gold_holdings_from_record,
    gold_holdings_to_record,
    transaction_from_record,
)
from paramiyonet.domain.entities import AccountType, BudgetPeriod, GoldLot, GoldType, TransactionType
from paramiyonet.domain.errors import RecordDecodeError


def account_record(**overrides):
    record = {
        "id": "acc-1",
        "user_id": "user-1",
        "name": "Nakit",
        "type": "cash",
        "balance": Decimal("100.00"),
        "created_at": datetime(2024, 1, 1, 9, 30),
        "updated_at": datetime(2024, 1, 1, 9, 30),
    }
    record.update(overrides)
    return record


def test_account_defaults_fill_optional_fields():
    acc = account_from_record(account_record())

    assert acc.account_type == AccountType.CASH
    assert acc.color == "#007AFF"
    assert acc.icon == "wallet"
    assert acc.is_active
    assert acc.limit is None
    assert acc.gold_holdings == {}


def test_naive_datetimes_are_utc():
    acc = account_from_record(account_record())
    assert acc.created_at == datetime(2024, 1, 1, 9, 30, tzinfo=UTC)
    assert as_utc(datetime(2024, 1, 1)).tzinfo is UTC


def test_missing_required_field():
    record = account_record()
    del record["balance"]
    with pytest.raises(RecordDecodeError, match="balance"):
        account_from_record(record)


def test_invalid_enum_value():
    with pytest.raises(RecordDecodeError, match="type"):
        account_from_record(account_record(type="wallet"))


def test_float_amounts_decoded_exactly():
    acc = account_from_record(account_record(balance=0.1))
    assert acc.balance == Decimal("0.1")


def test_transaction_from_record():
    txn = transaction_from_record(
        {
            "id": "txn-1",
            "user_id": "user-1",
            "account_id": "acc-1",
            "type": "expense",
            "amount": "45.90",
            "category": "Market",
            "date": "2024-03-01T10:00:00+03:00",
            "created_at": datetime(2024, 3, 1, 7, 0),
        }
    )

    assert txn.transaction_type == TransactionType.EXPENSE
    assert txn.amount == Decimal("45.90")
    assert txn.description == ""
    assert txn.date == datetime(2024, 3, 1, 7, 0, tzinfo=UTC)
    assert txn.operation is None
    assert txn.debt_change is None


def test_budget_from_record():
    record = {
        "id": "bud-1",
        "user_id": "user-1",
        "category": "Market",
        "budgeted_amount": Decimal("2000.00"),
        "period": "weekly",
        "start_date": "2024-03-04",
        "end_date": datetime(2024, 3, 10),
        "created_at": datetime(2024, 3, 1, 7, 0),
        "updated_at": datetime(2024, 3, 1, 7, 0),
    }
    budget = budget_from_record(record)

    assert budget.period == BudgetPeriod.WEEKLY
    assert budget.start_date == date(2024, 3, 4)
    assert budget.end_date == date(2024, 3, 10)
    assert budget.spent_amount == Decimal("0")
    assert budget.icon == "wallet"

    with pytest.raises(RecordDecodeError, match="period"):
        budget_from_record({**record, "period": "daily"})


def test_gold_holdings_round_trip_keeps_purchase_order():
    early = GoldLot(GoldType.GRAM, Decimal("2.5"), Decimal("2000"), datetime(2024, 1, 1, tzinfo=UTC))
    late = GoldLot(GoldType.GRAM, Decimal("1"), Decimal("2400"), datetime(2024, 2, 1, tzinfo=UTC))

    encoded = gold_holdings_to_record({GoldType.GRAM: (early, late)})
    encoded["GRA"].reverse()

    assert gold_holdings_from_record(encoded) == {GoldType.GRAM: (early, late)}


def test_gold_lot_missing_quantity():
    with pytest.raises(RecordDecodeError, match="quantity"):
        gold_holdings_from_record(
            {"GRA": [{"initial_price": "2000", "purchase_date": "2024-01-01T00:00:00+00:00"}]}
        )
