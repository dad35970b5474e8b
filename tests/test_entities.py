"""Tests for domain entities."""

import pytest
from datetime import datetime, UTC
from decimal import Decimal

from paramiyonet.domain.entities import AccountType, GoldType, Transaction, TransactionType


def make_transaction(transaction_type: TransactionType) -> Transaction:
    now = datetime(2024, 3, 1, tzinfo=UTC)
    return Transaction(
        id="txn-1",
        user_id="user-1",
        account_id="acc-1",
        transaction_type=transaction_type,
        amount=Decimal("45.90"),
        category="Market",
        description="",
        date=now,
        created_at=now,
    )


class TestAccount:
    """Tests for Account entity."""

    def test_account_type_flags(self, account_factory, card_factory):
        assert card_factory().is_credit_card
        assert not card_factory().is_gold
        assert account_factory(account_type=AccountType.GOLD).is_gold
        assert not account_factory().is_credit_card

    def test_account_immutability(self, account_factory):
        account = account_factory()
        with pytest.raises(Exception):  # dataclass frozen raises FrozenInstanceError
            account.balance = Decimal("1")

    def test_account_defaults(self, account_factory):
        account = account_factory()
        assert account.is_active
        assert account.include_in_total_balance
        assert account.limit is None
        assert account.gold_holdings == {}


class TestTransaction:
    """Tests for Transaction entity."""

    def test_signed_amount(self):
        assert make_transaction(TransactionType.EXPENSE).signed_amount == Decimal("-45.90")
        assert make_transaction(TransactionType.INCOME).signed_amount == Decimal("45.90")


def test_gold_type_codes_match_quote_codes():
    assert [t.value for t in GoldType] == ["GRA", "CEYREKALTIN", "YARIMALTIN", "TAMALTIN"]
