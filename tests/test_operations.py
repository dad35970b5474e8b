"""Tests for orchestrated ledger operations."""

import pytest
from datetime import datetime, UTC
from decimal import Decimal

from paramiyonet.database.base import TRANSACTIONS
from paramiyonet.domain.entities import AccountType, GoldLot, GoldType, PriceSnapshot, TransactionType
from paramiyonet.domain.errors import (
    AccountNotFound,
    InsufficientFunds,
    InsufficientHoldings,
    LimitExceeded,
    OverpaymentRejected,
    PartiallyAppliedError,
    StorageError,
    ValidationError,
)
from paramiyonet.domain.operations import (
    CARD_PAYMENT_CATEGORY,
    GOLD_SALE_CATEGORY,
    LedgerOperations,
    OperationState,
)

D1 = datetime(2024, 1, 1, tzinfo=UTC)
D2 = datetime(2024, 2, 1, tzinfo=UTC)


def _transactions(db, user_id):
    return db.query_records(TRANSACTIONS, {"user_id": user_id})


class TestPayCreditCard:
    """Tests for credit card payments."""

    def test_minimum_payment_scenario(self, ledger, account_service, transaction_service, user_id, cash_account, credit_card_account):
        """Pay the minimum of a 5000/2000 card from a 1000 balance."""
        result = ledger.pay_credit_card(user_id, credit_card_account.id, cash_account.id, Decimal("400"))

        card = account_service.get_account(credit_card_account.id)
        cash = account_service.get_account(cash_account.id)
        assert card.current_debt == Decimal("1600")
        assert card.balance == Decimal("-1600")
        assert cash.balance == Decimal("600")

        assert result.state == OperationState.PERSISTED
        assert result.warning is None
        transactions = transaction_service.list_transactions(user_id)
        assert len(transactions) == 1
        txn = transactions[0]
        assert txn.id == result.transaction_id
        assert txn.account_id == cash_account.id
        assert txn.transaction_type == TransactionType.EXPENSE
        assert txn.amount == Decimal("400")
        assert txn.category == CARD_PAYMENT_CATEGORY
        assert "Bonus" in txn.description

    def test_below_minimum_payment_warns_but_applies(self, ledger, account_service, user_id, cash_account, credit_card_account):
        result = ledger.pay_credit_card(user_id, credit_card_account.id, cash_account.id, Decimal("100"))

        assert result.warning is not None
        assert account_service.get_account(credit_card_account.id).current_debt == Decimal("1900")

    def test_overpayment_rejected_without_mutation(self, ledger, account_service, temp_db, user_id, cash_account, credit_card_account):
        with pytest.raises(OverpaymentRejected):
            ledger.pay_credit_card(user_id, credit_card_account.id, cash_account.id, Decimal("2500"))

        assert account_service.get_account(credit_card_account.id).current_debt == Decimal("2000")
        assert account_service.get_account(cash_account.id).balance == Decimal("1000")
        assert _transactions(temp_db, user_id) == []

    def test_insufficient_funds_rejected_without_mutation(self, ledger, account_service, temp_db, user_id, credit_card_account):
        poor_id = account_service.create_account(
            user_id=user_id, name="Cüzdan", account_type=AccountType.CASH, initial_balance=Decimal("300")
        )
        with pytest.raises(InsufficientFunds, match="Insufficient balance"):
            ledger.pay_credit_card(user_id, credit_card_account.id, poor_id, Decimal("400"))

        assert account_service.get_account(credit_card_account.id).current_debt == Decimal("2000")
        assert account_service.get_account(poor_id).balance == Decimal("300")
        assert _transactions(temp_db, user_id) == []

    def test_unknown_card_rejected(self, ledger, user_id, cash_account):
        with pytest.raises(AccountNotFound):
            ledger.pay_credit_card(user_id, "missing", cash_account.id, Decimal("10"))

    def test_paying_from_a_card_rejected(self, ledger, account_service, user_id, credit_card_account):
        other_id = account_service.create_account(
            user_id=user_id, name="Other", account_type=AccountType.CREDIT_CARD, limit=Decimal("1000")
        )
        with pytest.raises(ValidationError):
            ledger.pay_credit_card(user_id, credit_card_account.id, other_id, Decimal("10"))


class TestCardPurchase:
    """Tests for credit card purchases."""

    def test_purchase_increases_debt(self, ledger, account_service, transaction_service, user_id, credit_card_account):
        result = ledger.record_card_purchase(user_id, credit_card_account.id, Decimal("500"), "Market")

        card = account_service.get_account(credit_card_account.id)
        assert card.current_debt == Decimal("2500")
        assert card.balance == Decimal("-2500")
        txn = transaction_service.get_transaction(result.transaction_id)
        assert txn.account_id == credit_card_account.id
        assert txn.category == "Market"
        assert txn.operation == "record_card_purchase"
        assert txn.debt_change == Decimal("500")

    def test_purchase_up_to_limit_then_rejected(self, ledger, account_service, temp_db, user_id, credit_card_account):
        ledger.record_card_purchase(user_id, credit_card_account.id, Decimal("3000"))

        with pytest.raises(LimitExceeded):
            ledger.record_card_purchase(user_id, credit_card_account.id, Decimal("0.01"))

        assert account_service.get_account(credit_card_account.id).current_debt == Decimal("5000")
        assert len(_transactions(temp_db, user_id)) == 1


class TestPostingOps:
    """Tests for building posting writes without persisting them."""

    def test_builds_account_write_then_transaction(self, ledger, temp_db, user_id, cash_account):
        ops = ledger.posting_ops(
            user_id, cash_account.id, TransactionType.EXPENSE, Decimal("250"), "Market", operation="batch"
        )

        assert [(op.collection, op.operation) for op in ops] == [("accounts", "increment"), (TRANSACTIONS, "create")]
        assert ops[0].fields == {"balance": Decimal("-250")}
        assert ops[1].fields["operation"] == "batch"
        assert ops[1].fields["debt_change"] is None
        assert _transactions(temp_db, user_id) == []

    def test_card_expense_checks_limit(self, ledger, user_id, credit_card_account):
        with pytest.raises(LimitExceeded):
            ledger.posting_ops(user_id, credit_card_account.id, TransactionType.EXPENSE, Decimal("3001"), "Market")


class TestGold:
    """Tests for gold purchases and FIFO sales."""

    @pytest.fixture
    def stocked_gold(self, account_service, user_id):
        account_id = account_service.create_account(
            user_id=user_id,
            name="Altın",
            account_type=AccountType.GOLD,
            gold_lots=(
                GoldLot(GoldType.GRAM, Decimal("5"), Decimal("3800"), D1),
                GoldLot(GoldType.GRAM, Decimal("3"), Decimal("4000"), D2),
            ),
        )
        return account_service.get_account(account_id)

    def test_gold_account_starts_at_book_value(self, stocked_gold):
        assert stocked_gold.balance == Decimal("31000")

    def test_add_gold_appends_lot_and_revalues(self, ledger, account_service, user_id, gold_account):
        ledger.add_gold(user_id, gold_account.id, GoldType.GRAM, Decimal("10"), Decimal("4000"), D1)

        acc = account_service.get_account(gold_account.id)
        lots = acc.gold_holdings[GoldType.GRAM]
        assert len(lots) == 1
        assert lots[0].quantity == Decimal("10")
        assert lots[0].purchase_date == D1
        assert acc.balance == Decimal("40000")

    def test_add_gold_to_non_gold_account_rejected(self, ledger, user_id, cash_account):
        with pytest.raises(ValidationError):
            ledger.add_gold(user_id, cash_account.id, GoldType.GRAM, Decimal("1"), Decimal("4000"))

    def test_sell_gold_fifo_and_credits_target(self, ledger, account_service, transaction_service, user_id, stocked_gold, cash_account):
        result = ledger.sell_gold(
            user_id, stocked_gold.id, cash_account.id, GoldType.GRAM, Decimal("6"), Decimal("4500")
        )

        assert result.amount == Decimal("27000")
        acc = account_service.get_account(stocked_gold.id)
        lots = acc.gold_holdings[GoldType.GRAM]
        assert [(lot.quantity, lot.purchase_date) for lot in lots] == [(Decimal("2"), D2)]
        assert acc.balance == Decimal("9000")
        assert account_service.get_account(cash_account.id).balance == Decimal("28000")

        txn = transaction_service.get_transaction(result.transaction_id)
        assert txn.transaction_type == TransactionType.INCOME
        assert txn.account_id == cash_account.id
        assert txn.category == GOLD_SALE_CATEGORY
        assert "6" in txn.description and "gram" in txn.description

    def test_sell_more_than_held_rejected(self, ledger, account_service, temp_db, user_id, stocked_gold, cash_account):
        with pytest.raises(InsufficientHoldings):
            ledger.sell_gold(user_id, stocked_gold.id, cash_account.id, GoldType.GRAM, Decimal("9"), Decimal("4500"))

        acc = account_service.get_account(stocked_gold.id)
        assert len(acc.gold_holdings[GoldType.GRAM]) == 2
        assert account_service.get_account(cash_account.id).balance == Decimal("1000")
        assert _transactions(temp_db, user_id) == []

    def test_sell_to_missing_target_rejected(self, ledger, user_id, stocked_gold):
        with pytest.raises(AccountNotFound):
            ledger.sell_gold(user_id, stocked_gold.id, "missing", GoldType.GRAM, Decimal("1"), Decimal("4500"))

    @pytest.mark.parametrize("unit_price", [Decimal("0"), Decimal("-1")])
    def test_sell_at_non_positive_price_rejected(self, ledger, account_service, temp_db, user_id, stocked_gold, cash_account, unit_price):
        with pytest.raises(ValidationError, match="Unit price"):
            ledger.sell_gold(user_id, stocked_gold.id, cash_account.id, GoldType.GRAM, Decimal("1"), unit_price)

        acc = account_service.get_account(stocked_gold.id)
        assert sum(lot.quantity for lot in acc.gold_holdings[GoldType.GRAM]) == Decimal("8")
        assert _transactions(temp_db, user_id) == []

    def test_sell_revalues_with_price_source(self, temp_db, account_service, user_id, stocked_gold, cash_account):
        class FixedPrices:
            def get(self, now=None):
                return PriceSnapshot(
                    prices={t: Decimal("4200") for t in GoldType},
                    changes={},
                    timestamp=D2,
                    source="test",
                )

        ledger = LedgerOperations(temp_db, price_source=FixedPrices())
        ledger.sell_gold(user_id, stocked_gold.id, cash_account.id, GoldType.GRAM, Decimal("1"), Decimal("4500"))

        # The traded type is marked at the trade price
        assert account_service.get_account(stocked_gold.id).balance == Decimal("31500")


class TestPersistence:
    """Tests for atomic and ordered write paths."""

    def test_atomic_batch_failure_is_clean(self, ledger, temp_db, account_service, user_id, stocked_gold_and_cash, monkeypatch):
        gold_id, cash_id = stocked_gold_and_cash
        original_apply = temp_db._apply

        def failing_apply(session, op):
            if op.collection == TRANSACTIONS:
                raise StorageError("disk full")
            return original_apply(session, op)

        monkeypatch.setattr(temp_db, "_apply", failing_apply)
        with pytest.raises(StorageError):
            ledger.sell_gold(user_id, gold_id, cash_id, GoldType.GRAM, Decimal("1"), Decimal("4500"))
        monkeypatch.undo()

        # Nothing of the batch was committed
        assert account_service.get_account(cash_id).balance == Decimal("1000")
        assert len(account_service.get_account(gold_id).gold_holdings[GoldType.GRAM]) == 1

    def test_non_atomic_failure_reports_partial_application(self, ledger, temp_db, account_service, user_id, stocked_gold_and_cash, monkeypatch):
        gold_id, cash_id = stocked_gold_and_cash
        monkeypatch.setattr(temp_db, "supports_atomic_batch", False)

        def failing_create(collection, fields):
            raise StorageError("disk full")

        monkeypatch.setattr(temp_db, "create_record", failing_create)

        with pytest.raises(PartiallyAppliedError) as exc_info:
            ledger.sell_gold(user_id, gold_id, cash_id, GoldType.GRAM, Decimal("1"), Decimal("4500"))

        error = exc_info.value
        assert error.operation == "sell_gold"
        assert set(error.record_ids) == {gold_id, cash_id}
        assert len(error.completed) == 2
        assert isinstance(error.cause, StorageError)
        # The ordered writes before the failure stay applied
        assert account_service.get_account(cash_id).balance == Decimal("5500")

    def test_non_atomic_failure_on_first_write_is_clean(self, ledger, temp_db, user_id, stocked_gold_and_cash, monkeypatch):
        gold_id, cash_id = stocked_gold_and_cash
        monkeypatch.setattr(temp_db, "supports_atomic_batch", False)

        def failing_update(collection, record_id, fields):
            raise StorageError("disk full")

        monkeypatch.setattr(temp_db, "update_fields", failing_update)

        with pytest.raises(StorageError):
            ledger.sell_gold(user_id, gold_id, cash_id, GoldType.GRAM, Decimal("1"), Decimal("4500"))

    def test_non_atomic_success(self, ledger, temp_db, account_service, user_id, stocked_gold_and_cash, monkeypatch):
        gold_id, cash_id = stocked_gold_and_cash
        monkeypatch.setattr(temp_db, "supports_atomic_batch", False)

        result = ledger.sell_gold(user_id, gold_id, cash_id, GoldType.GRAM, Decimal("2"), Decimal("4500"))

        assert result.state == OperationState.PERSISTED
        assert account_service.get_account(cash_id).balance == Decimal("10000")
        assert result.transaction_id is not None


@pytest.fixture
def stocked_gold_and_cash(account_service, user_id):
    gold_id = account_service.create_account(
        user_id=user_id,
        name="Altın",
        account_type=AccountType.GOLD,
        gold_lots=(GoldLot(GoldType.GRAM, Decimal("5"), Decimal("3800"), D1),),
    )
    cash_id = account_service.create_account(
        user_id=user_id, name="Nakit", account_type=AccountType.CASH, initial_balance=Decimal("1000")
    )
    return gold_id, cash_id
