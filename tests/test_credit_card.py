"""Tests for credit card ledger rules."""

import pytest
from decimal import Decimal

from paramiyonet.domain import credit_card
from paramiyonet.domain.entities import AccountType
from paramiyonet.domain.errors import LimitExceeded, OverpaymentRejected, ValidationError


class TestLimits:
    """Tests for limit and minimum payment calculations."""

    def test_available_limit(self):
        assert credit_card.available_limit(Decimal("5000"), Decimal("2000")) == Decimal("3000")

    def test_available_limit_clamped_at_zero(self):
        assert credit_card.available_limit(Decimal("10000"), Decimal("12000")) == Decimal("0")

    def test_minimum_payment_default_rate(self):
        assert credit_card.minimum_payment(Decimal("2000")) == Decimal("400")

    def test_minimum_payment_account_rate(self, card_factory):
        card = card_factory(min_payment_rate=Decimal("0.40"))
        assert credit_card.card_minimum_payment(card) == Decimal("800")

    def test_monthly_interest_uses_debt_bracket(self):
        assert credit_card.monthly_interest_estimate(Decimal("2000")) == Decimal("70")
        assert credit_card.monthly_interest_estimate(Decimal("2000"), is_overdue=True) == Decimal("76")
        assert credit_card.monthly_interest_estimate(Decimal("30000")) == Decimal("1275")

    def test_effective_rate_prefers_explicit_rate(self, card_factory):
        assert credit_card.effective_interest_rate(card_factory()) == Decimal("3.50")
        assert credit_card.effective_interest_rate(card_factory(interest_rate=Decimal("2.99"))) == Decimal("2.99")


class TestPurchase:
    """Tests for purchase validation."""

    def test_purchase_within_limit(self, card_factory):
        assert credit_card.apply_purchase(card_factory(), Decimal("3000")) == Decimal("5000")

    def test_purchase_over_limit_rejected(self, card_factory):
        with pytest.raises(LimitExceeded, match="available limit"):
            credit_card.apply_purchase(card_factory(), Decimal("3000.01"))

    def test_purchase_non_positive_rejected(self, card_factory):
        with pytest.raises(ValidationError):
            credit_card.apply_purchase(card_factory(), Decimal("0"))

    def test_purchase_on_non_card_rejected(self, account_factory):
        with pytest.raises(ValidationError):
            credit_card.apply_purchase(account_factory(account_type=AccountType.CASH), Decimal("10"))


class TestPayment:
    """Tests for payment validation."""

    def test_payment_reduces_debt(self, card_factory):
        assert credit_card.apply_payment(card_factory(), Decimal("400")) == Decimal("1600")

    def test_full_payment_clears_debt(self, card_factory):
        assert credit_card.apply_payment(card_factory(), Decimal("2000")) == Decimal("0")

    def test_overpayment_rejected(self, card_factory):
        with pytest.raises(OverpaymentRejected, match="current debt"):
            credit_card.apply_payment(card_factory(), Decimal("2000.01"))

    def test_below_minimum_is_advisory(self, card_factory):
        card = card_factory()
        assert credit_card.is_below_minimum(card, Decimal("100"))
        assert not credit_card.is_below_minimum(card, Decimal("400"))

    def test_paying_small_debt_in_full_is_not_below_minimum(self, card_factory):
        card = card_factory(debt="50")
        assert not credit_card.is_below_minimum(card, Decimal("50"))
