"""Tests for category budgets."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from paramiyonet.domain.budget import budget_progress, period_end
from paramiyonet.domain.entities import BudgetPeriod, TransactionType
from paramiyonet.domain.errors import RecordNotFound, ValidationError


@pytest.mark.parametrize(
    "budgeted,spent,remaining,percentage",
    [
        (Decimal("1000"), Decimal("250"), Decimal("750"), Decimal("25.00")),
        (Decimal("1000"), Decimal("1200"), Decimal("0"), Decimal("120.00")),
        (Decimal("300"), Decimal("100"), Decimal("200"), Decimal("33.33")),
        (Decimal("0"), Decimal("50"), Decimal("0"), Decimal("0")),
    ],
)
def test_budget_progress(budgeted, spent, remaining, percentage):
    assert budget_progress(budgeted, spent) == (remaining, percentage)


def test_period_end():
    assert period_end(date(2024, 3, 1), BudgetPeriod.MONTHLY) == date(2024, 3, 31)
    assert period_end(date(2024, 1, 31), BudgetPeriod.MONTHLY) == date(2024, 2, 28)
    assert period_end(date(2024, 3, 4), BudgetPeriod.WEEKLY) == date(2024, 3, 10)


class TestBudgetService:
    """Tests for the budget service."""

    @pytest.fixture
    def market(self, budget_service, user_id):
        budget_id = budget_service.create_budget(
            user_id, "Market", Decimal("1000"), start_date=date(2024, 3, 1)
        )
        return budget_service.get_budget(budget_id)

    def test_create_defaults(self, market):
        assert market.category == "Market"
        assert market.period == BudgetPeriod.MONTHLY
        assert market.end_date == date(2024, 3, 31)
        assert market.spent_amount == Decimal("0")
        assert market.remaining_amount == Decimal("1000")
        assert market.progress_percentage == Decimal("0")

    def test_create_validation(self, budget_service, user_id):
        with pytest.raises(ValidationError):
            budget_service.create_budget(user_id, " ", Decimal("100"))
        with pytest.raises(ValidationError):
            budget_service.create_budget(user_id, "Market", Decimal("0"))
        with pytest.raises(ValidationError):
            budget_service.create_budget(
                user_id, "Market", Decimal("100"), start_date=date(2024, 3, 10), end_date=date(2024, 3, 1)
            )

    def test_list_newest_first(self, budget_service, user_id, market):
        weekly_id = budget_service.create_budget(
            user_id, "Yemek", Decimal("400"), BudgetPeriod.WEEKLY, start_date=date(2024, 3, 4)
        )
        budget_service.create_budget("someone-else", "Market", Decimal("100"))

        assert [b.id for b in budget_service.list_budgets(user_id)] == [weekly_id, market.id]

    def test_list_active_soonest_ending_first(self, budget_service, user_id, market):
        long_id = budget_service.create_budget(
            user_id, "Tatil", Decimal("5000"), start_date=date(2024, 3, 1), end_date=date(2024, 8, 31)
        )
        short_id = budget_service.create_budget(
            user_id, "Yemek", Decimal("400"), BudgetPeriod.WEEKLY, start_date=date(2024, 4, 1)
        )

        active = budget_service.list_active_budgets(user_id, today=date(2024, 4, 2))
        assert [b.id for b in active] == [short_id, long_id]

    def test_refresh_progress_counts_category_expenses_in_window(
        self, budget_service, transaction_service, user_id, cash_account, market
    ):
        def post(amount, category, on, transaction_type=TransactionType.EXPENSE):
            transaction_service.record_transaction(
                user_id, cash_account.id, transaction_type, Decimal(amount), category, date=on
            )

        post("200", "Market", datetime(2024, 3, 5, 12, tzinfo=UTC))
        post("150", "Market", datetime(2024, 3, 31, 23, tzinfo=UTC))
        post("90", "Yemek", datetime(2024, 3, 6, tzinfo=UTC))
        post("500", "Market", datetime(2024, 3, 7, tzinfo=UTC), TransactionType.INCOME)
        # Outside the window
        post("75", "Market", datetime(2024, 4, 1, tzinfo=UTC))

        budget = budget_service.refresh_progress(market.id)

        assert budget.spent_amount == Decimal("350")
        assert budget.remaining_amount == Decimal("650")
        assert budget.progress_percentage == Decimal("35.00")
        assert not budget.is_exceeded

    def test_overspent_budget(self, budget_service, market):
        budget = budget_service.update_progress(market.id, Decimal("1500"))

        assert budget.remaining_amount == Decimal("0")
        assert budget.progress_percentage == Decimal("150.00")
        assert budget.is_exceeded

    def test_update_amount_recomputes_progress(self, budget_service, market):
        budget_service.update_progress(market.id, Decimal("400"))

        budget = budget_service.update_budget(market.id, budgeted_amount=Decimal("500"), icon="cart")

        assert budget.budgeted_amount == Decimal("500")
        assert budget.remaining_amount == Decimal("100")
        assert budget.progress_percentage == Decimal("80.00")
        assert budget.icon == "cart"
        assert budget.updated_at >= market.updated_at

    def test_update_rejects_unknown_and_invalid_fields(self, budget_service, market):
        with pytest.raises(ValidationError, match="user_id"):
            budget_service.update_budget(market.id, user_id="other")
        with pytest.raises(ValidationError):
            budget_service.update_budget(market.id, end_date=date(2024, 2, 1))
        with pytest.raises(ValidationError):
            budget_service.update_budget(market.id, period="yearly")
        with pytest.raises(RecordNotFound):
            budget_service.update_budget("missing", icon="cart")

    def test_delete(self, budget_service, market):
        budget_service.delete_budget(market.id)

        assert budget_service.get_budget(market.id) is None
        with pytest.raises(RecordNotFound):
            budget_service.delete_budget(market.id)
        with pytest.raises(RecordNotFound):
            budget_service.refresh_progress(market.id)
