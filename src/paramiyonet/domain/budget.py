"""Category budget domain service."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

import structlog
from dateutil.relativedelta import relativedelta

from paramiyonet.database.base import BUDGETS, Database
from paramiyonet.database.mappers import budget_from_record
from paramiyonet.domain.entities import Budget as BudgetEntity
from paramiyonet.domain.entities import BudgetPeriod, TransactionType
from paramiyonet.domain.errors import (
    RecordNotFound,
    ValidationError,
    non_positive_amount,
    record_not_found,
)
from paramiyonet.domain.transaction import TransactionService

logger = structlog.get_logger()

_ZERO = Decimal("0")
_CENTS = Decimal("0.01")

_UPDATABLE_FIELDS = frozenset(
    {"category", "budgeted_amount", "period", "start_date", "end_date", "color", "icon"}
)


def period_end(start: date, period: BudgetPeriod) -> date:
    """Last day of the budget window opening on ``start``."""
    if period == BudgetPeriod.WEEKLY:
        return start + timedelta(days=6)
    return start + relativedelta(months=1) - timedelta(days=1)


def budget_progress(budgeted: Decimal, spent: Decimal) -> tuple[Decimal, Decimal]:
    """Remaining amount and spent percentage of a budget.

    Remaining is floored at zero; the percentage is 0 for a non-positive
    budget and may exceed 100 once the budget is overspent.
    """
    remaining = max(budgeted - spent, _ZERO)
    if budgeted <= 0:
        return remaining, _ZERO
    return remaining, (spent / budgeted * 100).quantize(_CENTS)


class BudgetService:
    """Service for category spending budgets."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transactions = TransactionService(db)

    def create_budget(
        self,
        user_id: str,
        category: str,
        amount: Decimal,
        period: BudgetPeriod = BudgetPeriod.MONTHLY,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        color: str = "#007AFF",
        icon: str = "wallet",
    ) -> str:
        """Create a budget for an expense category.

        Args:
            user_id: Owning user ID
            category: Expense category the budget limits
            amount: Budgeted amount for the window
            period: Monthly or weekly window
            start_date: First day of the window (default: first of the
                current month for monthly budgets, today for weekly ones)
            end_date: Last day of the window (default: derived from period)
            color: Display color
            icon: Display icon

        Returns:
            Budget ID

        Raises:
            ValidationError: If category is empty, amount is not positive or
                the window ends before it starts
        """
        if not category or not category.strip():
            raise ValidationError("Category is required")
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        if start_date is None:
            today = date.today()
            start_date = today.replace(day=1) if period == BudgetPeriod.MONTHLY else today
        if end_date is None:
            end_date = period_end(start_date, period)
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")

        budget_id = self.db.create_record(
            BUDGETS,
            {
                "user_id": user_id,
                "category": category.strip(),
                "budgeted_amount": amount,
                "spent_amount": _ZERO,
                "remaining_amount": amount,
                "progress_percentage": _ZERO,
                "period": period.value,
                "start_date": start_date,
                "end_date": end_date,
                "color": color,
                "icon": icon,
            },
        )
        logger.info("budget_created", budget_id=budget_id, category=category, amount=str(amount))
        return budget_id

    def get_budget(self, budget_id: str) -> Optional[BudgetEntity]:
        """Get budget by ID, or None if not found."""
        record = self.db.get_record(BUDGETS, budget_id)
        if record is None:
            return None
        return budget_from_record(record)

    def _require(self, budget_id: str) -> BudgetEntity:
        budget = self.get_budget(budget_id)
        if budget is None:
            raise RecordNotFound(record_not_found(BUDGETS, budget_id))
        return budget

    def list_budgets(self, user_id: str) -> list[BudgetEntity]:
        """List a user's budgets, newest first."""
        budgets = [budget_from_record(r) for r in self.db.query_records(BUDGETS, {"user_id": user_id})]
        return sorted(budgets, key=lambda b: b.created_at, reverse=True)

    def list_active_budgets(self, user_id: str, today: Optional[date] = None) -> list[BudgetEntity]:
        """List budgets whose window has not ended yet, soonest ending first."""
        today = today or date.today()
        active = [b for b in self.list_budgets(user_id) if b.end_date >= today]
        return sorted(active, key=lambda b: b.end_date)

    def update_budget(self, budget_id: str, **fields) -> BudgetEntity:
        """Update budget fields.

        Changing the budgeted amount recomputes remaining amount and
        progress from the last known spending.

        Raises:
            RecordNotFound: If the budget doesn't exist
            ValidationError: If a field is unknown or a value is invalid
        """
        budget = self._require(budget_id)
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update budget field(s): {', '.join(sorted(unknown))}")

        updates = dict(fields)
        if "category" in updates:
            if not updates["category"] or not updates["category"].strip():
                raise ValidationError("Category is required")
            updates["category"] = updates["category"].strip()
        if "period" in updates:
            try:
                updates["period"] = BudgetPeriod(updates["period"]).value
            except ValueError as e:
                raise ValidationError(f"Unknown budget period '{updates['period']}'") from e
        if updates.get("start_date", budget.start_date) > updates.get("end_date", budget.end_date):
            raise ValidationError("End date must not be before start date")
        if "budgeted_amount" in updates:
            amount = updates["budgeted_amount"]
            if amount <= 0:
                raise ValidationError(non_positive_amount(amount))
            remaining, percentage = budget_progress(amount, budget.spent_amount)
            updates["remaining_amount"] = remaining
            updates["progress_percentage"] = percentage

        if updates:
            self.db.update_fields(BUDGETS, budget_id, updates)
        return self._require(budget_id)

    def delete_budget(self, budget_id: str) -> None:
        """Delete a budget.

        Raises:
            RecordNotFound: If the budget doesn't exist
        """
        self._require(budget_id)
        self.db.delete_record(BUDGETS, budget_id)
        logger.info("budget_deleted", budget_id=budget_id)

    def update_progress(self, budget_id: str, spent: Decimal) -> BudgetEntity:
        """Store ``spent`` and the remaining amount and percentage derived from it."""
        budget = self._require(budget_id)
        remaining, percentage = budget_progress(budget.budgeted_amount, spent)
        self.db.update_fields(
            BUDGETS,
            budget_id,
            {"spent_amount": spent, "remaining_amount": remaining, "progress_percentage": percentage},
        )
        return self._require(budget_id)

    def spent_in_window(self, budget: BudgetEntity) -> Decimal:
        """Expenses in the budget's category within its date window."""
        expenses = self.transactions.list_transactions(
            budget.user_id,
            start_date=budget.start_date,
            end_date=budget.end_date,
            transaction_type=TransactionType.EXPENSE,
        )
        return sum((t.amount for t in expenses if t.category == budget.category), _ZERO)

    def refresh_progress(self, budget_id: str) -> BudgetEntity:
        """Recompute a budget's spending from its category's expenses.

        Raises:
            RecordNotFound: If the budget doesn't exist
        """
        budget = self._require(budget_id)
        updated = self.update_progress(budget_id, self.spent_in_window(budget))
        if updated.is_exceeded:
            logger.warning(
                "budget_exceeded",
                budget_id=budget_id,
                category=updated.category,
                spent=str(updated.spent_amount),
                budgeted=str(updated.budgeted_amount),
            )
        return updated

    def refresh_all(self, user_id: str, today: Optional[date] = None) -> list[BudgetEntity]:
        """Refresh every active budget of a user."""
        return [self.refresh_progress(b.id) for b in self.list_active_budgets(user_id, today)]
