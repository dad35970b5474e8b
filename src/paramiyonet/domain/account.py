"""Account domain service."""

from decimal import Decimal
from typing import Any, Mapping, Optional

import structlog

from paramiyonet.database.base import ACCOUNTS, Database
from paramiyonet.database.mappers import account_from_record, gold_holdings_to_record
from paramiyonet.domain import balance as balance_ledger
from paramiyonet.domain import gold, rates
from paramiyonet.domain.entities import Account as AccountEntity
from paramiyonet.domain.entities import AccountSummary, AccountType, GoldLot, GoldType
from paramiyonet.domain.errors import (
    AccountNotFound,
    ConflictError,
    ValidationError,
    account_not_found,
    wrong_account_type,
)

logger = structlog.get_logger()

_ZERO = Decimal("0")

# Fields a caller may change through update_account
_EDITABLE_FIELDS = frozenset(
    {
        "name",
        "color",
        "icon",
        "include_in_total_balance",
        "limit",
        "statement_day",
        "due_day",
        "interest_rate",
        "min_payment_rate",
    }
)

DEFAULT_ACCOUNTS = (
    ("Ana Hesap", AccountType.DEBIT_CARD, "#007AFF", "card"),
    ("Nakit", AccountType.CASH, "#2ECC71", "cash"),
)


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        user_id: str,
        name: str,
        account_type: AccountType,
        initial_balance: Decimal = _ZERO,
        color: str = "#007AFF",
        icon: str = "wallet",
        include_in_total_balance: bool = True,
        limit: Optional[Decimal] = None,
        current_debt: Decimal = _ZERO,
        statement_day: Optional[int] = None,
        due_day: Optional[int] = None,
        interest_rate: Optional[Decimal] = None,
        min_payment_rate: Optional[Decimal] = None,
        gold_lots: tuple[GoldLot, ...] = (),
    ) -> str:
        """Create a new account.

        Credit cards start with ``balance = -current_debt``; gold accounts
        start at the book value of their initial lots.

        Args:
            user_id: Owning user ID
            name: Display name
            account_type: Kind of account
            initial_balance: Opening balance for balance-bearing accounts
            color: Presentation color
            icon: Presentation icon
            include_in_total_balance: Whether dashboards count this account
            limit: Credit limit (credit cards only, required)
            current_debt: Opening debt (credit cards only)
            statement_day: Statement day of month (credit cards only)
            due_day: Payment due day of month (credit cards only)
            interest_rate: Explicit monthly rate overriding the rule table
            min_payment_rate: Explicit minimum payment rate (default 0.20)
            gold_lots: Initial lots (gold accounts only)

        Returns:
            Account ID

        Raises:
            ValidationError: If name is empty or card fields are invalid
        """
        if not name or not name.strip():
            raise ValidationError("Account name is required")

        fields: dict[str, Any] = {
            "user_id": user_id,
            "name": name.strip(),
            "type": account_type.value,
            "color": color,
            "icon": icon,
            "is_active": True,
            "include_in_total_balance": include_in_total_balance,
        }

        if account_type == AccountType.CREDIT_CARD:
            fields.update(
                self._credit_card_fields(
                    limit, current_debt, statement_day, due_day, interest_rate, min_payment_rate
                )
            )
            fields["balance"] = balance_ledger.credit_card_balance(current_debt)
        elif account_type == AccountType.GOLD:
            holdings: dict[GoldType, tuple[GoldLot, ...]] = {}
            for lot in gold_lots:
                holdings = gold.add_lot(
                    holdings, lot.gold_type, lot.quantity, lot.initial_price, lot.purchase_date
                )
            fields["gold_holdings"] = gold_holdings_to_record(holdings)
            fields["balance"] = gold.book_value(holdings)
        else:
            fields["balance"] = initial_balance

        account_id = self.db.create_record(ACCOUNTS, fields)
        logger.info("account_created", account_id=account_id, user_id=user_id, type=account_type.value)
        return account_id

    def _credit_card_fields(
        self,
        limit: Optional[Decimal],
        current_debt: Decimal,
        statement_day: Optional[int],
        due_day: Optional[int],
        interest_rate: Optional[Decimal],
        min_payment_rate: Optional[Decimal],
    ) -> dict[str, Any]:
        if limit is None or limit < 0:
            raise ValidationError("Credit card limit is required and cannot be negative")
        if current_debt < 0:
            raise ValidationError("Current debt cannot be negative")
        if current_debt > limit:
            raise ValidationError(
                f"Current debt ({current_debt:.2f}) cannot exceed the limit ({limit:.2f})"
            )
        return {
            "limit": limit,
            "current_debt": current_debt,
            "statement_day": rates.validate_day(statement_day) if statement_day is not None else None,
            "due_day": rates.validate_day(due_day) if due_day is not None else None,
            "interest_rate": interest_rate,
            "min_payment_rate": min_payment_rate if min_payment_rate is not None else rates.min_payment_rate(),
        }

    def get_account(self, account_id: str) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        record = self.db.get_record(ACCOUNTS, account_id)
        if record is None:
            return None
        return account_from_record(record)

    def require_account(self, account_id: str) -> AccountEntity:
        """Get account by ID, raising AccountNotFound if it does not exist."""
        account = self.get_account(account_id)
        if account is None:
            raise AccountNotFound(account_not_found(account_id))
        return account

    def list_accounts(self, user_id: str, include_inactive: bool = False) -> list[AccountEntity]:
        """List a user's accounts, oldest first.

        Args:
            user_id: Owning user ID
            include_inactive: If True, include soft-deleted accounts
        """
        filters: dict[str, Any] = {"user_id": user_id}
        if not include_inactive:
            filters["is_active"] = True
        accounts = [account_from_record(r) for r in self.db.query_records(ACCOUNTS, filters)]
        return sorted(accounts, key=lambda acc: acc.created_at)

    def update_account(self, account_id: str, **fields: Any) -> None:
        """Update presentation, flag or credit card settings of an account.

        Raises:
            AccountNotFound: If the account does not exist
            ValidationError: If a field is not editable or has an invalid value
            ConflictError: If a new credit limit is below the current debt
        """
        account = self.require_account(account_id)
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        card_fields = {"limit", "statement_day", "due_day", "interest_rate", "min_payment_rate"}
        if card_fields & set(fields) and not account.is_credit_card:
            raise ValidationError(wrong_account_type(account.name, [AccountType.CREDIT_CARD.value]))

        if "name" in fields and not str(fields["name"]).strip():
            raise ValidationError("Account name is required")
        if "limit" in fields:
            limit = fields["limit"]
            if limit is None or limit < 0:
                raise ValidationError("Credit card limit cannot be negative")
            if limit < (account.current_debt or _ZERO):
                raise ConflictError(
                    f"New limit ({limit:.2f}) is below the current debt "
                    f"({account.current_debt:.2f}) of '{account.name}'"
                )
        for day_field in ("statement_day", "due_day"):
            if fields.get(day_field) is not None:
                fields[day_field] = rates.validate_day(fields[day_field])

        self.db.update_fields(ACCOUNTS, account_id, fields)

    def revalue_gold_account(self, account_id: str, prices: Mapping[GoldType, Decimal]) -> Decimal:
        """Mark a gold account to market and persist the new balance.

        Returns:
            The new balance
        """
        account = self.require_account(account_id)
        if not account.is_gold:
            raise ValidationError(wrong_account_type(account.name, [AccountType.GOLD.value]))
        new_balance = balance_ledger.gold_balance(account, prices)
        self.db.update_fields(ACCOUNTS, account_id, {"balance": new_balance})
        return new_balance

    def deactivate_account(self, account_id: str) -> None:
        """Soft-delete an account; it drops out of listings and totals."""
        self.require_account(account_id)
        self.db.update_fields(ACCOUNTS, account_id, {"is_active": False})
        logger.info("account_deactivated", account_id=account_id)

    def delete_account(self, account_id: str) -> None:
        """Hard-delete an account."""
        self.require_account(account_id)
        self.db.delete_record(ACCOUNTS, account_id)
        logger.info("account_deleted", account_id=account_id)

    def create_default_accounts(self, user_id: str) -> list[str]:
        """Create the starter accounts of a new user.

        Returns:
            IDs of the created accounts
        """
        return [
            self.create_account(user_id=user_id, name=name, account_type=account_type, color=color, icon=icon)
            for name, account_type, color, icon in DEFAULT_ACCOUNTS
        ]

    def total_balance(self, user_id: str) -> Decimal:
        """Dashboard total of a user's active accounts."""
        return balance_ledger.total_balance(self.list_accounts(user_id))

    def summary(self, user_id: str, gold_prices: Optional[Mapping[GoldType, Decimal]] = None) -> AccountSummary:
        """Per-type dashboard summary of a user's active accounts."""
        return balance_ledger.account_summary(self.list_accounts(user_id), gold_prices)
