"""Shared pytest fixtures for paramiyonet tests."""

import tempfile
import os
from datetime import datetime, UTC
from decimal import Decimal
import pytest

from paramiyonet.database.factories import create_sqlite_database
from paramiyonet.domain.account import AccountService
from paramiyonet.domain.budget import BudgetService
from paramiyonet.domain.debt import DebtService
from paramiyonet.domain.entities import Account, AccountType
from paramiyonet.domain.operations import LedgerOperations
from paramiyonet.domain.recurring import RecurringPaymentService
from paramiyonet.domain.transaction import TransactionService

USER_ID = "user-1"


def make_account(**overrides) -> Account:
    """Build an in-memory Account entity for pure ledger tests."""
    now = datetime(2024, 1, 1, tzinfo=UTC)
    fields = dict(
        id="acc-1",
        user_id=USER_ID,
        name="Test Account",
        account_type=AccountType.CASH,
        balance=Decimal("0"),
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return Account(**fields)


def make_card(limit="5000", debt="2000", **overrides) -> Account:
    """Build an in-memory credit card entity."""
    fields = dict(
        name="Test Card",
        account_type=AccountType.CREDIT_CARD,
        balance=-Decimal(debt),
        limit=Decimal(limit),
        current_debt=Decimal(debt),
        min_payment_rate=Decimal("0.20"),
    )
    fields.update(overrides)
    return make_account(**fields)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def ledger(temp_db):
    """Create LedgerOperations with a temporary database."""
    return LedgerOperations(temp_db)


@pytest.fixture
def debt_service(temp_db):
    """Create a DebtService with a temporary database."""
    return DebtService(temp_db)


@pytest.fixture
def recurring_service(temp_db):
    """Create a RecurringPaymentService with a temporary database."""
    return RecurringPaymentService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    """Create a BudgetService with a temporary database."""
    return BudgetService(temp_db)


@pytest.fixture
def cash_account(account_service):
    """Create a cash account holding 1000."""
    account_id = account_service.create_account(
        user_id=USER_ID, name="Nakit", account_type=AccountType.CASH, initial_balance=Decimal("1000")
    )
    return account_service.get_account(account_id)


@pytest.fixture
def credit_card_account(account_service):
    """Create a credit card with limit 5000 and debt 2000."""
    account_id = account_service.create_account(
        user_id=USER_ID,
        name="Bonus",
        account_type=AccountType.CREDIT_CARD,
        limit=Decimal("5000"),
        current_debt=Decimal("2000"),
    )
    return account_service.get_account(account_id)


@pytest.fixture
def gold_account(account_service):
    """Create an empty gold account."""
    account_id = account_service.create_account(
        user_id=USER_ID, name="Altın", account_type=AccountType.GOLD
    )
    return account_service.get_account(account_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def account_factory():
    """Factory for in-memory Account entities."""
    return make_account


@pytest.fixture
def card_factory():
    """Factory for in-memory credit card entities."""
    return make_card
