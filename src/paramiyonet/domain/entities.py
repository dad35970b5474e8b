"""Domain model entities for paramiyonet.

These are pure data classes representing business concepts, independent of
the storage schema. Records coming out of the storage layer are decoded into
these entities by ``paramiyonet.database.mappers`` so that the ledger rules
never operate on partially-shaped data.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Kind of financial container."""

    CASH = "cash"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    GOLD = "gold"


class GoldType(str, Enum):
    """Gold holding types. Values double as price quote codes."""

    GRAM = "GRA"
    QUARTER = "CEYREKALTIN"
    HALF = "YARIMALTIN"
    FULL = "TAMALTIN"


class TransactionType(str, Enum):
    """Direction of a ledger entry."""

    INCOME = "income"
    EXPENSE = "expense"


class DebtType(str, Enum):
    """Person-to-person debt direction."""

    LENT = "lent"
    BORROWED = "borrowed"


class DebtStatus(str, Enum):
    """Repayment status of a debt."""

    ACTIVE = "active"
    PARTIAL = "partial"
    PAID = "paid"


class RecurringFrequency(str, Enum):
    """Schedule of a recurring payment."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BudgetPeriod(str, Enum):
    """Length of a budget window."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"


BALANCE_ACCOUNT_TYPES = frozenset(
    {
        AccountType.CASH,
        AccountType.DEBIT_CARD,
        AccountType.SAVINGS,
        AccountType.INVESTMENT,
    }
)


@dataclass(frozen=True)
class GoldLot:
    """A discrete, dated purchase of gold at a fixed unit price."""

    gold_type: GoldType
    quantity: Decimal
    initial_price: Decimal
    purchase_date: datetime


@dataclass(frozen=True)
class InterestRates:
    """Monthly credit card interest rates, in percent."""

    reference: Decimal
    regular: Decimal
    overdue: Decimal


@dataclass(frozen=True)
class Account:
    """Financial container domain entity.

    Credit card fields are only meaningful for ``AccountType.CREDIT_CARD`` and
    ``gold_holdings`` only for ``AccountType.GOLD``.
    """

    id: str
    user_id: str
    name: str
    account_type: AccountType
    balance: Decimal
    created_at: datetime
    updated_at: datetime
    color: str = "#007AFF"
    icon: str = "wallet"
    is_active: bool = True
    include_in_total_balance: bool = True
    limit: Optional[Decimal] = None
    current_debt: Optional[Decimal] = None
    statement_day: Optional[int] = None
    due_day: Optional[int] = None
    interest_rate: Optional[Decimal] = None
    min_payment_rate: Optional[Decimal] = None
    gold_holdings: dict[GoldType, tuple[GoldLot, ...]] = field(default_factory=dict)

    @property
    def is_credit_card(self) -> bool:
        return self.account_type == AccountType.CREDIT_CARD

    @property
    def is_gold(self) -> bool:
        return self.account_type == AccountType.GOLD


@dataclass(frozen=True)
class Transaction:
    """Ledger entry produced as a side effect of account mutations."""

    id: str
    user_id: str
    account_id: str
    transaction_type: TransactionType
    amount: Decimal
    category: str
    description: str
    date: datetime
    created_at: datetime
    #: Orchestrated operation that created the entry, if any
    operation: Optional[str] = None
    #: Change to card debt made when the entry was posted (credit cards only)
    debt_change: Optional[Decimal] = None

    @property
    def signed_amount(self) -> Decimal:
        """Amount as a balance delta (negative for expenses)."""
        if self.transaction_type == TransactionType.EXPENSE:
            return -self.amount
        return self.amount


@dataclass(frozen=True)
class DebtPayment:
    """Single repayment recorded against a debt."""

    id: str
    amount: Decimal
    date: datetime
    description: str
    created_at: datetime


@dataclass(frozen=True)
class Debt:
    """Person-to-person debt domain entity."""

    id: str
    user_id: str
    debt_type: DebtType
    person_name: str
    original_amount: Decimal
    current_amount: Decimal
    paid_amount: Decimal
    account_id: str
    description: str
    status: DebtStatus
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    payments: tuple[DebtPayment, ...] = ()


@dataclass(frozen=True)
class RecurringPayment:
    """Scheduled payment that periodically produces a transaction."""

    id: str
    user_id: str
    name: str
    amount: Decimal
    category: str
    account_id: str
    frequency: RecurringFrequency
    start_date: date
    next_payment_date: date
    created_at: datetime
    description: str = ""
    end_date: Optional[date] = None
    last_payment_date: Optional[date] = None
    is_active: bool = True
    auto_create_transaction: bool = True
    reminder_days: int = 1
    total_paid: Decimal = Decimal("0")
    payment_count: int = 0


@dataclass(frozen=True)
class Budget:
    """Spending limit for one expense category over a date window.

    ``spent_amount``, ``remaining_amount`` and ``progress_percentage`` are
    the values of the last progress refresh.
    """

    id: str
    user_id: str
    category: str
    budgeted_amount: Decimal
    period: BudgetPeriod
    start_date: date
    end_date: date
    created_at: datetime
    updated_at: datetime
    spent_amount: Decimal = Decimal("0")
    remaining_amount: Decimal = Decimal("0")
    progress_percentage: Decimal = Decimal("0")
    color: str = "#007AFF"
    icon: str = "wallet"

    @property
    def is_exceeded(self) -> bool:
        return self.spent_amount > self.budgeted_amount


@dataclass(frozen=True)
class GoldBreakdown:
    """Valuation of the lots of a single gold type."""

    gold_type: GoldType
    quantity: Decimal
    current_price: Decimal
    current_value: Decimal
    cost_basis: Decimal
    profit_loss: Decimal
    profit_loss_percentage: Decimal


@dataclass(frozen=True)
class GoldValuation:
    """Aggregate valuation across every gold type of a holding."""

    current_value: Decimal
    cost_basis: Decimal
    profit_loss: Decimal
    profit_loss_percentage: Decimal
    breakdown: tuple[GoldBreakdown, ...] = ()


@dataclass(frozen=True)
class AccountSummary:
    """Dashboard totals per account type."""

    total_balance: Decimal
    cash_balance: Decimal
    debit_card_balance: Decimal
    credit_card_balance: Decimal
    savings_balance: Decimal
    investment_balance: Decimal
    gold_balance: Decimal
    gold: GoldValuation


@dataclass(frozen=True)
class PriceSnapshot:
    """Gold price quote at a point in time, labelled with its source."""

    prices: dict[GoldType, Decimal]
    changes: dict[GoldType, Decimal]
    timestamp: datetime
    source: str

    def price_of(self, gold_type: GoldType) -> Decimal:
        return self.prices[gold_type]


@dataclass(frozen=True)
class MonthlyStats:
    """Income/expense totals for one calendar month."""

    total_income: Decimal
    total_expense: Decimal
    net_amount: Decimal
    transaction_count: int


@dataclass(frozen=True)
class RecurringSummary:
    """Aggregates over a user's recurring payments."""

    total_monthly_amount: Decimal
    total_yearly_amount: Decimal
    active_count: int
    upcoming_count: int
    overdue_count: int
