"""Domain layer for paramiyonet application."""

from paramiyonet.domain.account import AccountService
from paramiyonet.domain.transaction import TransactionService
from paramiyonet.domain.operations import LedgerOperations
from paramiyonet.domain.debt import DebtService
from paramiyonet.domain.recurring import RecurringPaymentService
from paramiyonet.domain.budget import BudgetService
from paramiyonet.domain.prices import PriceQuoteCache, TruncgilPriceProvider

__all__ = [
    "AccountService",
    "TransactionService",
    "LedgerOperations",
    "DebtService",
    "RecurringPaymentService",
    "BudgetService",
    "PriceQuoteCache",
    "TruncgilPriceProvider",
]
