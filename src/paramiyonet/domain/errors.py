"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Iterable, Sequence


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class AccountNotFound(NotFoundError):
    """Referenced account id does not resolve."""


class RecordNotFound(NotFoundError):
    """Referenced record id does not resolve in its collection."""


class ConflictError(DomainError):
    """Domain conflict, such as a limit below the outstanding debt."""


class InsufficientHoldings(DomainError):
    """A gold sale asks for more quantity than the lots hold."""


class InsufficientFunds(DomainError):
    """A payment exceeds the balance of its source account."""


class LimitExceeded(DomainError):
    """A credit card purchase exceeds the available limit."""


class OverpaymentRejected(DomainError):
    """A credit card payment exceeds the current debt."""


class RecordDecodeError(DomainError):
    """A stored record cannot be decoded into a domain entity."""


class StorageError(DomainError):
    """The storage collaborator failed unexpectedly."""


class PartiallyAppliedError(DomainError):
    """A multi-write operation failed after some writes were persisted.

    Attributes:
        operation: Name of the orchestrated operation
        record_ids: Ids of every record the operation touches
        completed: Descriptions of the writes that were persisted
    """

    def __init__(
        self,
        operation: str,
        record_ids: Sequence[str],
        completed: Sequence[str],
        cause: Exception,
    ):
        self.operation = operation
        self.record_ids = tuple(record_ids)
        self.completed = tuple(completed)
        self.cause = cause
        super().__init__(
            f"Operation '{operation}' was partially applied "
            f"(completed: {', '.join(self.completed) or 'none'}; "
            f"records: {', '.join(self.record_ids)}): {cause}. "
            "Reconciliation is required."
        )


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def record_not_found(collection: str, record_id: str) -> str:
    """Return message for missing record in a collection."""
    return f"Record {record_id} not found in '{collection}'"


def non_positive_amount(amount: Decimal) -> str:
    """Return message for an amount that must be strictly positive."""
    return f"Amount must be greater than zero (got {amount})"


def insufficient_funds(account_name: str, balance: Decimal, amount: Decimal) -> str:
    """Return message when a source account cannot cover a payment."""
    return (
        f"Insufficient balance in '{account_name}': "
        f"available {balance:.2f}, requested {amount:.2f}"
    )


def limit_exceeded(card_name: str, available: Decimal, amount: Decimal) -> str:
    """Return message when a purchase would exceed the card limit."""
    return (
        f"Purchase of {amount:.2f} exceeds the available limit of "
        f"'{card_name}' ({available:.2f})"
    )


def overpayment(card_name: str, current_debt: Decimal, amount: Decimal) -> str:
    """Return message when a payment exceeds the card debt."""
    return (
        f"Payment of {amount:.2f} exceeds the current debt of "
        f"'{card_name}' ({current_debt:.2f})"
    )


def insufficient_holdings(gold_type: str, available: Decimal, requested: Decimal) -> str:
    """Return message when a gold sale exceeds the lots held."""
    return (
        f"Not enough {gold_type} to sell: available {available}, "
        f"requested {requested}"
    )


def wrong_account_type(account_name: str, expected: Iterable[str]) -> str:
    """Return message when an operation targets the wrong kind of account."""
    return f"Account '{account_name}' must be of type {' or '.join(expected)}"
