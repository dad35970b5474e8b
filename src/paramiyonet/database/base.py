"""Abstract storage collaborator interface.

Records are plain dictionaries of logical field names, grouped into
collections and keyed by a generated id. Decoding into typed entities
happens in ``paramiyonet.database.mappers``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

ACCOUNTS = "accounts"
TRANSACTIONS = "transactions"
RECURRING_PAYMENTS = "recurringPayments"
DEBTS = "debts"
BUDGETS = "budgets"

COLLECTIONS = (ACCOUNTS, TRANSACTIONS, RECURRING_PAYMENTS, DEBTS, BUDGETS)

WRITE_OPERATIONS = ("create", "update", "increment", "delete")


@dataclass(frozen=True)
class WriteOp:
    """One write inside a batch.

    ``record_id`` is ignored for ``create``; ``fields`` holds the new fields
    for ``create``/``update`` and the deltas for ``increment``.
    """

    collection: str
    operation: str
    record_id: Optional[str] = None
    fields: dict[str, Any] = field(default_factory=dict)


class Database(ABC):
    """Abstract database interface for paramiyonet."""

    #: True when ``batch_write`` commits all of its writes or none of them
    supports_atomic_batch: bool = False

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def create_record(self, collection: str, fields: dict[str, Any]) -> str:
        """Create a record. Returns the generated record ID."""
        pass

    @abstractmethod
    def get_record(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        """Get a record by ID, or None if it does not exist."""
        pass

    @abstractmethod
    def query_records(
        self, collection: str, filters: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """List records whose fields equal every value in ``filters``."""
        pass

    @abstractmethod
    def update_fields(self, collection: str, record_id: str, fields: dict[str, Any]) -> None:
        """Overwrite the given fields of a record."""
        pass

    @abstractmethod
    def increment_fields(
        self, collection: str, record_id: str, deltas: dict[str, Decimal]
    ) -> None:
        """Atomically add ``deltas`` to numeric fields of a record."""
        pass

    @abstractmethod
    def delete_record(self, collection: str, record_id: str) -> None:
        """Delete a record."""
        pass

    @abstractmethod
    def batch_write(self, ops: list[WriteOp]) -> list[str]:
        """Apply several writes. Returns the record ID of each op, in order."""
        pass
