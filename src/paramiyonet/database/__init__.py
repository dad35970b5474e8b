"""Database layer for paramiyonet application."""

from paramiyonet.database.base import Database, WriteOp
from paramiyonet.database.factories import create_sqlite_database

__all__ = ["Database", "WriteOp", "create_sqlite_database"]
