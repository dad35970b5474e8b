"""Factory functions for opening the ledger store."""

import os
from pathlib import Path
from typing import Optional, Union

import structlog

from paramiyonet.database.sqlalchemy_db import SQLAlchemyDatabase

logger = structlog.get_logger()

DB_PATH_ENV = "PARAMIYONET_DB_PATH"
DEFAULT_DB_PATH = Path("~/.paramiyonet/paramiyonet.db")


def resolve_database_path(database_path: Union[str, Path, None] = None) -> Path:
    """Pick the ledger file: explicit path, then $PARAMIYONET_DB_PATH, then the default.

    ``~`` is expanded in every case.
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV) or DEFAULT_DB_PATH
    return Path(database_path).expanduser()


def create_sqlite_database(database_path: Union[str, Path, None] = None) -> SQLAlchemyDatabase:
    """Open (and create if needed) the SQLite ledger file.

    Missing parent directories of the resolved path are created, so an
    override such as ``--db-path ~/ledgers/2024/home.db`` works on first use.

    Args:
        database_path: Path to the SQLite file, or None to fall back to the
            environment variable and then ``~/.paramiyonet/paramiyonet.db``

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = resolve_database_path(database_path)
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("database_directory_created", path=str(path.parent))
    return SQLAlchemyDatabase(f"sqlite:///{path}")
