"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from budgetbook.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "BUDGETBOOK_DB_PATH"
DATABASE_URL_ENV = "BUDGETBOOK_DATABASE_URL"


def default_data_dir() -> Path:
    """Return ~/.budgetbook, creating it if needed."""
    data_dir = Path.home() / ".budgetbook"
    data_dir.mkdir(exist_ok=True)
    return data_dir


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks BUDGETBOOK_DB_PATH
            environment variable, then defaults to ~/.budgetbook/budgetbook.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path is None:
        database_path = str(default_data_dir() / "budgetbook.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_database(database_url: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database from a SQLAlchemy URL.

    Falls back to BUDGETBOOK_DATABASE_URL, then to the SQLite defaults of
    :func:`create_sqlite_database`.
    """
    if database_url is None:
        database_url = os.environ.get(DATABASE_URL_ENV)

    if database_url is None:
        return create_sqlite_database()

    return SQLAlchemyDatabase(database_url)
