"""Database layer for budgetbook application."""

from budgetbook.database.base import Database
from budgetbook.database.errors import (
    StorageError,
    ConstraintViolationError,
    StorageUnavailableError,
)
from budgetbook.database.factories import create_sqlite_database, create_database

__all__ = [
    "Database",
    "StorageError",
    "ConstraintViolationError",
    "StorageUnavailableError",
    "create_sqlite_database",
    "create_database",
]
