"""Database layer for kharcha application."""

from kharcha.database.base import Database
from kharcha.database.factories import create_memory_database, create_sqlite_database

__all__ = ["Database", "create_memory_database", "create_sqlite_database"]
