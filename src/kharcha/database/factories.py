"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from kharcha.database.memory import InMemoryDatabase
from kharcha.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV_VAR = "KHARCHA_DB_PATH"


def default_database_path() -> Path:
    """Return ~/.kharcha/kharcha.db, creating the directory if needed."""
    db_dir = Path.home() / ".kharcha"
    db_dir.mkdir(exist_ok=True)
    return db_dir / "kharcha.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks KHARCHA_DB_PATH
            environment variable, then defaults to ~/.kharcha/kharcha.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV_VAR)

    if database_path is None:
        database_path = str(default_database_path())

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_memory_database() -> InMemoryDatabase:
    """Create an in-memory database instance."""
    return InMemoryDatabase()
