"""Shared pytest fixtures for kharcha tests."""

import tempfile
import os
from datetime import date
import pytest

from kharcha.database.factories import create_memory_database, create_sqlite_database
from kharcha.domain.achievements import AchievementService
from kharcha.domain.category import CategoryService
from kharcha.domain.entities import Entry, EntryType, PaymentMode, AdjustmentType
from kharcha.domain.entries import EntryService
from kharcha.domain.goals import GoalService
from kharcha.domain.ledger import BalanceService
from kharcha.domain.recording import RecordingService
from kharcha.domain.streak import StreakService
from kharcha.domain.templates import TemplateService
from decimal import Decimal


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def memory_db():
    """Create an in-memory database for testing."""
    db = create_memory_database()
    db.connect()
    db.initialize_schema()
    return db


@pytest.fixture
def entry_service(temp_db):
    """Create an EntryService with a temporary database."""
    return EntryService(temp_db)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def goal_service(temp_db):
    """Create a GoalService with a temporary database."""
    return GoalService(temp_db)


@pytest.fixture
def streak_service(temp_db):
    """Create a StreakService with a temporary database."""
    return StreakService(temp_db)


@pytest.fixture
def achievement_service(temp_db):
    """Create an AchievementService with a temporary database."""
    return AchievementService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def recording_service(temp_db):
    """Create a RecordingService with a temporary database."""
    return RecordingService(temp_db)


@pytest.fixture
def make_entry():
    """Build domain entries with sensible defaults."""
    counter = {"n": 0}

    def _make(
        type=EntryType.EXPENSE,
        amount="100",
        on=date(2024, 3, 15),
        mode=PaymentMode.UPI,
        adjustment_type=None,
        entry_id=None,
        note=None,
        category_id=None,
    ):
        counter["n"] += 1
        if adjustment_type is not None:
            adjustment_type = AdjustmentType(adjustment_type)
        return Entry(
            id=entry_id or f"e{counter['n']}",
            amount=Decimal(amount),
            type=EntryType(type),
            date=on,
            mode=PaymentMode(mode) if mode is not None else None,
            adjustment_type=adjustment_type,
            note=note,
            category_id=category_id,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def template_service(temp_db):
    """Create a TemplateService with a temporary database."""
    return TemplateService(temp_db)
