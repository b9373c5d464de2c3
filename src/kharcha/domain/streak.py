"""Daily activity streak."""

import logging
from datetime import date
from typing import Optional

from kharcha.database.base import Database
from kharcha.database.mappers import streak_from_blob, streak_to_blob
from kharcha.domain.entities import StreakRecord, StreakUpdate
from kharcha.utils.date_parser import coerce_date, days_between

logger = logging.getLogger(__name__)


def advance_streak(record: StreakRecord, today: date) -> StreakUpdate:
    """Apply one day of activity to a streak record.

    Activity on the same day as the last entry changes nothing. Activity on
    the next day extends the streak. Any other gap, including a clock that
    moved backwards, starts a new streak of 1 and keeps the longest streak.
    """
    today = coerce_date(today)
    if record.last_entry_date is None:
        return StreakUpdate(
            record=StreakRecord(
                current_streak=1,
                longest_streak=max(record.longest_streak, 1),
                last_entry_date=today,
            ),
            is_new_streak=True,
            changed=True,
        )

    gap = days_between(record.last_entry_date, today)
    if gap == 0:
        return StreakUpdate(record=record, is_new_streak=False, changed=False)

    if gap == 1:
        current = record.current_streak + 1
        return StreakUpdate(
            record=StreakRecord(
                current_streak=current,
                longest_streak=max(record.longest_streak, current),
                last_entry_date=today,
            ),
            is_new_streak=True,
            changed=True,
        )

    return StreakUpdate(
        record=StreakRecord(
            current_streak=1,
            longest_streak=record.longest_streak,
            last_entry_date=today,
        ),
        is_new_streak=False,
        changed=True,
    )


class StreakService:
    """Service for the persisted streak record."""

    SETTING_KEY = "streak"

    def __init__(self, db: Database):
        """Initialize streak service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_streak(self) -> StreakRecord:
        """Get the streak record (zeroed if never started)."""
        return streak_from_blob(self.db.get_setting(self.SETTING_KEY))

    def register_activity(self, today: Optional[date] = None) -> StreakUpdate:
        """Count activity for today, persisting the record if it changed.

        Args:
            today: Day of the activity (defaults to the local current date)
        """
        today = coerce_date(today) if today is not None else date.today()
        update = advance_streak(self.get_streak(), today)
        if update.changed:
            self.db.set_setting(self.SETTING_KEY, streak_to_blob(update.record))
            logger.debug(
                "Streak now %d (longest %d)", update.current_streak, update.longest_streak
            )
        return update
