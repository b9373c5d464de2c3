"""Write path for new entries: store, streak, then achievements."""

import logging
from datetime import date
from typing import Any, Optional

from kharcha.database.base import Database
from kharcha.domain.achievements import AchievementService
from kharcha.domain.entities import RecordResult
from kharcha.domain.entries import EntryService
from kharcha.domain.streak import StreakService

logger = logging.getLogger(__name__)


class RecordingService:
    """Service that records an entry and updates the engagement state.

    The three writes are independent. If a later step fails the entry is
    still stored; the streak is advisory and achievements are re-evaluated
    on the next check.
    """

    def __init__(self, db: Database):
        """Initialize recording service.

        Args:
            db: Database instance
        """
        self.entry_service = EntryService(db)
        self.streak_service = StreakService(db)
        self.achievement_service = AchievementService(db)

    def record_entry(self, today: Optional[date] = None, **fields: Any) -> RecordResult:
        """Add an entry, register today's activity and check achievements.

        Args:
            today: Day the activity happened (defaults to today); this is not
                the entry's own date, which may be backdated
            **fields: Arguments for EntryService.add_entry

        Returns:
            RecordResult with the stored entry, the streak update and the
            achievement check
        """
        entry = self.entry_service.add_entry(**fields)
        streak = self.streak_service.register_activity(today)
        achievements = self.achievement_service.check_achievements(today)
        logger.debug(
            "Recorded entry %s; streak %d; %d new achievements",
            entry.id,
            streak.current_streak,
            len(achievements.new_achievements),
        )
        return RecordResult(entry=entry, streak=streak, achievements=achievements)
