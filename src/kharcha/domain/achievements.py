"""Achievement rule table and unlock evaluation.

Unlocks only ever grow the stored set. Goal achievements are additionally
gated by the goal completion flags: once a flag is reset (because its target
changed), completing the goal again is reported as a new unlock, while the
achievement ID itself stays in the set.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from kharcha.database.base import Database
from kharcha.database.mappers import achievements_from_blob
from kharcha.domain.entities import (
    AchievementCheck,
    AchievementStatus,
    GoalCategory,
    GoalCompletionFlags,
    GoalPeriod,
    GoalProgress,
    StreakRecord,
    Totals,
)
from kharcha.domain.goals import CELEBRATED_PERIODS, GoalService, calculate_goal_progress
from kharcha.domain.ledger import calculate_totals
from kharcha.domain.streak import StreakService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementContext:
    """Aggregates the rule predicates are evaluated against."""

    entry_count: int
    streak: StreakRecord
    totals: Totals
    goal_progress: dict[GoalPeriod, GoalProgress] = field(default_factory=dict)

    def goal_completed(self, period: GoalPeriod) -> bool:
        progress = self.goal_progress.get(period)
        return progress is not None and progress.target_goal > 0 and progress.is_completed


@dataclass(frozen=True)
class AchievementRule:
    """One row of the achievement table."""

    id: str
    name: str
    description: str
    icon: str
    predicate: Callable[[AchievementContext], bool]
    goal_period: Optional[GoalPeriod] = None

    def status(self, unlocked: bool) -> AchievementStatus:
        return AchievementStatus(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            unlocked=unlocked,
        )


def _entries_at_least(count: int) -> Callable[[AchievementContext], bool]:
    return lambda context: context.entry_count >= count


def _streak_at_least(days: int) -> Callable[[AchievementContext], bool]:
    return lambda context: context.streak.current_streak >= days


def _balance_at_least(amount: int) -> Callable[[AchievementContext], bool]:
    return lambda context: context.totals.balance >= Decimal(amount)


def _goal_completed(period: GoalPeriod) -> Callable[[AchievementContext], bool]:
    return lambda context: context.goal_completed(period)


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule("first_entry", "First Step", "Added your first entry", "star", _entries_at_least(1)),
    AchievementRule("ten_entries", "Getting Started", "Added 10 entries", "trophy", _entries_at_least(10)),
    AchievementRule("fifty_entries", "Consistent Tracker", "Added 50 entries", "medal", _entries_at_least(50)),
    AchievementRule("hundred_entries", "Dedicated Tracker", "Added 100 entries", "ribbon", _entries_at_least(100)),
    AchievementRule("streak_7", "Week Warrior", "7 day streak", "flame", _streak_at_least(7)),
    AchievementRule("streak_30", "Monthly Master", "30 day streak", "flame", _streak_at_least(30)),
    AchievementRule("savings_10k", "Saver", "Saved 10,000", "wallet", _balance_at_least(10_000)),
    AchievementRule("savings_1lakh", "Big Saver", "Saved 1,00,000", "cash", _balance_at_least(100_000)),
    AchievementRule(
        "positive_balance",
        "In the Green",
        "Positive net balance",
        "trending-up",
        lambda context: context.totals.balance > 0,
    ),
    AchievementRule(
        "monthly_goal_completed",
        "Monthly Goal Achiever",
        "Reached your monthly savings goal",
        "trophy",
        _goal_completed(GoalPeriod.MONTHLY),
        goal_period=GoalPeriod.MONTHLY,
    ),
    AchievementRule(
        "yearly_goal_completed",
        "Yearly Goal Achiever",
        "Reached your yearly savings goal",
        "medal",
        _goal_completed(GoalPeriod.YEARLY),
        goal_period=GoalPeriod.YEARLY,
    ),
    AchievementRule(
        "custom_goal_completed",
        "Goal Crusher",
        "Achieved your custom savings goal",
        "ribbon",
        _goal_completed(GoalPeriod.CUSTOM),
        goal_period=GoalPeriod.CUSTOM,
    ),
)


@dataclass(frozen=True)
class Evaluation:
    """Outcome of evaluating the rule table once."""

    newly_unlocked: tuple[str, ...]
    unlocked: tuple[str, ...]
    completed_goals: GoalCompletionFlags


def evaluate_achievements(
    context: AchievementContext,
    unlocked: list[str],
    completed_goals: GoalCompletionFlags,
    rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES,
) -> Evaluation:
    """Evaluate every rule against the context without touching storage."""
    unlocked_ids = list(unlocked)
    newly_unlocked: list[str] = []
    flags = completed_goals

    for rule in rules:
        if rule.goal_period is not None:
            if flags.is_set(rule.goal_period) or not rule.predicate(context):
                continue
            flags = flags.with_flag(rule.goal_period, True)
        elif rule.id in unlocked_ids or not rule.predicate(context):
            continue

        newly_unlocked.append(rule.id)
        if rule.id not in unlocked_ids:
            unlocked_ids.append(rule.id)

    return Evaluation(
        newly_unlocked=tuple(newly_unlocked),
        unlocked=tuple(unlocked_ids),
        completed_goals=flags,
    )


class AchievementService:
    """Service for evaluating and persisting achievements."""

    SETTING_KEY = "achievements"

    def __init__(self, db: Database, rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES):
        """Initialize achievement service.

        Args:
            db: Database instance
            rules: Achievement rule table
        """
        self.db = db
        self.rules = rules
        self.goal_service = GoalService(db)
        self.streak_service = StreakService(db)

    def get_unlocked(self) -> list[str]:
        """Get the unlocked achievement IDs in unlock order."""
        return achievements_from_blob(self.db.get_setting(self.SETTING_KEY))

    def build_context(self, today: Optional[date] = None) -> AchievementContext:
        """Compute the aggregates the rules look at."""
        entries = self.db.list_entries()
        goals = self.goal_service.get_goals()
        return AchievementContext(
            entry_count=len(entries),
            streak=self.streak_service.get_streak(),
            totals=calculate_totals(entries),
            goal_progress={
                period: calculate_goal_progress(entries, goals, period, GoalCategory.SAVINGS, today)
                for period in CELEBRATED_PERIODS
            },
        )

    def check_achievements(self, today: Optional[date] = None) -> AchievementCheck:
        """Unlock every achievement whose rule now holds.

        Args:
            today: Reference day for monthly and yearly goals (defaults to today)

        Returns:
            AchievementCheck with the achievements unlocked by this check and
            every rule with its current unlocked flag
        """
        unlocked = self.get_unlocked()
        completed_goals = self.goal_service.get_completed_goals()
        evaluation = evaluate_achievements(
            self.build_context(today), unlocked, completed_goals, self.rules
        )

        for rule in self.rules:
            if (
                rule.goal_period is not None
                and evaluation.completed_goals.is_set(rule.goal_period)
                and not completed_goals.is_set(rule.goal_period)
            ):
                self.goal_service.mark_goal_completed(rule.goal_period)

        if list(evaluation.unlocked) != unlocked:
            self.db.set_setting(self.SETTING_KEY, list(evaluation.unlocked))
        if evaluation.newly_unlocked:
            logger.debug("Unlocked achievements: %s", ", ".join(evaluation.newly_unlocked))

        unlocked_ids = set(evaluation.unlocked)
        return AchievementCheck(
            new_achievements=tuple(
                rule.status(True) for rule in self.rules if rule.id in evaluation.newly_unlocked
            ),
            all_achievements=tuple(rule.status(rule.id in unlocked_ids) for rule in self.rules),
        )

    def list_achievements(self) -> tuple[AchievementStatus, ...]:
        """Every rule with its stored unlocked flag, without evaluating rules."""
        unlocked_ids = set(self.get_unlocked())
        return tuple(rule.status(rule.id in unlocked_ids) for rule in self.rules)
