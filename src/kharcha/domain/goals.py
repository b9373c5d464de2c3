"""Goal targets, completion flags and goal progress."""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from kharcha.database.base import Database
from kharcha.database.mappers import (
    completion_from_blob,
    completion_to_blob,
    goals_from_blob,
    goals_to_blob,
)
from kharcha.domain import errors
from kharcha.domain.entities import (
    Entry,
    GoalCategory,
    GoalCompletionFlags,
    GoalPeriod,
    GoalProgress,
    Goals,
)
from kharcha.domain.ledger import calculate_totals
from kharcha.domain.periods import filter_entries_by_period
from kharcha.utils.amount_parser import parse_amount, to_cents

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Only these savings goals unlock a one-time achievement
CELEBRATED_PERIODS = (GoalPeriod.MONTHLY, GoalPeriod.YEARLY, GoalPeriod.CUSTOM)


def parse_goal_period(period: GoalPeriod | str) -> GoalPeriod:
    """Resolve a goal period keyword."""
    try:
        return GoalPeriod(getattr(period, "value", period))
    except ValueError:
        raise errors.ValidationError(
            errors.unknown_choice("goal period", period, [p.value for p in GoalPeriod])
        )


def parse_goal_category(category: GoalCategory | str) -> GoalCategory:
    """Resolve a goal category keyword."""
    try:
        return GoalCategory(getattr(category, "value", category))
    except ValueError:
        raise errors.ValidationError(
            errors.unknown_choice("goal category", category, [c.value for c in GoalCategory])
        )


def calculate_goal_progress(
    entries: Iterable[Entry],
    goals: Goals,
    period: GoalPeriod | str,
    category: GoalCategory | str,
    reference_date: Optional[date] = None,
) -> GoalProgress:
    """Compare the current period's totals against a goal target.

    Savings goals track the period balance and complete once it reaches the
    target. Expense goals are limits: they track period expenses, are
    complete while within the limit and over the limit past it. A zero
    target yields zero progress and never completes. Custom goals cover the
    whole log.

    Args:
        entries: Entry log
        goals: Goal targets
        period: Goal period
        category: savings or expense
        reference_date: Day inside the period (defaults to today)

    Returns:
        GoalProgress for the period and category
    """
    period = parse_goal_period(period)
    category = parse_goal_category(category)

    calendar_period = period.calendar_period
    if calendar_period is None:
        scoped = list(entries)
    else:
        scoped = filter_entries_by_period(entries, calendar_period, reference_date)

    totals = calculate_totals(scoped)
    if category is GoalCategory.SAVINGS:
        current_value = totals.balance
    else:
        current_value = totals.expense

    target_goal = goals.target_for(period, category)
    has_target = target_goal > 0

    progress = min(current_value / target_goal * HUNDRED, HUNDRED) if has_target else ZERO
    remaining = max(target_goal - current_value, ZERO)

    if category is GoalCategory.SAVINGS:
        is_completed = has_target and current_value >= target_goal
        is_over_limit = False
    else:
        is_completed = has_target and current_value <= target_goal
        is_over_limit = has_target and current_value > target_goal

    return GoalProgress(
        current_value=current_value,
        target_goal=target_goal,
        progress=progress,
        remaining=remaining,
        is_completed=is_completed,
        is_over_limit=is_over_limit,
        category=category,
        period=period,
    )


class GoalService:
    """Service for goal targets, completion flags and progress."""

    GOALS_KEY = "goals"
    COMPLETION_KEY = "goal_completion"

    def __init__(self, db: Database):
        """Initialize goal service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_goals(self) -> Goals:
        """Get goal targets (all zero if never configured)."""
        return goals_from_blob(self.db.get_setting(self.GOALS_KEY))

    def save_goals(self, goals: Goals) -> None:
        """Store goal targets as given; completion flags are left alone."""
        self.db.set_setting(self.GOALS_KEY, goals_to_blob(goals))

    def set_goal(
        self,
        period: GoalPeriod | str,
        category: GoalCategory | str,
        amount: Decimal | str | int | float,
        name: Optional[str] = None,
    ) -> Goals:
        """Set one goal target (0 clears it).

        Changing a monthly, yearly or custom savings target resets its
        completion flag so the new target can be celebrated.

        Raises:
            ValidationError: If the period, category or amount is invalid
        """
        period = parse_goal_period(period)
        category = parse_goal_category(category)
        try:
            target = to_cents(parse_amount(amount))
        except ValueError as e:
            raise errors.ValidationError(f"Invalid goal amount: {e}")
        if target < 0:
            raise errors.ValidationError("Goal amount cannot be negative")

        goals = self.get_goals()
        previous = goals.target_for(period, category)
        updated = goals.with_target(period, category, target, name)
        self.save_goals(updated)

        if (
            category is GoalCategory.SAVINGS
            and period in CELEBRATED_PERIODS
            and previous != target
        ):
            self.reset_goal_completion(period)
        logger.debug("Set %s %s goal to %s", period.value, category.value, target)
        return updated

    def get_completed_goals(self) -> GoalCompletionFlags:
        """Get which savings goals have already been celebrated."""
        return completion_from_blob(self.db.get_setting(self.COMPLETION_KEY))

    def mark_goal_completed(self, period: GoalPeriod | str) -> GoalCompletionFlags:
        """Set the completion flag of a monthly, yearly or custom goal."""
        return self._set_completion(parse_goal_period(period), True)

    def reset_goal_completion(self, period: GoalPeriod | str) -> GoalCompletionFlags:
        """Clear the completion flag of a monthly, yearly or custom goal."""
        return self._set_completion(parse_goal_period(period), False)

    def _set_completion(self, period: GoalPeriod, value: bool) -> GoalCompletionFlags:
        flags = self.get_completed_goals()
        updated = flags.with_flag(period, value)
        if updated != flags:
            self.db.set_setting(self.COMPLETION_KEY, completion_to_blob(updated))
        return updated

    def calculate_goal_progress(
        self,
        period: GoalPeriod | str = GoalPeriod.MONTHLY,
        category: GoalCategory | str = GoalCategory.SAVINGS,
        reference_date: Optional[date] = None,
    ) -> GoalProgress:
        """Goal progress over the stored entry log."""
        return calculate_goal_progress(
            self.db.list_entries(), self.get_goals(), period, category, reference_date
        )
