"""Mapper functions between stored representations and domain entities.

Entries map between SQLAlchemy rows and frozen domain Entry objects. Side
state (streak, goals, completion flags, baselines, achievements, custom
categories, entry templates) maps between JSON blobs and typed domain
records. Blob readers never raise: absent or malformed fields fall back to
their defaults.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from kharcha.domain import entities as domain
from kharcha.database.models import Entry as ORMEntry

logger = logging.getLogger(__name__)

GOAL_BLOB_KEYS = {
    "daily_savings_goal": "dailySavingsGoal",
    "weekly_savings_goal": "weeklySavingsGoal",
    "monthly_savings_goal": "monthlySavingsGoal",
    "yearly_savings_goal": "yearlySavingsGoal",
    "custom_savings_goal": "customSavingsGoal",
    "daily_expense_goal": "dailyExpenseGoal",
    "weekly_expense_goal": "weeklyExpenseGoal",
    "monthly_expense_goal": "monthlyExpenseGoal",
    "yearly_expense_goal": "yearlyExpenseGoal",
    "custom_expense_goal": "customExpenseGoal",
}

GOAL_NAME_BLOB_KEYS = {
    "custom_savings_goal_name": "customSavingsGoalName",
    "custom_expense_goal_name": "customExpenseGoalName",
}

# Blob keys written before expense goals existed
LEGACY_GOAL_BLOB_KEYS = {
    "monthlyGoal": "monthlySavingsGoal",
    "yearlyGoal": "yearlySavingsGoal",
    "customGoal": "customSavingsGoal",
    "customGoalName": "customSavingsGoalName",
}


def entry_to_domain(orm_entry: ORMEntry) -> domain.Entry:
    """Convert SQLAlchemy Entry model to domain Entry entity.

    Raises:
        ValueError: If the row holds an unknown type, mode or adjustment type
    """
    return domain.Entry(
        id=orm_entry.id,
        amount=Decimal(orm_entry.amount),
        type=domain.EntryType(orm_entry.type),
        date=orm_entry.date,
        mode=domain.PaymentMode(orm_entry.mode) if orm_entry.mode else None,
        adjustment_type=(
            domain.AdjustmentType(orm_entry.adjustment_type)
            if orm_entry.adjustment_type
            else None
        ),
        note=orm_entry.note,
        category_id=orm_entry.category_id,
    )


def entry_to_orm(entry: domain.Entry) -> ORMEntry:
    """Convert domain Entry entity to a new SQLAlchemy Entry model."""
    return ORMEntry(**entry_columns(entry))


def entry_columns(entry: domain.Entry) -> dict[str, Any]:
    """Column values for a domain Entry."""
    return {
        "id": entry.id,
        "amount": entry.amount,
        "type": entry.type.value,
        "mode": entry.mode.value if entry.mode is not None else None,
        "adjustment_type": (
            entry.adjustment_type.value if entry.adjustment_type is not None else None
        ),
        "date": entry.date,
        "note": entry.note,
        "category_id": entry.category_id,
    }


def _as_dict(blob: Any, key: str) -> dict[str, Any]:
    if blob is None:
        return {}
    if not isinstance(blob, dict):
        logger.warning("Ignoring malformed '%s' setting: expected an object", key)
        return {}
    return blob


def _as_decimal(value: Any, default: Optional[Decimal]) -> Optional[Decimal]:
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return default
    return result if result.is_finite() else default


def _as_int(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def _as_date(value: Any) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _decimal_to_blob(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def streak_from_blob(blob: Any) -> domain.StreakRecord:
    """Read a StreakRecord from its stored blob."""
    data = _as_dict(blob, "streak")
    return domain.StreakRecord(
        current_streak=_as_int(data.get("currentStreak", 0)),
        longest_streak=_as_int(data.get("longestStreak", 0)),
        last_entry_date=_as_date(data.get("lastEntryDate")),
    )


def streak_to_blob(record: domain.StreakRecord) -> dict[str, Any]:
    """Convert a StreakRecord to its stored blob."""
    return {
        "currentStreak": record.current_streak,
        "longestStreak": record.longest_streak,
        "lastEntryDate": (
            record.last_entry_date.isoformat() if record.last_entry_date else None
        ),
    }


def goals_from_blob(blob: Any) -> domain.Goals:
    """Read Goals from its stored blob, migrating the legacy savings-only layout."""
    data = dict(_as_dict(blob, "goals"))
    if "monthlyGoal" in data and "monthlySavingsGoal" not in data:
        for legacy_key, key in LEGACY_GOAL_BLOB_KEYS.items():
            data.setdefault(key, data.get(legacy_key))

    values: dict[str, Any] = {}
    for field_name, key in GOAL_BLOB_KEYS.items():
        amount = _as_decimal(data.get(key), Decimal("0"))
        values[field_name] = amount if amount > 0 else Decimal("0")
    for field_name, key in GOAL_NAME_BLOB_KEYS.items():
        name = data.get(key)
        values[field_name] = name if isinstance(name, str) else ""
    return domain.Goals(**values)


def goals_to_blob(goals: domain.Goals) -> dict[str, Any]:
    """Convert Goals to its stored blob."""
    blob: dict[str, Any] = {
        key: str(getattr(goals, field_name)) for field_name, key in GOAL_BLOB_KEYS.items()
    }
    for field_name, key in GOAL_NAME_BLOB_KEYS.items():
        blob[key] = getattr(goals, field_name)
    return blob


def completion_from_blob(blob: Any) -> domain.GoalCompletionFlags:
    """Read GoalCompletionFlags from its stored blob."""
    data = _as_dict(blob, "goal_completion")
    return domain.GoalCompletionFlags(
        monthly=data.get("monthlyGoalCompleted") is True,
        yearly=data.get("yearlyGoalCompleted") is True,
        custom=data.get("customGoalCompleted") is True,
    )


def completion_to_blob(flags: domain.GoalCompletionFlags) -> dict[str, bool]:
    """Convert GoalCompletionFlags to its stored blob."""
    return {
        "monthlyGoalCompleted": flags.monthly,
        "yearlyGoalCompleted": flags.yearly,
        "customGoalCompleted": flags.custom,
    }


def baselines_from_blob(blob: Any) -> domain.AccountBaselines:
    """Read AccountBaselines from its stored blob."""
    data = _as_dict(blob, "baselines")
    return domain.AccountBaselines(
        bank=_as_decimal(data.get("bankBalance"), None),
        cash=_as_decimal(data.get("cashBalance"), None),
    )


def baselines_to_blob(baselines: domain.AccountBaselines) -> dict[str, Optional[str]]:
    """Convert AccountBaselines to its stored blob."""
    return {
        "bankBalance": _decimal_to_blob(baselines.bank),
        "cashBalance": _decimal_to_blob(baselines.cash),
    }


def achievements_from_blob(blob: Any) -> list[str]:
    """Read the unlocked achievement IDs, dropping duplicates and non-strings."""
    if blob is None:
        return []
    if not isinstance(blob, list):
        logger.warning("Ignoring malformed 'achievements' setting: expected a list")
        return []
    unlocked: list[str] = []
    for achievement_id in blob:
        if isinstance(achievement_id, str) and achievement_id not in unlocked:
            unlocked.append(achievement_id)
    return unlocked


def category_from_blob(data: Any) -> Optional[domain.Category]:
    """Read one custom category, or None if the record is unusable."""
    if not isinstance(data, dict) or not data.get("id") or not data.get("name"):
        return None
    try:
        category_type = domain.CategoryType(data.get("type", "expense"))
    except ValueError:
        category_type = domain.CategoryType.EXPENSE
    return domain.Category(
        id=str(data["id"]),
        name=str(data["name"]),
        icon=str(data.get("icon") or "ellipse-outline"),
        color=str(data.get("color") or "#9E9E9E"),
        type=category_type,
    )


def category_to_blob(category: domain.Category) -> dict[str, str]:
    """Convert a Category to its stored record."""
    return {
        "id": category.id,
        "name": category.name,
        "icon": category.icon,
        "color": category.color,
        "type": category.type.value,
    }


def _as_choice(enum_cls, value: Any):
    try:
        return enum_cls(value) if value else None
    except ValueError:
        return None


def template_from_blob(data: Any) -> Optional[domain.EntryTemplate]:
    """Read one entry template, or None if the record is unusable."""
    if not isinstance(data, dict) or not data.get("id") or not data.get("name"):
        return None
    entry_type = _as_choice(domain.EntryType, data.get("type"))
    if entry_type is None:
        logger.warning("Ignoring template %r with unknown type", data.get("id"))
        return None
    amount = _as_decimal(data.get("amount"), None)
    return domain.EntryTemplate(
        id=str(data["id"]),
        name=str(data["name"]),
        type=entry_type,
        amount=amount if amount is not None and amount > 0 else None,
        mode=_as_choice(domain.PaymentMode, data.get("mode")),
        adjustment_type=_as_choice(domain.AdjustmentType, data.get("adjustment_type")),
        note=data.get("note") or None,
        category_id=data.get("category_id") or None,
    )


def template_to_blob(template: domain.EntryTemplate) -> dict[str, Any]:
    """Convert an EntryTemplate to its stored record, omitting unset fields."""
    blob: dict[str, Any] = {
        "id": template.id,
        "name": template.name,
        "type": template.type.value,
        "amount": _decimal_to_blob(template.amount),
        "mode": template.mode.value if template.mode is not None else None,
        "adjustment_type": (
            template.adjustment_type.value if template.adjustment_type is not None else None
        ),
        "note": template.note,
        "category_id": template.category_id,
    }
    return {key: value for key, value in blob.items() if value is not None}
