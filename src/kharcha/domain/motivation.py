"""Motivational message picked from the current engagement signals."""

import random
from datetime import date
from typing import Optional

from kharcha.domain.achievements import AchievementService

DEFAULT_MESSAGE = "Keep tracking to see your progress! 💪"


def motivational_messages(service: AchievementService, today: Optional[date] = None) -> list[str]:
    """All messages that currently apply, in a fixed order."""
    context = service.build_context(today)
    monthly = service.goal_service.calculate_goal_progress("monthly", "savings", today)
    streak = context.streak.current_streak
    messages: list[str] = []

    if streak >= 30:
        messages.append(f"🔥 Amazing! {streak} day streak! You're unstoppable!")
    elif streak >= 7:
        messages.append(f"🔥 Great job! {streak} days in a row! Keep it up!")
    elif streak > 0:
        messages.append(f"🔥 {streak} day streak! You're doing great!")

    if monthly.is_completed:
        messages.append("🎉 Congratulations! You've achieved your monthly goal!")
    elif monthly.progress >= 75:
        messages.append(f"💪 You're {round(monthly.progress)}% to your monthly goal! Almost there!")
    elif monthly.progress >= 50:
        messages.append("📈 You're halfway to your monthly goal! Keep going!")

    if context.totals.balance > 0:
        messages.append("💰 Your net balance is positive! Great financial management!")

    if context.entry_count >= 100:
        messages.append(f"🏆 Wow! You've tracked {context.entry_count} entries! That's dedication!")
    elif context.entry_count >= 50:
        messages.append(f"⭐ You've tracked {context.entry_count} entries! Keep building that habit!")

    return messages


def get_motivational_message(
    service: AchievementService,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> str:
    """Pick one applicable message, or the default when none applies."""
    messages = motivational_messages(service, today)
    if not messages:
        return DEFAULT_MESSAGE
    return (rng or random).choice(messages)
