"""Habit services: orchestration of completions, skips and tier moves."""

from habit_tks.domains.habits.services.habit_service import (
    CompletionOutcome,
    HabitService,
    SkipOutcome,
)
from habit_tks.domains.habits.services.streaks import current_streak, streaks

__all__ = [
    "CompletionOutcome",
    "HabitService",
    "SkipOutcome",
    "current_streak",
    "streaks",
]
