"""Habits domain models."""

from habit_tks.domains.habits.models.habit_models import Habit, HabitCompletion, HabitSkip

__all__ = ["Habit", "HabitCompletion", "HabitSkip"]
