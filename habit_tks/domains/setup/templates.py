"""Starter habits seeded for every new account, four per tier."""

from __future__ import annotations

from habit_tks.core.tiers import BASELINE, TIER2, TIER3

BASELINE_HABITS = (
    {
        "name": "5 push-ups",
        "description": "Even if exhausted",
        "category": "fitness",
        "frequency": "daily",
        "reminder_time": "07:00",
        "priority": "high",
        "streak_tracking": True,
        "skip_allowed": False,
    },
    {
        "name": "Open IDE + git pull",
        "description": "Just glance at code",
        "category": "work",
        "frequency": "daily",
        "reminder_time": "09:00",
        "priority": "high",
        "streak_tracking": True,
        "skip_allowed": False,
    },
    {
        "name": "Read 1 page",
        "description": "Book or docs",
        "category": "learning",
        "frequency": "daily",
        "reminder_time": "20:00",
        "priority": "high",
        "streak_tracking": True,
        "skip_allowed": False,
    },
    {
        "name": "Write 1 MIT task",
        "description": "Tomorrow's top task",
        "category": "productivity",
        "frequency": "daily",
        "reminder_time": "22:00",
        "priority": "high",
        "streak_tracking": True,
        "skip_allowed": False,
    },
)

TIER2_HABITS = (
    {
        "name": "15-min workout",
        "description": "Kettlebell/run",
        "category": "fitness",
        "frequency": "daily",
        "reminder_time": "06:30",
        "priority": "high",
        "streak_tracking": True,
        "skip_allowed": False,
    },
    {
        "name": "Ship 1 task",
        "description": "Bug fix/PR",
        "category": "work",
        "frequency": "daily",
        "reminder_time": "11:00",
        "priority": "high",
        "streak_tracking": True,
        "skip_allowed": False,
    },
    {
        "name": "Study 30 min",
        "description": "New skill or concept",
        "category": "learning",
        "frequency": "daily",
        "reminder_time": "19:00",
        "priority": "medium",
        "streak_tracking": True,
        "skip_allowed": True,
    },
    {
        "name": "Plan next day",
        "description": "Review and prioritize",
        "category": "productivity",
        "frequency": "daily",
        "reminder_time": "21:00",
        "priority": "medium",
        "streak_tracking": True,
        "skip_allowed": True,
    },
)

TIER3_HABITS = (
    {
        "name": "45-min gym",
        "description": "Only when energized",
        "category": "fitness",
        "frequency": "custom",
        "reminder_time": None,
        "priority": "medium",
        "streak_tracking": False,
        "skip_allowed": True,
    },
    {
        "name": "Deep work session",
        "description": "2+ hours focused work",
        "category": "work",
        "frequency": "weekly",
        "reminder_time": "10:00",
        "priority": "medium",
        "streak_tracking": False,
        "skip_allowed": True,
    },
    {
        "name": "Teach someone",
        "description": "Share knowledge",
        "category": "learning",
        "frequency": "weekly",
        "reminder_time": "15:00",
        "priority": "low",
        "streak_tracking": False,
        "skip_allowed": True,
    },
    {
        "name": "Weekly review",
        "description": "Reflect and adjust",
        "category": "productivity",
        "frequency": "weekly",
        "reminder_time": "16:00",
        "priority": "low",
        "streak_tracking": False,
        "skip_allowed": True,
    },
)

TEMPLATES_BY_TIER = {
    BASELINE: BASELINE_HABITS,
    TIER2: TIER2_HABITS,
    TIER3: TIER3_HABITS,
}
