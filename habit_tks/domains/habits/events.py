"""Habits domain analytics event catalog."""

from __future__ import annotations

HABITS_HABIT_CREATED = "habits.habit.created"
HABITS_HABIT_UPDATED = "habits.habit.updated"
HABITS_HABIT_DELETED = "habits.habit.deleted"
HABITS_HABIT_COMPLETED = "habits.habit.completed"
HABITS_HABIT_SKIPPED = "habits.habit.skipped"
HABITS_HABIT_VIEWED = "habits.habit.viewed"
PROGRESSION_TIER_UPGRADED = "progression.tier.upgraded"
PROGRESSION_TIER_DOWNGRADED = "progression.tier.downgraded"

EVENT_CATALOG = {
    HABITS_HABIT_CREATED: {
        "version": "v1",
        "payload": {"habit_id": "int", "name": "str", "tier": "str"},
    },
    HABITS_HABIT_UPDATED: {
        "version": "v1",
        "payload": {"habit_id": "int", "fields": "list"},
    },
    HABITS_HABIT_DELETED: {
        "version": "v1",
        "payload": {"habit_id": "int"},
    },
    HABITS_HABIT_COMPLETED: {
        "version": "v1",
        "payload": {
            "habit_id": "int",
            "completion_id": "int",
            "tier": "str",
            "duration": "int?",
            "intensity": "str?",
        },
    },
    HABITS_HABIT_SKIPPED: {
        "version": "v1",
        "payload": {"habit_id": "int", "skip_id": "int", "tier": "str", "reason": "str"},
    },
    HABITS_HABIT_VIEWED: {
        "version": "v1",
        "payload": {"habit_id": "int"},
    },
    PROGRESSION_TIER_UPGRADED: {
        "version": "v1",
        "payload": {"from_tier": "str", "to_tier": "str", "condition": "dict"},
    },
    PROGRESSION_TIER_DOWNGRADED: {
        "version": "v1",
        "payload": {"from_tier": "str", "to_tier": "str", "condition": "dict"},
    },
}

# Events the web client may report itself; everything else is recorded by the services.
CLIENT_EVENTS = frozenset({HABITS_HABIT_VIEWED})
