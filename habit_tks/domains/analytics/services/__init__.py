"""Analytics aggregates computed from the completion and skip logs."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func

from habit_tks.core.errors import AccessDeniedError, NotFoundError, RequestValidationError
from habit_tks.core.events.event_models import EventRecord
from habit_tks.core.events.event_service import list_events, log_event
from habit_tks.core.users.services import require_user
from habit_tks.domains.habits.events import CLIENT_EVENTS, EVENT_CATALOG
from habit_tks.domains.habits.models.habit_models import Habit, HabitCompletion, HabitSkip
from habit_tks.domains.habits.services.streaks import streaks
from habit_tks.extensions import db


def track(user_id: int, event_type: str, data: Optional[dict] = None) -> EventRecord:
    """Record a client-reported event; only catalogued client events are accepted."""
    if event_type not in EVENT_CATALOG:
        raise RequestValidationError(f"Unknown event type: {event_type}")
    if event_type not in CLIENT_EVENTS:
        raise RequestValidationError(f"{event_type} is recorded by the server")
    return log_event(event_type, data or {}, user_id=user_id)


def recent_events(user_id: int, habit_id: Optional[int] = None, limit: int = 50) -> List[EventRecord]:
    return list_events(user_id, habit_id=habit_id, limit=max(1, min(limit, 200)))


def _counts_by_habit(model, user_id: int) -> Dict[int, int]:
    rows = (
        db.session.query(model.habit_id, func.count(model.id).label("count"))
        .filter(model.user_id == user_id)
        .group_by(model.habit_id)
        .all()
    )
    return {row.habit_id: int(row.count or 0) for row in rows}


def _completion_days(user_id: int, habit_id: Optional[int] = None) -> List[date]:
    query = db.session.query(HabitCompletion.completed_at).filter(HabitCompletion.user_id == user_id)
    if habit_id is not None:
        query = query.filter(HabitCompletion.habit_id == habit_id)
    return [row.completed_at.date() for row in query.all()]


def _rate(completions: int, skips: int) -> float:
    attempts = completions + skips
    return round(completions / attempts * 100, 1) if attempts else 0.0


def user_summary(user_id: int, today: Optional[date] = None) -> dict:
    user = require_user(user_id)
    completions = _counts_by_habit(HabitCompletion, user_id)
    skips = _counts_by_habit(HabitSkip, user_id)
    habits = Habit.query.filter_by(user_id=user_id).order_by(Habit.id).all()
    current, best = streaks(_completion_days(user_id), today or datetime.utcnow().date())

    total_completions = sum(completions.values())
    total_skips = sum(skips.values())
    return {
        "current_tier": user.current_tier,
        "total_completions": total_completions,
        "total_skips": total_skips,
        "completion_rate": _rate(total_completions, total_skips),
        "current_streak": current,
        "best_streak": best,
        "habits": [
            {
                "habit_id": habit.id,
                "name": habit.name,
                "tier": habit.tier,
                "completions": completions.get(habit.id, 0),
                "skips": skips.get(habit.id, 0),
            }
            for habit in habits
        ],
    }


def habit_summary(user_id: int, habit_id: int, today: Optional[date] = None) -> dict:
    habit = db.session.get(Habit, habit_id)
    if habit is None:
        raise NotFoundError("Habit not found")
    if habit.user_id != user_id:
        raise AccessDeniedError("Habit belongs to another user")

    completions = HabitCompletion.query.filter_by(user_id=user_id, habit_id=habit_id).count()
    skips = HabitSkip.query.filter_by(user_id=user_id, habit_id=habit_id).count()
    last = (
        db.session.query(func.max(HabitCompletion.completed_at))
        .filter(HabitCompletion.habit_id == habit_id)
        .scalar()
    )
    current, best = streaks(_completion_days(user_id, habit_id), today or datetime.utcnow().date())
    return {
        "habit_id": habit.id,
        "name": habit.name,
        "tier": habit.tier,
        "completions": completions,
        "skips": skips,
        "completion_rate": _rate(completions, skips),
        "current_streak": current,
        "best_streak": best,
        "last_completed_at": last,
    }


def habit_streak(user_id: int, habit_id: int, today: Optional[date] = None) -> dict:
    summary = habit_summary(user_id, habit_id, today)
    return {
        "habit_id": summary["habit_id"],
        "current_streak": summary["current_streak"],
        "best_streak": summary["best_streak"],
        "last_completed_at": summary["last_completed_at"],
    }


def weekly(user_id: int, now: Optional[datetime] = None) -> List[dict]:
    return daily_counts(user_id, 7, now)


def monthly(user_id: int, now: Optional[datetime] = None) -> List[dict]:
    return daily_counts(user_id, 30, now)


def daily_counts(user_id: int, span: int, now: Optional[datetime] = None) -> List[dict]:
    """Per-day completion and skip counts for the trailing ``span`` days, oldest first."""
    now = now or datetime.utcnow()
    today = now.date()
    start = today - timedelta(days=span - 1)
    since = datetime.combine(start, datetime.min.time())

    days = {start + timedelta(days=offset): {"completions": 0, "skips": 0} for offset in range(span)}
    for (ts,) in (
        db.session.query(HabitCompletion.completed_at)
        .filter(HabitCompletion.user_id == user_id, HabitCompletion.completed_at >= since)
        .all()
    ):
        if ts.date() in days and ts <= now:
            days[ts.date()]["completions"] += 1
    for (ts,) in (
        db.session.query(HabitSkip.skipped_at)
        .filter(HabitSkip.user_id == user_id, HabitSkip.skipped_at >= since)
        .all()
    ):
        if ts.date() in days and ts <= now:
            days[ts.date()]["skips"] += 1
    return [{"date": day, **counts} for day, counts in sorted(days.items())]
