"""Persistence contracts for habits, completions and skips."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from habit_tks.core.users.models import User
from habit_tks.domains.habits.models.habit_models import Habit, HabitCompletion, HabitSkip
from habit_tks.extensions import db


class ActivityReader(ABC):
    """Read-side view of a user's activity used to evaluate progression rules."""

    @abstractmethod
    def current_tier(self, user_id: int) -> Optional[str]:
        """Return the user's tier, or None for an unknown user."""
        raise NotImplementedError

    @abstractmethod
    def completion_times(self, user_id: int, tier: str, since: datetime) -> List[datetime]:
        """Timestamps of completions at ``tier`` recorded at or after ``since``."""
        raise NotImplementedError

    @abstractmethod
    def skip_times(self, user_id: int, since: datetime) -> List[datetime]:
        """Timestamps of skips (any tier) recorded at or after ``since``."""
        raise NotImplementedError


class HabitStore(ActivityReader):
    """Write/read contract for the habit log. Completions and skips are append-only."""

    @abstractmethod
    def add_habit(self, user_id: int, **fields: Any) -> Habit:
        raise NotImplementedError

    @abstractmethod
    def get_habit(self, habit_id: int) -> Optional[Habit]:
        raise NotImplementedError

    @abstractmethod
    def list_habits(
        self, user_id: int, tier: Optional[str] = None, active_only: bool = False
    ) -> List[Habit]:
        raise NotImplementedError

    @abstractmethod
    def update_habit(self, habit: Habit, fields: Dict[str, Any]) -> Habit:
        raise NotImplementedError

    @abstractmethod
    def delete_habit(self, habit: Habit) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_tier_state(self, user_id: int, tier: str, *, active: bool, archived: bool) -> int:
        raise NotImplementedError

    @abstractmethod
    def set_user_tier(self, user_id: int, tier: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_user_streak(self, user_id: int, streak: int) -> int:
        """Store the new streak and return the previous value."""
        raise NotImplementedError

    @abstractmethod
    def add_completion(self, habit: Habit, user_id: int, **fields: Any) -> HabitCompletion:
        raise NotImplementedError

    @abstractmethod
    def add_skip(self, habit: Habit, user_id: int, reason: str, **fields: Any) -> HabitSkip:
        raise NotImplementedError

    @abstractmethod
    def list_completions(
        self, user_id: int, habit_id: Optional[int] = None, since: Optional[datetime] = None
    ) -> List[HabitCompletion]:
        raise NotImplementedError


class SqlHabitStore(HabitStore):
    """SQLAlchemy-backed habit store; each write commits."""

    def __init__(self, session=None):
        self._session = session or db.session

    # Activity reader -----------------------------------------------------

    def current_tier(self, user_id: int) -> Optional[str]:
        user = self._session.get(User, user_id)
        return user.current_tier if user else None

    def completion_times(self, user_id: int, tier: str, since: datetime) -> List[datetime]:
        rows = (
            self._session.query(HabitCompletion.completed_at)
            .filter(
                HabitCompletion.user_id == user_id,
                HabitCompletion.tier == tier,
                HabitCompletion.completed_at >= since,
            )
            .all()
        )
        return [row.completed_at for row in rows]

    def skip_times(self, user_id: int, since: datetime) -> List[datetime]:
        rows = (
            self._session.query(HabitSkip.skipped_at)
            .filter(HabitSkip.user_id == user_id, HabitSkip.skipped_at >= since)
            .all()
        )
        return [row.skipped_at for row in rows]

    # Habits --------------------------------------------------------------

    def add_habit(self, user_id: int, **fields: Any) -> Habit:
        habit = Habit(user_id=user_id, **fields)
        self._session.add(habit)
        self._session.commit()
        return habit

    def get_habit(self, habit_id: int) -> Optional[Habit]:
        return self._session.get(Habit, habit_id)

    def list_habits(
        self, user_id: int, tier: Optional[str] = None, active_only: bool = False
    ) -> List[Habit]:
        query = self._session.query(Habit).filter_by(user_id=user_id)
        if tier:
            query = query.filter_by(tier=tier)
        if active_only:
            query = query.filter_by(is_active=True, archived=False)
        return query.order_by(Habit.id).all()

    def update_habit(self, habit: Habit, fields: Dict[str, Any]) -> Habit:
        for key, value in fields.items():
            setattr(habit, key, value)
        if habit.archived:
            habit.is_active = False
        self._session.commit()
        return habit

    def delete_habit(self, habit: Habit) -> None:
        self._session.delete(habit)
        self._session.commit()

    def set_tier_state(self, user_id: int, tier: str, *, active: bool, archived: bool) -> int:
        habits = self._session.query(Habit).filter_by(user_id=user_id, tier=tier).all()
        now = datetime.utcnow()
        for habit in habits:
            habit.is_active = active and not archived
            habit.archived = archived
            habit.updated_at = now
        self._session.commit()
        return len(habits)

    def set_user_tier(self, user_id: int, tier: str) -> None:
        user = self._session.get(User, user_id)
        if user:
            user.current_tier = tier
            self._session.commit()

    def set_user_streak(self, user_id: int, streak: int) -> int:
        user = self._session.get(User, user_id)
        if not user:
            return 0
        previous = user.streak or 0
        if previous != streak:
            user.streak = streak
            self._session.commit()
        return previous

    # Completions / skips -------------------------------------------------

    def add_completion(self, habit: Habit, user_id: int, **fields: Any) -> HabitCompletion:
        completion = HabitCompletion(
            habit_id=habit.id,
            user_id=user_id,
            tier=habit.tier,
            **fields,
        )
        if completion.completed_at is None:
            completion.completed_at = datetime.utcnow()
        self._session.add(completion)
        self._session.commit()
        return completion

    def add_skip(self, habit: Habit, user_id: int, reason: str, **fields: Any) -> HabitSkip:
        skip = HabitSkip(
            habit_id=habit.id,
            user_id=user_id,
            tier=habit.tier,
            reason=reason,
            **fields,
        )
        if skip.skipped_at is None:
            skip.skipped_at = datetime.utcnow()
        self._session.add(skip)
        self._session.commit()
        return skip

    def list_completions(
        self, user_id: int, habit_id: Optional[int] = None, since: Optional[datetime] = None
    ) -> List[HabitCompletion]:
        query = self._session.query(HabitCompletion).filter_by(user_id=user_id)
        if habit_id is not None:
            query = query.filter_by(habit_id=habit_id)
        if since is not None:
            query = query.filter(HabitCompletion.completed_at >= since)
        return query.order_by(HabitCompletion.completed_at.desc()).all()


__all__ = ["ActivityReader", "HabitStore", "SqlHabitStore"]
