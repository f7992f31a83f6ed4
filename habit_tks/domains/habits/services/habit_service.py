"""Habit orchestration: logging activity, applying progression, pushing events."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from habit_tks.core.errors import (
    AccessDeniedError,
    InvalidOperationError,
    NotFoundError,
    RequestValidationError,
)
from habit_tks.core.events.event_service import log_event
from habit_tks.core.tiers import TIER_LABELS, TIERS
from habit_tks.domains.habits.events import (
    HABITS_HABIT_COMPLETED,
    HABITS_HABIT_CREATED,
    HABITS_HABIT_DELETED,
    HABITS_HABIT_SKIPPED,
    HABITS_HABIT_UPDATED,
    PROGRESSION_TIER_DOWNGRADED,
    PROGRESSION_TIER_UPGRADED,
)
from habit_tks.domains.habits.models.habit_models import Habit, HabitCompletion, HabitSkip
from habit_tks.domains.habits.repository import HabitStore
from habit_tks.domains.habits.schemas.habit_schemas import (
    CompleteHabitRequest,
    HabitCreate,
    HabitUpdate,
    SkipHabitRequest,
)
from habit_tks.domains.habits.services.streaks import current_streak
from habit_tks.domains.progression.engine import ProgressionDecision, ProgressionEngine
from habit_tks.platform.notifications.messages import (
    HABIT_COMPLETED,
    HABIT_SKIPPED,
    STREAK_UPDATED,
    TIER_UNLOCKED,
)
from habit_tks.platform.notifications.sink import NotificationSink

logger = logging.getLogger(__name__)

# Update fields that may be cleared with an explicit null.
_NULLABLE_FIELDS = {"description", "reminder_time", "notes"}


@dataclass
class CompletionOutcome:
    completion: HabitCompletion
    decisions: List[ProgressionDecision] = field(default_factory=list)
    new_tier: Optional[str] = None
    streak: Optional[int] = None


@dataclass
class SkipOutcome:
    skip: HabitSkip
    penalty: Optional[ProgressionDecision] = None


class HabitService:
    def __init__(
        self,
        store: HabitStore,
        engine: ProgressionEngine,
        sink: NotificationSink,
        *,
        record_event: Callable[..., object] = log_event,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self.store = store
        self.engine = engine
        self.sink = sink
        self._record_event = record_event
        self._clock = clock

    # Activity ------------------------------------------------------------

    def complete_habit(
        self,
        habit_id: int,
        user_id: int,
        data: Optional[CompleteHabitRequest] = None,
        now: Optional[datetime] = None,
    ) -> CompletionOutcome:
        now = now or self._clock()
        data = data or CompleteHabitRequest()
        habit = self.get_habit(habit_id, user_id)
        metrics = data.metrics

        completion = self.store.add_completion(
            habit,
            user_id,
            completed_at=now,
            notes=data.notes,
            duration=metrics.duration if metrics else None,
            intensity=metrics.intensity if metrics else None,
            additional_data=metrics.additional_data if metrics else None,
        )
        self._record_event(
            HABITS_HABIT_COMPLETED,
            {
                "habit_id": habit.id,
                "completion_id": completion.id,
                "tier": completion.tier,
                "duration": completion.duration,
                "intensity": completion.intensity,
            },
            user_id=user_id,
        )

        outcome = CompletionOutcome(completion=completion)
        outcome.decisions = self.engine.evaluate_on_completion(user_id, completion.tier, now=now)
        upgrade = next((d for d in outcome.decisions if d.is_upgrade), None)
        if upgrade:
            self._move_tier(user_id, upgrade.from_tier, upgrade.to_tier)
            self._record_event(
                PROGRESSION_TIER_UPGRADED,
                {"from_tier": upgrade.from_tier, "to_tier": upgrade.to_tier, "condition": upgrade.condition},
                user_id=user_id,
            )
            outcome.new_tier = upgrade.to_tier

        self.sink.broadcast_to_user(
            user_id,
            HABIT_COMPLETED,
            {
                "habitId": habit.id,
                "habitName": habit.name,
                "tier": completion.tier,
                "completionId": completion.id,
                "completedAt": completion.completed_at.isoformat(),
            },
        )
        if outcome.new_tier:
            self._announce_tier(
                user_id,
                outcome.new_tier,
                now,
                f"Congratulations! You've unlocked {TIER_LABELS[outcome.new_tier]}.",
            )
        if habit.streak_tracking:
            outcome.streak = self._refresh_streak(user_id, now)
        return outcome

    def skip_habit(
        self,
        habit_id: int,
        user_id: int,
        data: SkipHabitRequest,
        now: Optional[datetime] = None,
    ) -> SkipOutcome:
        now = now or self._clock()
        habit = self.get_habit(habit_id, user_id)
        if not habit.skip_allowed:
            raise InvalidOperationError("Skipping is not allowed for this habit")

        skip = self.store.add_skip(habit, user_id, data.reason, skipped_at=now)
        self._record_event(
            HABITS_HABIT_SKIPPED,
            {"habit_id": habit.id, "skip_id": skip.id, "tier": skip.tier, "reason": skip.reason},
            user_id=user_id,
        )
        self.sink.broadcast_to_user(
            user_id,
            HABIT_SKIPPED,
            {
                "habitId": habit.id,
                "habitName": habit.name,
                "tier": skip.tier,
                "skipId": skip.id,
                "reason": skip.reason,
                "skippedAt": skip.skipped_at.isoformat(),
            },
        )

        penalty = self.engine.evaluate_on_skip(user_id, now=now)
        if penalty:
            self._move_tier(user_id, penalty.from_tier, penalty.to_tier)
            self._record_event(
                PROGRESSION_TIER_DOWNGRADED,
                {"from_tier": penalty.from_tier, "to_tier": penalty.to_tier, "condition": penalty.condition},
                user_id=user_id,
            )
            self._announce_tier(
                user_id,
                penalty.to_tier,
                now,
                f"Too many skips: you're back on {TIER_LABELS[penalty.to_tier]}.",
            )
        return SkipOutcome(skip=skip, penalty=penalty)

    # Tier transitions ----------------------------------------------------

    def move_to_tier(self, user_id: int, to_tier: str, message: Optional[str] = None) -> str:
        """Manually place a user on ``to_tier`` and announce it. Returns the previous tier."""
        if to_tier not in TIERS:
            raise RequestValidationError(f"Unknown tier: {to_tier}")
        from_tier = self.store.current_tier(user_id)
        if from_tier is None:
            raise NotFoundError("User not found")
        if from_tier != to_tier:
            self._move_tier(user_id, from_tier, to_tier)
        now = self._clock()
        self._announce_tier(user_id, to_tier, now, message or f"{TIER_LABELS[to_tier]} unlocked.")
        return from_tier

    def trigger_manual_progression(
        self, user_id: int, from_tier: str, now: Optional[datetime] = None
    ) -> List[ProgressionDecision]:
        now = now or self._clock()
        decisions = self.engine.trigger_manual(user_id, from_tier, now=now)
        if decisions:
            decision = decisions[0]
            self._move_tier(user_id, decision.from_tier, decision.to_tier)
            self._record_event(
                PROGRESSION_TIER_UPGRADED,
                {"from_tier": decision.from_tier, "to_tier": decision.to_tier, "condition": decision.condition},
                user_id=user_id,
            )
            self._announce_tier(
                user_id,
                decision.to_tier,
                now,
                f"Congratulations! You've unlocked {TIER_LABELS[decision.to_tier]}.",
            )
        return decisions

    def archive_tier(self, user_id: int, tier: str) -> int:
        return self.store.set_tier_state(user_id, tier, active=False, archived=True)

    def activate_tier(self, user_id: int, tier: str) -> int:
        return self.store.set_tier_state(user_id, tier, active=True, archived=False)

    def _move_tier(self, user_id: int, from_tier: str, to_tier: str) -> None:
        self.archive_tier(user_id, from_tier)
        self.activate_tier(user_id, to_tier)
        self.store.set_user_tier(user_id, to_tier)
        logger.info("User %s moved from %s to %s", user_id, from_tier, to_tier)

    def _announce_tier(self, user_id: int, tier: str, now: datetime, message: str) -> None:
        self.sink.broadcast_to_user(
            user_id,
            TIER_UNLOCKED,
            {"tier": tier, "unlockedAt": now.isoformat(), "message": message},
        )

    def _refresh_streak(self, user_id: int, now: datetime) -> int:
        days = [c.completed_at.date() for c in self.store.list_completions(user_id)]
        streak = current_streak(days, today=now.date())
        previous = self.store.set_user_streak(user_id, streak)
        if previous != streak:
            self.sink.broadcast_to_user(
                user_id,
                STREAK_UPDATED,
                {"streak": streak, "previousStreak": previous, "updatedAt": now.isoformat()},
            )
        return streak

    # CRUD ----------------------------------------------------------------

    def get_habit(self, habit_id: int, user_id: int) -> Habit:
        habit = self.store.get_habit(habit_id)
        if habit is None:
            raise NotFoundError("Habit not found")
        if habit.user_id != user_id:
            raise AccessDeniedError("Habit belongs to another user")
        return habit

    def list_habits(self, user_id: int, tier: Optional[str] = None) -> List[Habit]:
        if tier:
            return self.store.list_habits(user_id, tier=tier)
        return self.store.list_habits(user_id, active_only=True)

    def create_habit(self, user_id: int, payload: HabitCreate) -> Habit:
        habit = self.store.add_habit(user_id, **payload.model_dump(exclude_none=True))
        self._record_event(
            HABITS_HABIT_CREATED,
            {"habit_id": habit.id, "name": habit.name, "tier": habit.tier},
            user_id=user_id,
        )
        return habit

    def update_habit(self, habit_id: int, user_id: int, payload: HabitUpdate) -> Habit:
        habit = self.get_habit(habit_id, user_id)
        fields = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key in _NULLABLE_FIELDS
        }
        if not fields:
            return habit
        habit = self.store.update_habit(habit, fields)
        self._record_event(
            HABITS_HABIT_UPDATED,
            {"habit_id": habit.id, "fields": sorted(fields)},
            user_id=user_id,
        )
        return habit

    def delete_habit(self, habit_id: int, user_id: int) -> None:
        habit = self.get_habit(habit_id, user_id)
        self.store.delete_habit(habit)
        self._record_event(HABITS_HABIT_DELETED, {"habit_id": habit_id}, user_id=user_id)

    def completions_for(self, habit_id: int, user_id: int, limit: Optional[int] = None) -> List[HabitCompletion]:
        self.get_habit(habit_id, user_id)
        completions = self.store.list_completions(user_id, habit_id=habit_id)
        return completions[:limit] if limit else completions


__all__ = ["CompletionOutcome", "HabitService", "SkipOutcome"]
