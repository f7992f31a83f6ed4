"""Tier progression engine.

The engine decides whether a user's tier should change after a completion or a
skip. It records every decision in the progression audit trail and returns it
to the caller; it never touches the user's tier or habits itself.

Conditions:

* ``consecutiveDays`` - consecutive calendar days (ending today) with at least
  one completion at the rule's source tier, looking back at most ``timeframe``
  days (default 7), must reach ``value``.
* ``weeklyFrequency`` - completions at the source tier inside the trailing
  ``timeframe`` window (default 7 days) must reach ``value``.
* ``manual`` - never fires on its own; see :meth:`ProgressionEngine.trigger_manual`.

Penalties: skips in the trailing window that happened after the user's most
recent penalty are counted; reaching the threshold moves the user one tier
down. Skips consumed by a penalty never count towards the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

from habit_tks.core.errors import RequestValidationError
from habit_tks.core.tiers import BASELINE, TIER2, TIER3, TIERS, is_single_step_up, previous_tier
from habit_tks.domains.habits.repository import ActivityReader
from habit_tks.domains.progression.models.progression_models import (
    CONDITION_CONSECUTIVE_DAYS,
    CONDITION_MANUAL,
    CONDITION_SKIP_PENALTY,
    CONDITION_TYPES,
    CONDITION_WEEKLY_FREQUENCY,
    ProgressionEvent,
    ProgressionRule,
)
from habit_tks.domains.progression.repository import ProgressionStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEFRAME_DAYS = 7
DEFAULT_SKIP_PENALTY_THRESHOLD = 3
DEFAULT_SKIP_WINDOW_DAYS = 7

DEFAULT_RULES = (
    {
        "from_tier": BASELINE,
        "to_tier": TIER2,
        "condition_type": CONDITION_CONSECUTIVE_DAYS,
        "condition_value": 7,
        "timeframe_days": 7,
        "is_default": True,
    },
    {
        "from_tier": TIER2,
        "to_tier": TIER3,
        "condition_type": CONDITION_WEEKLY_FREQUENCY,
        "condition_value": 5,
        "timeframe_days": 7,
        "is_default": True,
    },
)


@dataclass(frozen=True)
class ProgressionDecision:
    """Outcome of one fired rule (or penalty), already written to the audit trail."""

    user_id: int
    from_tier: str
    to_tier: str
    was_penalty: bool
    triggered_at: datetime
    condition: Dict[str, Optional[int | str]] = field(default_factory=dict)
    event_id: Optional[int] = None

    @property
    def is_upgrade(self) -> bool:
        return not self.was_penalty

    @classmethod
    def from_event(cls, event: ProgressionEvent) -> "ProgressionDecision":
        return cls(
            user_id=event.user_id,
            from_tier=event.from_tier,
            to_tier=event.to_tier,
            was_penalty=event.was_penalty,
            triggered_at=event.triggered_at,
            condition=event.condition,
            event_id=event.id,
        )


class ProgressionEngine:
    def __init__(
        self,
        store: ProgressionStore,
        activity: ActivityReader,
        *,
        skip_penalty_threshold: int = DEFAULT_SKIP_PENALTY_THRESHOLD,
        skip_window_days: int = DEFAULT_SKIP_WINDOW_DAYS,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self.store = store
        self.activity = activity
        self.skip_penalty_threshold = skip_penalty_threshold
        self.skip_window_days = skip_window_days
        self._clock = clock
        self._checks: Dict[str, Callable[[int, ProgressionRule, datetime], bool]] = {
            CONDITION_CONSECUTIVE_DAYS: self._check_consecutive_days,
            CONDITION_WEEKLY_FREQUENCY: self._check_weekly_frequency,
            CONDITION_MANUAL: lambda *_: False,
        }

    # Rules ---------------------------------------------------------------

    def initialize_rules(self, user_id: int) -> List[ProgressionRule]:
        """Install the default rules, replacing whatever rule set the user had."""
        rules = self.store.replace_rules(user_id, [dict(rule) for rule in DEFAULT_RULES])
        logger.info("Initialized %s progression rules for user %s", len(rules), user_id)
        return rules

    def add_rule(
        self,
        user_id: int,
        *,
        from_tier: str,
        to_tier: str,
        condition_type: str,
        value: int,
        timeframe: Optional[int] = None,
    ) -> ProgressionRule:
        if from_tier not in TIERS or to_tier not in TIERS:
            raise RequestValidationError("Unknown tier")
        if not is_single_step_up(from_tier, to_tier):
            raise RequestValidationError(
                f"Rules must move exactly one tier up ({from_tier} -> {to_tier} is not allowed)"
            )
        if condition_type not in CONDITION_TYPES:
            raise RequestValidationError(f"Unknown condition type: {condition_type}")
        if value < 1 or (timeframe is not None and timeframe < 1):
            raise RequestValidationError("Condition value and timeframe must be positive")
        return self.store.add_rule(
            user_id,
            from_tier=from_tier,
            to_tier=to_tier,
            condition_type=condition_type,
            condition_value=value,
            timeframe_days=timeframe,
            is_default=False,
        )

    def list_rules(self, user_id: int) -> List[ProgressionRule]:
        return self.store.list_rules(user_id)

    def history(self, user_id: int) -> List[ProgressionEvent]:
        return self.store.list_events(user_id)

    # Evaluation ----------------------------------------------------------

    def evaluate_on_completion(
        self, user_id: int, completed_tier: str, now: Optional[datetime] = None
    ) -> List[ProgressionDecision]:
        """Evaluate every rule leaving ``completed_tier``; all matches fire."""
        now = now or self._clock()
        if self.activity.current_tier(user_id) != completed_tier:
            return []
        decisions: List[ProgressionDecision] = []
        for rule in self.store.list_rules(user_id):
            if rule.from_tier != completed_tier:
                continue
            check = self._checks.get(rule.condition_type)
            if check is None or not check(user_id, rule, now):
                continue
            decisions.append(self._record(user_id, rule, now))
        return decisions

    def evaluate_on_skip(
        self, user_id: int, now: Optional[datetime] = None
    ) -> Optional[ProgressionDecision]:
        """Return at most one downgrade decision once the skip threshold is reached."""
        now = now or self._clock()
        tier = self.activity.current_tier(user_id)
        if tier is None:
            return None
        skips = self.skips_since_last_penalty(user_id, now)
        if skips < self.skip_penalty_threshold:
            return None
        lower = previous_tier(tier)
        if lower is None:
            logger.info("User %s reached %s skips at %s; nothing lower to drop to", user_id, skips, tier)
            return None
        event = self.store.add_event(
            user_id,
            rule_id=None,
            from_tier=tier,
            to_tier=lower,
            condition_type=CONDITION_SKIP_PENALTY,
            condition_value=self.skip_penalty_threshold,
            timeframe_days=self.skip_window_days,
            was_penalty=True,
            triggered_at=now,
        )
        logger.info("User %s penalised for %s skips: %s -> %s", user_id, skips, tier, lower)
        return ProgressionDecision.from_event(event)

    def trigger_manual(
        self, user_id: int, from_tier: str, now: Optional[datetime] = None
    ) -> List[ProgressionDecision]:
        """Fire the user's ``manual`` rules leaving ``from_tier``."""
        now = now or self._clock()
        if self.activity.current_tier(user_id) != from_tier:
            return []
        return [
            self._record(user_id, rule, now)
            for rule in self.store.list_rules(user_id)
            if rule.from_tier == from_tier and rule.condition_type == CONDITION_MANUAL
        ]

    # Metrics -------------------------------------------------------------

    def consecutive_days(self, user_id: int, tier: str, timeframe: int, now: datetime) -> int:
        today = now.date()
        since = datetime.combine(today - timedelta(days=timeframe - 1), datetime.min.time())
        days = {ts.date() for ts in self.activity.completion_times(user_id, tier, since) if ts <= now}
        return _run_length(days, today, timeframe)

    def completions_in_window(self, user_id: int, tier: str, days: int, now: datetime) -> int:
        since = now - timedelta(days=days)
        return sum(1 for ts in self.activity.completion_times(user_id, tier, since) if ts <= now)

    def skips_since_last_penalty(self, user_id: int, now: datetime) -> int:
        since = now - timedelta(days=self.skip_window_days)
        last_penalty = self.store.latest_penalty_at(user_id)
        return sum(
            1
            for ts in self.activity.skip_times(user_id, since)
            if ts <= now and (last_penalty is None or ts > last_penalty)
        )

    def _check_consecutive_days(self, user_id: int, rule: ProgressionRule, now: datetime) -> bool:
        timeframe = rule.timeframe_days or DEFAULT_TIMEFRAME_DAYS
        return self.consecutive_days(user_id, rule.from_tier, timeframe, now) >= rule.condition_value

    def _check_weekly_frequency(self, user_id: int, rule: ProgressionRule, now: datetime) -> bool:
        timeframe = rule.timeframe_days or DEFAULT_TIMEFRAME_DAYS
        return self.completions_in_window(user_id, rule.from_tier, timeframe, now) >= rule.condition_value

    def _record(self, user_id: int, rule: ProgressionRule, now: datetime) -> ProgressionDecision:
        event = self.store.add_event(
            user_id,
            rule_id=rule.id,
            from_tier=rule.from_tier,
            to_tier=rule.to_tier,
            condition_type=rule.condition_type,
            condition_value=rule.condition_value,
            timeframe_days=rule.timeframe_days,
            was_penalty=False,
            triggered_at=now,
        )
        logger.info("User %s progressed from %s to %s (rule %s)", user_id, rule.from_tier, rule.to_tier, rule.id)
        return ProgressionDecision.from_event(event)


def _run_length(days: set, end: date, limit: int) -> int:
    count = 0
    current = end
    while count < limit and current in days:
        count += 1
        current -= timedelta(days=1)
    return count


__all__ = [
    "DEFAULT_RULES",
    "ProgressionDecision",
    "ProgressionEngine",
]
