"""Account setup: seeding starter habits, resets and manual tier unlocks."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List

from habit_tks.core.errors import NotFoundError, RequestValidationError
from habit_tks.core.tiers import BASELINE, TIER2, TIER3, TIERS
from habit_tks.domains.habits.models.habit_models import Habit
from habit_tks.domains.habits.services import HabitService
from habit_tks.domains.progression.engine import ProgressionEngine
from habit_tks.domains.setup.templates import TEMPLATES_BY_TIER

logger = logging.getLogger(__name__)

SETUP_MESSAGE = "Account setup complete! You now have 4 baseline habits to start with."
RESET_MESSAGE = "Account reset complete! You have a fresh start with baseline habits."
UNLOCK_MESSAGES = {
    TIER2: "Congratulations! You've unlocked Tier 2 habits. Keep up the momentum!",
    TIER3: "Amazing! You've reached Tier 3. You're now operating at peak performance!",
}


class SetupService:
    def __init__(
        self,
        habits: HabitService,
        engine: ProgressionEngine,
        *,
        unlock_delay_days: int = 7,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self.habits = habits
        self.engine = engine
        self.unlock_delay_days = unlock_delay_days
        self._clock = clock

    def setup_account(self, user_id: int) -> Dict[str, object]:
        if self.habits.store.current_tier(user_id) is None:
            raise NotFoundError("User not found")
        today = self._clock().date()
        tier2_unlock = today + timedelta(days=self.unlock_delay_days)
        tier3_unlock = tier2_unlock + timedelta(days=self.unlock_delay_days)

        baseline = self._seed(user_id, BASELINE, start_date=today, active=True)
        self._seed(user_id, TIER2, start_date=tier2_unlock, active=False)
        self._seed(user_id, TIER3, start_date=tier3_unlock, active=False)
        self.engine.initialize_rules(user_id)
        self.habits.store.set_user_tier(user_id, BASELINE)

        logger.info("Set up account for user %s (%s baseline habits)", user_id, len(baseline))
        return {
            "baseline_habits": [h.id for h in baseline],
            "tier2_unlock_date": tier2_unlock,
            "message": SETUP_MESSAGE,
        }

    def reset_account(self, user_id: int) -> Dict[str, object]:
        if self.habits.store.current_tier(user_id) is None:
            raise NotFoundError("User not found")
        for tier in TIERS:
            self.habits.archive_tier(user_id, tier)
        self.habits.store.set_user_tier(user_id, BASELINE)
        result = self.setup_account(user_id)
        result["message"] = RESET_MESSAGE
        return result

    def unlock_tier(self, user_id: int, tier: str) -> Dict[str, object]:
        if tier not in UNLOCK_MESSAGES:
            raise RequestValidationError(f"Tier cannot be unlocked manually: {tier}")
        message = UNLOCK_MESSAGES[tier]
        previous = self.habits.move_to_tier(user_id, tier, message)
        return {"tier": tier, "previous_tier": previous, "message": message}

    def has_habits(self, user_id: int) -> bool:
        return bool(self.habits.store.list_habits(user_id))

    def _seed(self, user_id: int, tier: str, *, start_date: date, active: bool) -> List[Habit]:
        created = []
        for template in TEMPLATES_BY_TIER[tier]:
            created.append(
                self.habits.store.add_habit(
                    user_id,
                    tier=tier,
                    notes=template["description"],
                    start_date=start_date,
                    is_active=active,
                    archived=False,
                    **template,
                )
            )
        return created


__all__ = ["SetupService", "UNLOCK_MESSAGES"]
