"""Tests for account setup, reset and manual tier unlocks."""

from datetime import date, datetime, timedelta

import pytest

pytestmark = pytest.mark.integration

from habit_tks.core.errors import NotFoundError, RequestValidationError
from habit_tks.core.users.models import User
from habit_tks.domains.habits.models.habit_models import Habit
from habit_tks.domains.habits.services import HabitService
from habit_tks.domains.progression.engine import ProgressionEngine
from habit_tks.domains.progression.repository import SqlProgressionStore
from habit_tks.domains.setup.services import UNLOCK_MESSAGES, SetupService
from habit_tks.extensions import db

NOW = datetime(2026, 3, 10, 12, 0, 0)


@pytest.fixture
def setup_service(habit_store, sink):
    engine = ProgressionEngine(SqlProgressionStore(), habit_store, clock=lambda: NOW)
    habits = HabitService(habit_store, engine, sink, clock=lambda: NOW)
    return SetupService(habits, engine, clock=lambda: NOW)


def _habits(user_id, tier):
    return Habit.query.filter_by(user_id=user_id, tier=tier).order_by(Habit.id).all()


class TestSetupAccount:
    def test_seeds_four_habits_per_tier(self, setup_service, demo_user):
        result = setup_service.setup_account(demo_user.id)

        baseline = _habits(demo_user.id, "baseline")
        tier2 = _habits(demo_user.id, "tier2")
        tier3 = _habits(demo_user.id, "tier3")
        assert len(baseline) == len(tier2) == len(tier3) == 4
        assert result["baseline_habits"] == [h.id for h in baseline]
        assert result["tier2_unlock_date"] == date(2026, 3, 17)
        assert "4 baseline habits" in result["message"]

    def test_activation_flags_and_start_dates(self, setup_service, demo_user):
        setup_service.setup_account(demo_user.id)

        assert all(h.is_active and h.start_date == NOW.date() for h in _habits(demo_user.id, "baseline"))
        assert all(not h.is_active for h in _habits(demo_user.id, "tier2"))
        assert all(h.start_date == NOW.date() + timedelta(days=7) for h in _habits(demo_user.id, "tier2"))
        assert all(not h.is_active for h in _habits(demo_user.id, "tier3"))
        assert all(h.start_date == NOW.date() + timedelta(days=14) for h in _habits(demo_user.id, "tier3"))

    def test_templates_carry_habit_settings(self, setup_service, demo_user):
        setup_service.setup_account(demo_user.id)

        pushups = _habits(demo_user.id, "baseline")[0]
        gym = _habits(demo_user.id, "tier3")[0]
        assert (pushups.name, pushups.reminder_time, pushups.skip_allowed) == ("5 push-ups", "07:00", False)
        assert pushups.notes == "Even if exhausted"
        assert (gym.frequency, gym.reminder_time, gym.streak_tracking) == ("custom", None, False)

    def test_installs_default_rules(self, setup_service, demo_user):
        setup_service.setup_account(demo_user.id)

        rules = setup_service.engine.list_rules(demo_user.id)
        assert {(r.from_tier, r.to_tier) for r in rules} == {("baseline", "tier2"), ("tier2", "tier3")}

    def test_unknown_user(self, setup_service):
        with pytest.raises(NotFoundError):
            setup_service.setup_account(4242)


class TestResetAccount:
    def test_reset_archives_old_habits_and_reseeds(self, setup_service, demo_user):
        setup_service.setup_account(demo_user.id)
        setup_service.unlock_tier(demo_user.id, "tier2")

        result = setup_service.reset_account(demo_user.id)

        assert "fresh start" in result["message"]
        assert db.session.get(User, demo_user.id).current_tier == "baseline"
        assert Habit.query.filter_by(user_id=demo_user.id, archived=True).count() == 12
        active = Habit.query.filter_by(user_id=demo_user.id, is_active=True, archived=False).all()
        assert len(active) == 4
        assert {h.tier for h in active} == {"baseline"}


class TestUnlockTier:
    def test_unlock_tier2(self, setup_service, sink, demo_user):
        setup_service.setup_account(demo_user.id)

        result = setup_service.unlock_tier(demo_user.id, "tier2")

        assert result["previous_tier"] == "baseline"
        assert db.session.get(User, demo_user.id).current_tier == "tier2"
        assert all(h.archived for h in _habits(demo_user.id, "baseline"))
        assert all(h.is_active for h in _habits(demo_user.id, "tier2"))
        assert sink.of_type("tier_unlocked")[0]["message"] == UNLOCK_MESSAGES["tier2"]

    def test_unlock_tier3_from_tier2(self, setup_service, demo_user):
        setup_service.setup_account(demo_user.id)
        setup_service.unlock_tier(demo_user.id, "tier2")

        setup_service.unlock_tier(demo_user.id, "tier3")

        assert db.session.get(User, demo_user.id).current_tier == "tier3"
        assert all(h.archived for h in _habits(demo_user.id, "tier2"))
        assert all(h.is_active for h in _habits(demo_user.id, "tier3"))

    def test_baseline_cannot_be_unlocked(self, setup_service, demo_user):
        with pytest.raises(RequestValidationError):
            setup_service.unlock_tier(demo_user.id, "baseline")


class TestSeedCommand:
    def test_seed_then_skip_then_reset(self, app):
        runner = app.test_cli_runner()

        first = runner.invoke(args=["seed-demo"])
        again = runner.invoke(args=["seed-demo"])
        reset = runner.invoke(args=["seed-demo", "--reset"])

        assert first.exit_code == 0
        assert "Tier 2 unlocks on" in first.output
        assert "already has habits" in again.output
        assert "fresh start" in reset.output
        assert Habit.query.filter_by(archived=False).count() == 12
