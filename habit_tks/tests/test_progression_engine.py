"""Tests for the tier progression engine: rules, conditions and skip penalties."""

from datetime import datetime, timedelta

import pytest

pytestmark = pytest.mark.integration

from habit_tks.core.errors import RequestValidationError
from habit_tks.domains.progression.engine import DEFAULT_RULES, ProgressionEngine
from habit_tks.domains.progression.repository import SqlProgressionStore

NOW = datetime(2026, 3, 10, 12, 0, 0)


@pytest.fixture
def engine(habit_store):
    return ProgressionEngine(SqlProgressionStore(), habit_store, clock=lambda: NOW)


def _complete_on_days(habit_store, habit, user_id, days_ago):
    for offset in days_ago:
        habit_store.add_completion(habit, user_id, completed_at=NOW - timedelta(days=offset))


def _skip_at(habit_store, habit, user_id, *times):
    for ts in times:
        habit_store.add_skip(habit, user_id, "too tired", skipped_at=ts)


class TestRules:
    """Default rule installation, custom rules and per-user isolation."""

    def test_initialize_installs_defaults(self, engine, demo_user):
        rules = engine.initialize_rules(demo_user.id)

        assert len(rules) == len(DEFAULT_RULES) == 2
        by_from = {r.from_tier: r for r in engine.list_rules(demo_user.id)}
        assert by_from["baseline"].to_tier == "tier2"
        assert by_from["baseline"].condition == {"type": "consecutiveDays", "value": 7, "timeframe": 7}
        assert by_from["tier2"].to_tier == "tier3"
        assert by_from["tier2"].condition == {"type": "weeklyFrequency", "value": 5, "timeframe": 7}
        assert all(r.is_default for r in rules)

    def test_initialize_twice_replaces_rule_set(self, engine, demo_user):
        engine.initialize_rules(demo_user.id)
        engine.add_rule(demo_user.id, from_tier="baseline", to_tier="tier2", condition_type="manual", value=1)
        engine.initialize_rules(demo_user.id)

        rules = engine.list_rules(demo_user.id)
        assert len(rules) == 2
        assert all(r.is_default for r in rules)

    def test_rules_are_isolated_per_user(self, engine, demo_user, other_user):
        engine.initialize_rules(demo_user.id)

        assert engine.list_rules(other_user.id) == []

    def test_add_rule_rejects_multi_step_transition(self, engine, demo_user):
        with pytest.raises(RequestValidationError):
            engine.add_rule(
                demo_user.id, from_tier="baseline", to_tier="tier3", condition_type="consecutiveDays", value=7
            )

    def test_add_rule_rejects_downward_transition(self, engine, demo_user):
        with pytest.raises(RequestValidationError):
            engine.add_rule(demo_user.id, from_tier="tier2", to_tier="baseline", condition_type="manual", value=1)

    def test_add_rule_rejects_unknown_condition(self, engine, demo_user):
        with pytest.raises(RequestValidationError):
            engine.add_rule(demo_user.id, from_tier="baseline", to_tier="tier2", condition_type="vibes", value=1)

    def test_add_rule_persists_custom_rule(self, engine, demo_user):
        rule = engine.add_rule(
            demo_user.id,
            from_tier="tier2",
            to_tier="tier3",
            condition_type="weeklyFrequency",
            value=3,
            timeframe=5,
        )

        assert rule.id is not None
        assert rule.is_default is False
        assert rule.condition == {"type": "weeklyFrequency", "value": 3, "timeframe": 5}


class TestConsecutiveDays:
    """baseline -> tier2 after a run of consecutive completion days."""

    def test_seven_consecutive_days_upgrades(self, engine, demo_user, habit_store, make_habit):
        engine.initialize_rules(demo_user.id)
        habit = make_habit(demo_user.id)
        _complete_on_days(habit_store, habit, demo_user.id, range(7))

        decisions = engine.evaluate_on_completion(demo_user.id, "baseline", now=NOW)

        assert len(decisions) == 1
        decision = decisions[0]
        assert (decision.from_tier, decision.to_tier) == ("baseline", "tier2")
        assert decision.was_penalty is False
        assert decision.is_upgrade
        history = engine.history(demo_user.id)
        assert [e.id for e in history] == [decision.event_id]
        assert history[0].condition["type"] == "consecutiveDays"

    def test_six_days_is_not_enough(self, engine, demo_user, habit_store, make_habit):
        engine.initialize_rules(demo_user.id)
        habit = make_habit(demo_user.id)
        _complete_on_days(habit_store, habit, demo_user.id, range(6))

        assert engine.evaluate_on_completion(demo_user.id, "baseline", now=NOW) == []
        assert engine.history(demo_user.id) == []

    def test_gap_breaks_the_run(self, engine, demo_user, habit_store, make_habit):
        engine.initialize_rules(demo_user.id)
        habit = make_habit(demo_user.id)
        _complete_on_days(habit_store, habit, demo_user.id, [0, 1, 2, 4, 5, 6, 7, 8])

        assert engine.consecutive_days(demo_user.id, "baseline", 7, NOW) == 3
        assert engine.evaluate_on_completion(demo_user.id, "baseline", now=NOW) == []

    def test_several_completions_per_day_count_once(self, engine, demo_user, habit_store, make_habit):
        habit = make_habit(demo_user.id)
        for hours in (1, 2, 3):
            habit_store.add_completion(habit, demo_user.id, completed_at=NOW - timedelta(hours=hours))

        assert engine.consecutive_days(demo_user.id, "baseline", 7, NOW) == 1

    def test_completions_at_other_tiers_are_ignored(self, engine, demo_user, habit_store, make_habit):
        engine.initialize_rules(demo_user.id)
        other = make_habit(demo_user.id, name="Ship 1 task", category="work", tier="tier2")
        _complete_on_days(habit_store, other, demo_user.id, range(7))

        assert engine.consecutive_days(demo_user.id, "baseline", 7, NOW) == 0
        assert engine.evaluate_on_completion(demo_user.id, "baseline", now=NOW) == []

    def test_no_evaluation_when_user_is_on_another_tier(self, engine, demo_user, habit_store, make_habit):
        engine.initialize_rules(demo_user.id)
        habit = make_habit(demo_user.id)
        _complete_on_days(habit_store, habit, demo_user.id, range(7))
        habit_store.set_user_tier(demo_user.id, "tier2")

        assert engine.evaluate_on_completion(demo_user.id, "baseline", now=NOW) == []


class TestWeeklyFrequency:
    """tier2 -> tier3 after enough completions inside the trailing window."""

    def test_five_completions_in_window_upgrades(self, engine, demo_user, habit_store, make_habit):
        engine.initialize_rules(demo_user.id)
        habit_store.set_user_tier(demo_user.id, "tier2")
        habit = make_habit(demo_user.id, name="15-min workout", tier="tier2")
        _complete_on_days(habit_store, habit, demo_user.id, [0, 0, 1, 3, 6])

        decisions = engine.evaluate_on_completion(demo_user.id, "tier2", now=NOW)

        assert [(d.from_tier, d.to_tier) for d in decisions] == [("tier2", "tier3")]

    def test_fifth_completion_crosses_threshold(self, engine, demo_user, habit_store, make_habit):
        engine.initialize_rules(demo_user.id)
        habit_store.set_user_tier(demo_user.id, "tier2")
        habit = make_habit(demo_user.id, name="15-min workout", tier="tier2")
        _complete_on_days(habit_store, habit, demo_user.id, [1, 2, 4, 6])

        assert engine.completions_in_window(demo_user.id, "tier2", 7, NOW) == 4
        assert engine.evaluate_on_completion(demo_user.id, "tier2", now=NOW) == []

        _complete_on_days(habit_store, habit, demo_user.id, [0])
        decisions = engine.evaluate_on_completion(demo_user.id, "tier2", now=NOW)

        assert [(d.from_tier, d.to_tier) for d in decisions] == [("tier2", "tier3")]
        assert len(engine.history(demo_user.id)) == 1

    def test_old_completions_fall_out_of_window(self, engine, demo_user, habit_store, make_habit):
        engine.initialize_rules(demo_user.id)
        habit_store.set_user_tier(demo_user.id, "tier2")
        habit = make_habit(demo_user.id, name="15-min workout", tier="tier2")
        _complete_on_days(habit_store, habit, demo_user.id, [0, 1, 2, 8, 9, 10])

        assert engine.completions_in_window(demo_user.id, "tier2", 7, NOW) == 3
        assert engine.evaluate_on_completion(demo_user.id, "tier2", now=NOW) == []

    def test_all_matching_rules_fire(self, engine, demo_user, habit_store, make_habit):
        engine.initialize_rules(demo_user.id)
        engine.add_rule(
            demo_user.id, from_tier="tier2", to_tier="tier3", condition_type="weeklyFrequency", value=2
        )
        habit_store.set_user_tier(demo_user.id, "tier2")
        habit = make_habit(demo_user.id, name="15-min workout", tier="tier2")
        _complete_on_days(habit_store, habit, demo_user.id, range(5))

        decisions = engine.evaluate_on_completion(demo_user.id, "tier2", now=NOW)

        assert len(decisions) == 2
        assert len(engine.history(demo_user.id)) == 2


class TestManualRules:
    def test_manual_rule_never_fires_on_completion(self, engine, demo_user, habit_store, make_habit):
        engine.add_rule(demo_user.id, from_tier="baseline", to_tier="tier2", condition_type="manual", value=1)
        habit = make_habit(demo_user.id)
        _complete_on_days(habit_store, habit, demo_user.id, range(30))

        assert engine.evaluate_on_completion(demo_user.id, "baseline", now=NOW) == []

    def test_trigger_manual_fires_manual_rules(self, engine, demo_user):
        engine.add_rule(demo_user.id, from_tier="baseline", to_tier="tier2", condition_type="manual", value=1)

        decisions = engine.trigger_manual(demo_user.id, "baseline", now=NOW)

        assert [(d.from_tier, d.to_tier) for d in decisions] == [("baseline", "tier2")]
        assert engine.history(demo_user.id)[0].condition_type == "manual"

    def test_trigger_manual_without_manual_rules(self, engine, demo_user):
        engine.initialize_rules(demo_user.id)

        assert engine.trigger_manual(demo_user.id, "baseline", now=NOW) == []


class TestSkipPenalty:
    """Three skips inside the window move the user one tier down."""

    def test_third_skip_downgrades_one_tier(self, engine, demo_user, habit_store, make_habit):
        habit_store.set_user_tier(demo_user.id, "tier2")
        habit = make_habit(demo_user.id, tier="tier2")
        _skip_at(habit_store, habit, demo_user.id, NOW - timedelta(days=2), NOW - timedelta(days=1))

        assert engine.evaluate_on_skip(demo_user.id, now=NOW) is None

        _skip_at(habit_store, habit, demo_user.id, NOW)
        decision = engine.evaluate_on_skip(demo_user.id, now=NOW)

        assert decision is not None
        assert (decision.from_tier, decision.to_tier) == ("tier2", "baseline")
        assert decision.was_penalty is True
        assert decision.condition["type"] == "skipPenalty"
        event = engine.history(demo_user.id)[0]
        assert event.was_penalty is True
        assert event.rule_id is None

    def test_only_the_third_skip_is_penalised(self, engine, demo_user, habit_store, make_habit):
        habit_store.set_user_tier(demo_user.id, "tier3")
        habit = make_habit(demo_user.id, tier="tier3")

        results = []
        for hours in range(4):
            ts = NOW + timedelta(hours=hours)
            _skip_at(habit_store, habit, demo_user.id, ts)
            decision = engine.evaluate_on_skip(demo_user.id, now=ts)
            if decision is not None:
                habit_store.set_user_tier(demo_user.id, decision.to_tier)
            results.append(decision and (decision.from_tier, decision.to_tier))

        assert results == [None, None, ("tier3", "tier2"), None]

    def test_skips_outside_window_do_not_count(self, engine, demo_user, habit_store, make_habit):
        habit_store.set_user_tier(demo_user.id, "tier2")
        habit = make_habit(demo_user.id, tier="tier2")
        _skip_at(habit_store, habit, demo_user.id, NOW - timedelta(days=9), NOW - timedelta(days=8), NOW)

        assert engine.skips_since_last_penalty(demo_user.id, NOW) == 1
        assert engine.evaluate_on_skip(demo_user.id, now=NOW) is None

    def test_no_penalty_at_baseline(self, engine, demo_user, habit_store, make_habit):
        habit = make_habit(demo_user.id)
        _skip_at(habit_store, habit, demo_user.id, *(NOW - timedelta(hours=h) for h in range(5)))

        assert engine.evaluate_on_skip(demo_user.id, now=NOW) is None
        assert engine.history(demo_user.id) == []

    def test_penalised_skips_are_not_counted_again(self, engine, demo_user, habit_store, make_habit):
        habit_store.set_user_tier(demo_user.id, "tier3")
        habit = make_habit(demo_user.id, tier="tier3")
        _skip_at(habit_store, habit, demo_user.id, *(NOW - timedelta(hours=h) for h in (3, 2, 1)))

        first = engine.evaluate_on_skip(demo_user.id, now=NOW)
        assert (first.from_tier, first.to_tier) == ("tier3", "tier2")
        habit_store.set_user_tier(demo_user.id, "tier2")

        later = NOW + timedelta(hours=1)
        _skip_at(habit_store, habit, demo_user.id, later)
        assert engine.evaluate_on_skip(demo_user.id, now=later) is None

        latest = NOW + timedelta(hours=3)
        _skip_at(habit_store, habit, demo_user.id, NOW + timedelta(hours=2), latest)
        second = engine.evaluate_on_skip(demo_user.id, now=latest)
        assert (second.from_tier, second.to_tier) == ("tier2", "baseline")
        assert [e.was_penalty for e in engine.history(demo_user.id)] == [True, True]


class TestUnknownUser:
    def test_unknown_user_is_a_no_op(self, engine):
        assert engine.list_rules(9999) == []
        assert engine.evaluate_on_completion(9999, "baseline", now=NOW) == []
        assert engine.evaluate_on_skip(9999, now=NOW) is None
        assert engine.trigger_manual(9999, "baseline", now=NOW) == []
