"""Habits JSON API controllers (thin, schema-validated)."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from habit_tks.core.errors import RequestValidationError
from habit_tks.core.tiers import TIERS
from habit_tks.core.users.services import current_user_id
from habit_tks.core.utils.validation import parse_body
from habit_tks.domains.habits.schemas.habit_schemas import (
    CompleteHabitRequest,
    HabitCreate,
    HabitUpdate,
    SkipHabitRequest,
    dump_completion,
    dump_habit,
    dump_habits,
    dump_skip,
)
from habit_tks.domains.habits.services import HabitService

habit_api_bp = Blueprint("habit_api", __name__)


def _service() -> HabitService:
    return current_app.extensions["habit_service"]


@habit_api_bp.get("")
def list_habits():
    tier = request.args.get("tier")
    if tier and tier not in TIERS:
        raise RequestValidationError(f"Unknown tier: {tier}")
    habits = _service().list_habits(current_user_id(), tier=tier)
    return jsonify({"ok": True, "habits": dump_habits(habits)})


@habit_api_bp.post("")
def create_habit():
    data = parse_body(HabitCreate)
    habit = _service().create_habit(current_user_id(), data)
    return jsonify({"ok": True, "habit": dump_habit(habit)}), 201


@habit_api_bp.get("/<int:habit_id>")
def habit_detail(habit_id: int):
    habit = _service().get_habit(habit_id, current_user_id())
    return jsonify({"ok": True, "habit": dump_habit(habit)})


@habit_api_bp.put("/<int:habit_id>")
def update_habit(habit_id: int):
    data = parse_body(HabitUpdate)
    habit = _service().update_habit(habit_id, current_user_id(), data)
    return jsonify({"ok": True, "habit": dump_habit(habit)})


@habit_api_bp.delete("/<int:habit_id>")
def delete_habit(habit_id: int):
    _service().delete_habit(habit_id, current_user_id())
    return jsonify({"ok": True})


@habit_api_bp.post("/<int:habit_id>/complete")
def complete_habit(habit_id: int):
    data = parse_body(CompleteHabitRequest)
    outcome = _service().complete_habit(habit_id, current_user_id(), data)
    return (
        jsonify(
            {
                "ok": True,
                "completion": dump_completion(outcome.completion),
                "tierUnlocked": outcome.new_tier,
                "streak": outcome.streak,
            }
        ),
        201,
    )


@habit_api_bp.post("/<int:habit_id>/skip")
def skip_habit(habit_id: int):
    data = parse_body(SkipHabitRequest)
    outcome = _service().skip_habit(habit_id, current_user_id(), data)
    return (
        jsonify(
            {
                "ok": True,
                "skip": dump_skip(outcome.skip),
                "tierDowngraded": outcome.penalty.to_tier if outcome.penalty else None,
            }
        ),
        201,
    )


@habit_api_bp.get("/<int:habit_id>/completions")
def habit_completions(habit_id: int):
    limit = request.args.get("limit", type=int)
    completions = _service().completions_for(habit_id, current_user_id(), limit=limit)
    return jsonify({"ok": True, "completions": [dump_completion(c) for c in completions]})
