"""Progression rules, history and manual unlock endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from habit_tks.core.errors import RequestValidationError
from habit_tks.core.tiers import TIERS
from habit_tks.core.users.services import current_user_id
from habit_tks.core.utils.validation import parse_body
from habit_tks.domains.progression.engine import ProgressionEngine
from habit_tks.domains.progression.schemas.progression_schemas import (
    RuleCreate,
    dump_decisions,
    dump_events,
    dump_rules,
)

progression_api_bp = Blueprint("progression_api", __name__)


def _engine() -> ProgressionEngine:
    return current_app.extensions["progression_engine"]


@progression_api_bp.get("/rules")
def list_rules():
    return jsonify({"ok": True, "rules": dump_rules(_engine().list_rules(current_user_id()))})


@progression_api_bp.post("/rules")
def create_rule():
    data = parse_body(RuleCreate)
    rule = _engine().add_rule(
        current_user_id(),
        from_tier=data.from_tier,
        to_tier=data.to_tier,
        condition_type=data.condition.type,
        value=data.condition.value,
        timeframe=data.condition.timeframe,
    )
    return jsonify({"ok": True, "rule": dump_rules([rule])[0]}), 201


@progression_api_bp.get("/history")
def history():
    return jsonify({"ok": True, "history": dump_events(_engine().history(current_user_id()))})


@progression_api_bp.post("/manual/<tier>")
def trigger_manual(tier: str):
    if tier not in TIERS:
        raise RequestValidationError(f"Unknown tier: {tier}")
    decisions = current_app.extensions["habit_service"].trigger_manual_progression(current_user_id(), tier)
    return jsonify({"ok": True, "triggered": bool(decisions), "decisions": dump_decisions(decisions)})
