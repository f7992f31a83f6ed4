"""Account setup endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from habit_tks.core.users.schemas import serialize_user
from habit_tks.core.users.services import current_user_id, ensure_demo_user
from habit_tks.domains.setup.services import SetupService

setup_api_bp = Blueprint("setup_api", __name__)


def _service() -> SetupService:
    return current_app.extensions["setup_service"]


def _dump_result(result: dict) -> dict:
    body = {"ok": True, "message": result["message"]}
    if "baseline_habits" in result:
        body["baselineHabits"] = result["baseline_habits"]
        body["tier2UnlockDate"] = result["tier2_unlock_date"].isoformat()
    return body


@setup_api_bp.post("/demo-user")
def setup_demo_user():
    user = ensure_demo_user()
    service = _service()
    body = {"ok": True, "created": False}
    if not service.has_habits(user.id):
        body.update(_dump_result(service.setup_account(user.id)))
        body["created"] = True
    body["user"] = serialize_user(ensure_demo_user())
    return jsonify(body)


@setup_api_bp.post("/account")
def setup_account():
    result = _service().setup_account(current_user_id())
    return jsonify(_dump_result(result)), 201


@setup_api_bp.post("/reset")
def reset_account():
    result = _service().reset_account(current_user_id())
    return jsonify(_dump_result(result))


@setup_api_bp.post("/unlock/<tier>")
def unlock_tier(tier: str):
    result = _service().unlock_tier(current_user_id(), tier)
    return jsonify(
        {"ok": True, "tier": result["tier"], "previousTier": result["previous_tier"], "message": result["message"]}
    )
