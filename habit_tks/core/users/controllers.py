"""User API controllers."""

from __future__ import annotations

from flask import Blueprint, jsonify

from habit_tks.core.users.schemas import (
    UserCreateRequest,
    UserSettingsUpdate,
    UserStatsResponse,
    UserTierUpdate,
    serialize_user,
)
from habit_tks.core.users.services import (
    create_user,
    current_user_id,
    get_user_stats,
    list_users,
    require_user,
    update_settings,
    update_tier,
)
from habit_tks.core.utils.validation import parse_body

user_api_bp = Blueprint("user_api", __name__)


@user_api_bp.post("")
def api_create_user():
    data = parse_body(UserCreateRequest)
    user = create_user(data)
    return jsonify({"ok": True, "user": serialize_user(user)}), 201


@user_api_bp.get("")
def api_list_users():
    return jsonify({"ok": True, "users": [serialize_user(u) for u in list_users()]})


@user_api_bp.get("/me")
def api_me():
    user = require_user(current_user_id())
    return jsonify({"ok": True, "user": serialize_user(user)})


@user_api_bp.get("/me/stats")
def api_me_stats():
    stats = UserStatsResponse(**get_user_stats(current_user_id()))
    return jsonify({"ok": True, "stats": stats.model_dump(mode="json", by_alias=True)})


@user_api_bp.put("/me/settings")
def api_update_settings():
    data = parse_body(UserSettingsUpdate)
    user = update_settings(current_user_id(), data)
    return jsonify({"ok": True, "user": serialize_user(user)})


@user_api_bp.put("/me/tier")
def api_update_tier():
    data = parse_body(UserTierUpdate)
    user = update_tier(current_user_id(), data.tier)
    return jsonify({"ok": True, "user": serialize_user(user)})
