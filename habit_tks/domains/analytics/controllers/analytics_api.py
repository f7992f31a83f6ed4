"""Analytics JSON API."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from habit_tks.core.users.services import current_user_id
from habit_tks.core.utils.validation import parse_body
from habit_tks.domains.analytics import services as analytics_services
from habit_tks.domains.analytics.schemas.analytics_schemas import TrackEventRequest

analytics_api_bp = Blueprint("analytics_api", __name__)


@analytics_api_bp.get("/user")
def user_analytics():
    summary = analytics_services.user_summary(current_user_id())
    return jsonify(
        {
            "ok": True,
            "analytics": {
                "currentTier": summary["current_tier"],
                "totalCompletions": summary["total_completions"],
                "totalSkips": summary["total_skips"],
                "completionRate": summary["completion_rate"],
                "currentStreak": summary["current_streak"],
                "bestStreak": summary["best_streak"],
                "habits": [
                    {
                        "habitId": h["habit_id"],
                        "name": h["name"],
                        "tier": h["tier"],
                        "completions": h["completions"],
                        "skips": h["skips"],
                    }
                    for h in summary["habits"]
                ],
            },
        }
    )


@analytics_api_bp.get("/habit/<int:habit_id>")
def habit_analytics(habit_id: int):
    summary = analytics_services.habit_summary(current_user_id(), habit_id)
    last = summary["last_completed_at"]
    return jsonify(
        {
            "ok": True,
            "analytics": {
                "habitId": summary["habit_id"],
                "name": summary["name"],
                "tier": summary["tier"],
                "completions": summary["completions"],
                "skips": summary["skips"],
                "completionRate": summary["completion_rate"],
                "currentStreak": summary["current_streak"],
                "bestStreak": summary["best_streak"],
                "lastCompletedAt": last.isoformat() if last else None,
            },
        }
    )


@analytics_api_bp.get("/streak/<int:habit_id>")
def habit_streak(habit_id: int):
    streak = analytics_services.habit_streak(current_user_id(), habit_id)
    last = streak["last_completed_at"]
    return jsonify(
        {
            "ok": True,
            "streak": {
                "habitId": streak["habit_id"],
                "currentStreak": streak["current_streak"],
                "bestStreak": streak["best_streak"],
                "lastCompletedAt": last.isoformat() if last else None,
            },
        }
    )


def _days_response(days):
    return jsonify(
        {
            "ok": True,
            "days": [
                {"date": d["date"].isoformat(), "completions": d["completions"], "skips": d["skips"]}
                for d in days
            ],
        }
    )


@analytics_api_bp.get("/weekly")
def weekly_analytics():
    return _days_response(analytics_services.weekly(current_user_id()))


@analytics_api_bp.get("/monthly")
def monthly_analytics():
    return _days_response(analytics_services.monthly(current_user_id()))


@analytics_api_bp.post("/track")
def track_event():
    data = parse_body(TrackEventRequest)
    record = analytics_services.track(current_user_id(), data.event, data.data)
    return jsonify({"ok": True, "event": {"id": record.id, "type": record.event_type}}), 201


@analytics_api_bp.get("/events")
def recent_events():
    events = analytics_services.recent_events(
        current_user_id(),
        habit_id=request.args.get("habitId", type=int),
        limit=request.args.get("limit", 50, type=int),
    )
    return jsonify(
        {
            "ok": True,
            "events": [
                {
                    "id": e.id,
                    "type": e.event_type,
                    "habitId": e.habit_id,
                    "payload": e.payload,
                    "createdAt": e.created_at.isoformat(),
                }
                for e in events
            ],
        }
    )
