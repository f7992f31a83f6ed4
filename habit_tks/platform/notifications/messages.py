"""Push message envelope and event type names."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

HABIT_COMPLETED = "habit_completed"
HABIT_SKIPPED = "habit_skipped"
TIER_UNLOCKED = "tier_unlocked"
STREAK_UPDATED = "streak_updated"
NOTIFICATION = "notification"
PONG = "pong"
# Server-side liveness ping; clients answer with any frame.
PING = "ping"

MessageType = Literal[
    "habit_completed",
    "habit_skipped",
    "tier_unlocked",
    "streak_updated",
    "notification",
    "pong",
    "ping",
]


class PushMessage(BaseModel):
    type: MessageType
    data: Dict[str, Any] = {}
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    def encode(self) -> str:
        return self.model_dump_json()


__all__ = [
    "HABIT_COMPLETED",
    "HABIT_SKIPPED",
    "NOTIFICATION",
    "PING",
    "PONG",
    "PushMessage",
    "STREAK_UPDATED",
    "TIER_UNLOCKED",
]
