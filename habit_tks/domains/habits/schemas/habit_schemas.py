"""Habit DTOs and schemas.

Request models accept the camelCase keys the web client sends as well as
snake_case names; responses are dumped ``by_alias`` so the client sees
camelCase throughout.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from habit_tks.core.tiers import Tier

Category = Literal["fitness", "work", "learning", "productivity"]
Frequency = Literal["daily", "weekly", "monthly", "custom"]
Priority = Literal["low", "medium", "high"]
Intensity = Literal["low", "medium", "high"]

_REMINDER_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class HabitCreate(_Request):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)
    category: Category
    tier: Tier = "baseline"
    frequency: Frequency = "daily"
    reminder_time: Optional[str] = Field(default=None, alias="reminderTime", pattern=_REMINDER_PATTERN)
    notes: Optional[str] = Field(default=None, max_length=4096)
    priority: Priority = "medium"
    streak_tracking: bool = Field(default=True, alias="streakTracking")
    skip_allowed: bool = Field(default=True, alias="skipAllowed")
    start_date: Optional[date] = Field(default=None, alias="startDate")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class HabitUpdate(_Request):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)
    category: Optional[Category] = None
    frequency: Optional[Frequency] = None
    reminder_time: Optional[str] = Field(default=None, alias="reminderTime", pattern=_REMINDER_PATTERN)
    notes: Optional[str] = Field(default=None, max_length=4096)
    priority: Optional[Priority] = None
    streak_tracking: Optional[bool] = Field(default=None, alias="streakTracking")
    skip_allowed: Optional[bool] = Field(default=None, alias="skipAllowed")
    start_date: Optional[date] = Field(default=None, alias="startDate")
    is_active: Optional[bool] = Field(default=None, alias="isActive")
    archived: Optional[bool] = None


class CompletionMetrics(_Request):
    duration: Optional[int] = Field(default=None, ge=0)
    intensity: Optional[Intensity] = None
    additional_data: Optional[Dict[str, Any]] = Field(default=None, alias="additionalData")


class CompleteHabitRequest(_Request):
    notes: Optional[str] = Field(default=None, max_length=2048)
    metrics: Optional[CompletionMetrics] = None


class SkipHabitRequest(_Request):
    reason: str = Field(min_length=1, max_length=2048)

    @field_validator("reason")
    @classmethod
    def _strip_reason(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("reason is required")
        return value


class _Response(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class HabitResponse(_Response):
    id: int
    user_id: int = Field(serialization_alias="userId")
    name: str
    description: Optional[str]
    category: str
    tier: str
    frequency: str
    reminder_time: Optional[str] = Field(serialization_alias="reminderTime")
    notes: Optional[str]
    priority: str
    streak_tracking: bool = Field(serialization_alias="streakTracking")
    skip_allowed: bool = Field(serialization_alias="skipAllowed")
    start_date: date = Field(serialization_alias="startDate")
    is_active: bool = Field(serialization_alias="isActive")
    archived: bool
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class CompletionResponse(_Response):
    id: int
    habit_id: int = Field(serialization_alias="habitId")
    user_id: int = Field(serialization_alias="userId")
    tier: str
    completed_at: datetime = Field(serialization_alias="completedAt")
    notes: Optional[str]
    duration: Optional[int]
    intensity: Optional[str]
    additional_data: Optional[Dict[str, Any]] = Field(serialization_alias="additionalData")


class SkipResponse(_Response):
    id: int
    habit_id: int = Field(serialization_alias="habitId")
    user_id: int = Field(serialization_alias="userId")
    tier: str
    skipped_at: datetime = Field(serialization_alias="skippedAt")
    reason: str


def dump_habit(habit) -> dict:
    return HabitResponse.model_validate(habit).model_dump(mode="json", by_alias=True)


def dump_habits(habits: List) -> List[dict]:
    return [dump_habit(h) for h in habits]


def dump_completion(completion) -> dict:
    return CompletionResponse.model_validate(completion).model_dump(mode="json", by_alias=True)


def dump_skip(skip) -> dict:
    return SkipResponse.model_validate(skip).model_dump(mode="json", by_alias=True)
