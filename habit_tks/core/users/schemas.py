"""Typed schemas for user IO."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Literal, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from habit_tks.core.tiers import Tier

if TYPE_CHECKING:
    from habit_tks.core.users.models import User


class UserCreateRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=255)


class UserSettingsUpdate(BaseModel):
    theme: Optional[Literal["light", "dark"]] = None
    notifications: Optional[bool] = None
    strict_mode: Optional[bool] = Field(default=None, alias="strictMode")
    auto_progression: Optional[bool] = Field(default=None, alias="autoProgression")

    model_config = ConfigDict(populate_by_name=True)


class UserTierUpdate(BaseModel):
    tier: Tier


class UserResponse(BaseModel):
    # Persisted demo addresses are not re-validated on the way out.
    id: int
    email: str
    name: str
    current_tier: str = Field(serialization_alias="currentTier")
    streak: int
    settings: Dict[str, Any] = {}
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = ConfigDict(from_attributes=True)


class UserStatsResponse(BaseModel):
    current_tier: str = Field(serialization_alias="currentTier")
    streak: int
    total_habits: int = Field(serialization_alias="totalHabits")
    completion_rate: float = Field(serialization_alias="completionRate")


def serialize_user(user: "User") -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)
