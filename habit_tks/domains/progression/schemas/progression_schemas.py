"""Progression rule and history DTOs."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from habit_tks.core.tiers import Tier

ConditionType = Literal["consecutiveDays", "weeklyFrequency", "manual"]


class RuleCondition(BaseModel):
    type: ConditionType
    value: int = Field(ge=1)
    timeframe: Optional[int] = Field(default=None, ge=1)


class RuleCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_tier: Tier = Field(alias="fromTier")
    to_tier: Tier = Field(alias="toTier")
    condition: RuleCondition


class ConditionSnapshot(BaseModel):
    type: str
    value: int
    timeframe: Optional[int] = None


class RuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int = Field(serialization_alias="userId")
    from_tier: str = Field(serialization_alias="fromTier")
    to_tier: str = Field(serialization_alias="toTier")
    condition: ConditionSnapshot
    is_default: bool = Field(serialization_alias="isDefault")
    created_at: datetime = Field(serialization_alias="createdAt")


class ProgressionEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int = Field(serialization_alias="userId")
    rule_id: Optional[int] = Field(serialization_alias="ruleId")
    from_tier: str = Field(serialization_alias="fromTier")
    to_tier: str = Field(serialization_alias="toTier")
    condition: ConditionSnapshot
    was_penalty: bool = Field(serialization_alias="wasPenalty")
    triggered_at: datetime = Field(serialization_alias="triggeredAt")


class DecisionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: Optional[int] = Field(serialization_alias="eventId")
    from_tier: str = Field(serialization_alias="fromTier")
    to_tier: str = Field(serialization_alias="toTier")
    was_penalty: bool = Field(serialization_alias="wasPenalty")
    triggered_at: datetime = Field(serialization_alias="triggeredAt")


def dump_rules(rules) -> List[dict]:
    return [RuleResponse.model_validate(r).model_dump(mode="json", by_alias=True) for r in rules]


def dump_events(events) -> List[dict]:
    return [
        ProgressionEventResponse.model_validate(e).model_dump(mode="json", by_alias=True)
        for e in events
    ]


def dump_decisions(decisions) -> List[dict]:
    return [DecisionResponse.model_validate(d).model_dump(mode="json", by_alias=True) for d in decisions]
