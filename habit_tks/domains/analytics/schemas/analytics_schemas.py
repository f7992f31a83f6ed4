"""Typed schemas for client-reported analytics events."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class TrackEventRequest(BaseModel):
    event: str = Field(min_length=1, max_length=128)
    data: Dict[str, Any] = Field(default_factory=dict)
