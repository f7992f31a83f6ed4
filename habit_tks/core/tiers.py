"""Habit tier ladder shared by users, habits and progression."""

from __future__ import annotations

from typing import Literal, Optional

Tier = Literal["baseline", "tier2", "tier3"]

BASELINE = "baseline"
TIER2 = "tier2"
TIER3 = "tier3"

TIERS: tuple[str, ...] = (BASELINE, TIER2, TIER3)

TIER_LABELS = {
    BASELINE: "Baseline",
    TIER2: "Tier 2",
    TIER3: "Tier 3",
}


def tier_index(tier: str) -> int:
    try:
        return TIERS.index(tier)
    except ValueError:
        raise ValueError(f"unknown tier: {tier}") from None


def next_tier(tier: str) -> Optional[str]:
    idx = tier_index(tier)
    return TIERS[idx + 1] if idx + 1 < len(TIERS) else None


def previous_tier(tier: str) -> Optional[str]:
    idx = tier_index(tier)
    return TIERS[idx - 1] if idx > 0 else None


def is_single_step_up(from_tier: str, to_tier: str) -> bool:
    return next_tier(from_tier) == to_tier
