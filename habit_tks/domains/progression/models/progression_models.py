"""Progression rule and audit trail models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from habit_tks.extensions import db

CONDITION_CONSECUTIVE_DAYS = "consecutiveDays"
CONDITION_WEEKLY_FREQUENCY = "weeklyFrequency"
CONDITION_MANUAL = "manual"
# Recorded on penalty events only; rules cannot use it.
CONDITION_SKIP_PENALTY = "skipPenalty"

CONDITION_TYPES = (
    CONDITION_CONSECUTIVE_DAYS,
    CONDITION_WEEKLY_FREQUENCY,
    CONDITION_MANUAL,
)


class ProgressionRule(db.Model):
    __tablename__ = "progression_rule"
    __table_args__ = (
        db.Index("ix_progression_rule_user_from_tier", "user_id", "from_tier"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), index=True, nullable=False)
    from_tier: Mapped[str] = mapped_column(db.String(16), nullable=False)
    to_tier: Mapped[str] = mapped_column(db.String(16), nullable=False)
    condition_type: Mapped[str] = mapped_column(db.String(32), nullable=False)
    condition_value: Mapped[int] = mapped_column(nullable=False)
    timeframe_days: Mapped[int | None] = mapped_column(nullable=True)
    is_default: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    @property
    def condition(self) -> dict:
        return {
            "type": self.condition_type,
            "value": self.condition_value,
            "timeframe": self.timeframe_days,
        }


class ProgressionEvent(db.Model):
    __tablename__ = "progression_event"
    __table_args__ = (
        db.Index("ix_progression_event_user_triggered_at", "user_id", "triggered_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), index=True, nullable=False)
    rule_id: Mapped[int | None] = mapped_column(
        db.ForeignKey("progression_rule.id", ondelete="SET NULL"), nullable=True
    )
    from_tier: Mapped[str] = mapped_column(db.String(16), nullable=False)
    to_tier: Mapped[str] = mapped_column(db.String(16), nullable=False)
    condition_type: Mapped[str] = mapped_column(db.String(32), nullable=False)
    condition_value: Mapped[int] = mapped_column(nullable=False)
    timeframe_days: Mapped[int | None] = mapped_column(nullable=True)
    was_penalty: Mapped[bool] = mapped_column(default=False)
    triggered_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)

    @property
    def condition(self) -> dict:
        return {
            "type": self.condition_type,
            "value": self.condition_value,
            "timeframe": self.timeframe_days,
        }
