"""Habits models with prefixed tables."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship

from habit_tks.extensions import db


class Habit(db.Model):
    __tablename__ = "habits_habit"
    __table_args__ = (
        db.Index("ix_habits_habit_user_tier", "user_id", "tier"),
        db.Index("ix_habits_habit_user_category", "user_id", "category"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text)
    category: Mapped[str] = mapped_column(db.String(32), nullable=False)
    tier: Mapped[str] = mapped_column(db.String(16), nullable=False)
    frequency: Mapped[str] = mapped_column(db.String(16), nullable=False, default="daily")
    reminder_time: Mapped[str | None] = mapped_column(db.String(5))
    notes: Mapped[str | None] = mapped_column(db.Text)
    priority: Mapped[str] = mapped_column(db.String(16), nullable=False, default="medium")
    streak_tracking: Mapped[bool] = mapped_column(default=True)
    skip_allowed: Mapped[bool] = mapped_column(default=True)
    start_date: Mapped[date] = mapped_column(default=date.today, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True)
    archived: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    completions: Mapped[list["HabitCompletion"]] = relationship(
        "HabitCompletion",
        back_populates="habit",
        cascade="all, delete-orphan",
    )
    skips: Mapped[list["HabitSkip"]] = relationship(
        "HabitSkip",
        back_populates="habit",
        cascade="all, delete-orphan",
    )


class HabitCompletion(db.Model):
    __tablename__ = "habits_completion"
    __table_args__ = (
        db.Index("ix_habits_completion_user_tier_at", "user_id", "tier", "completed_at"),
        db.Index("ix_habits_completion_habit_at", "habit_id", "completed_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    habit_id: Mapped[int] = mapped_column(
        db.ForeignKey("habits_habit.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), index=True, nullable=False)
    tier: Mapped[str] = mapped_column(db.String(16), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    notes: Mapped[str | None] = mapped_column(db.Text)
    duration: Mapped[int | None] = mapped_column(nullable=True)
    intensity: Mapped[str | None] = mapped_column(db.String(16))
    additional_data: Mapped[dict | None] = mapped_column(db.JSON)

    habit: Mapped[Habit] = relationship("Habit", back_populates="completions")


class HabitSkip(db.Model):
    __tablename__ = "habits_skip"
    __table_args__ = (
        db.Index("ix_habits_skip_user_at", "user_id", "skipped_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    habit_id: Mapped[int] = mapped_column(
        db.ForeignKey("habits_habit.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), index=True, nullable=False)
    tier: Mapped[str] = mapped_column(db.String(16), nullable=False)
    skipped_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    reason: Mapped[str] = mapped_column(db.Text, nullable=False)

    habit: Mapped[Habit] = relationship("Habit", back_populates="skips")
