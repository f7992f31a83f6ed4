"""User and settings models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from habit_tks.extensions import db


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)


DEFAULT_SETTINGS = {
    "theme": "light",
    "notifications": True,
    "strict_mode": False,
    "auto_progression": True,
}


class User(db.Model, TimestampMixin):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    current_tier: Mapped[str] = mapped_column(db.String(16), nullable=False, default="baseline")
    streak: Mapped[int] = mapped_column(nullable=False, default=0)
    settings: Mapped[dict] = mapped_column(db.JSON, nullable=False, default=lambda: dict(DEFAULT_SETTINGS))
