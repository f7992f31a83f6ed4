"""Analytics audit trail."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Mapped, mapped_column

from habit_tks.extensions import db


class EventRecord(db.Model):
    """One analytics event. ``habit_id`` is denormalised from the payload and
    survives habit deletion, so it carries no foreign key."""

    __tablename__ = "event_record"
    __table_args__ = (
        db.Index("ix_event_record_user_created_at", "user_id", "created_at"),
        db.Index("ix_event_record_habit_event_type", "habit_id", "event_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(db.String(128), index=True, nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(db.ForeignKey("user.id"), index=True)
    habit_id: Mapped[Optional[int]] = mapped_column(index=True)
    payload: Mapped[dict] = mapped_column(db.JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
