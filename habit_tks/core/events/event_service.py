"""Analytics event persistence."""

from __future__ import annotations

import logging
from typing import List, Optional

from habit_tks.core.events.event_models import EventRecord
from habit_tks.extensions import db

logger = logging.getLogger(__name__)


def log_event(event_type: str, payload: dict, user_id: Optional[int] = None) -> EventRecord:
    """Persist an analytics event; a ``habit_id`` in the payload is indexed."""
    habit_id = payload.get("habit_id")
    record = EventRecord(
        event_type=event_type,
        payload=payload,
        user_id=user_id,
        habit_id=habit_id if isinstance(habit_id, int) else None,
    )
    db.session.add(record)
    db.session.commit()
    logger.debug("Recorded %s for user %s", event_type, user_id)
    return record


def list_events(
    user_id: int,
    event_type: Optional[str] = None,
    habit_id: Optional[int] = None,
    limit: int = 100,
) -> List[EventRecord]:
    """Newest first."""
    query = EventRecord.query.filter_by(user_id=user_id)
    if event_type:
        query = query.filter_by(event_type=event_type)
    if habit_id is not None:
        query = query.filter_by(habit_id=habit_id)
    return query.order_by(EventRecord.created_at.desc(), EventRecord.id.desc()).limit(limit).all()
