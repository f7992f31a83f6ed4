"""Persistence contracts for progression rules and the progression audit trail."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from habit_tks.domains.progression.models.progression_models import (
    ProgressionEvent,
    ProgressionRule,
)
from habit_tks.extensions import db


class ProgressionStore(ABC):
    @abstractmethod
    def replace_rules(self, user_id: int, rules: Iterable[dict]) -> List[ProgressionRule]:
        raise NotImplementedError

    @abstractmethod
    def add_rule(self, user_id: int, **fields) -> ProgressionRule:
        raise NotImplementedError

    @abstractmethod
    def list_rules(self, user_id: int) -> List[ProgressionRule]:
        raise NotImplementedError

    @abstractmethod
    def add_event(self, user_id: int, **fields) -> ProgressionEvent:
        raise NotImplementedError

    @abstractmethod
    def list_events(self, user_id: int) -> List[ProgressionEvent]:
        raise NotImplementedError

    @abstractmethod
    def latest_penalty_at(self, user_id: int) -> Optional[datetime]:
        raise NotImplementedError


class SqlProgressionStore(ProgressionStore):
    def __init__(self, session=None):
        self._session = session or db.session

    def replace_rules(self, user_id: int, rules: Iterable[dict]) -> List[ProgressionRule]:
        self._session.query(ProgressionRule).filter_by(user_id=user_id).delete(
            synchronize_session=False
        )
        created = [ProgressionRule(user_id=user_id, **fields) for fields in rules]
        self._session.add_all(created)
        self._session.commit()
        return created

    def add_rule(self, user_id: int, **fields) -> ProgressionRule:
        rule = ProgressionRule(user_id=user_id, **fields)
        self._session.add(rule)
        self._session.commit()
        return rule

    def list_rules(self, user_id: int) -> List[ProgressionRule]:
        return (
            self._session.query(ProgressionRule)
            .filter_by(user_id=user_id)
            .order_by(ProgressionRule.id)
            .all()
        )

    def add_event(self, user_id: int, **fields) -> ProgressionEvent:
        event = ProgressionEvent(user_id=user_id, **fields)
        self._session.add(event)
        self._session.commit()
        return event

    def list_events(self, user_id: int) -> List[ProgressionEvent]:
        return (
            self._session.query(ProgressionEvent)
            .filter_by(user_id=user_id)
            .order_by(ProgressionEvent.triggered_at, ProgressionEvent.id)
            .all()
        )

    def latest_penalty_at(self, user_id: int) -> Optional[datetime]:
        event = (
            self._session.query(ProgressionEvent)
            .filter_by(user_id=user_id, was_penalty=True)
            .order_by(ProgressionEvent.triggered_at.desc())
            .first()
        )
        return event.triggered_at if event else None


__all__ = ["ProgressionStore", "SqlProgressionStore"]
