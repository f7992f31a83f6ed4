"""User service layer."""

from __future__ import annotations

import logging
from typing import List, Optional

from flask import current_app

from habit_tks.core.errors import NotFoundError, RequestValidationError
from habit_tks.core.tiers import TIERS
from habit_tks.core.users.models import DEFAULT_SETTINGS, User
from habit_tks.core.users.schemas import UserCreateRequest, UserSettingsUpdate
from habit_tks.domains.habits.models.habit_models import Habit, HabitCompletion, HabitSkip
from habit_tks.extensions import db

logger = logging.getLogger(__name__)


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def require_user(user_id: int) -> User:
    user = get_user(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def list_users() -> List[User]:
    return User.query.order_by(User.id).all()


def create_user(payload: UserCreateRequest) -> User:
    if User.query.filter_by(email=payload.email).first():
        raise RequestValidationError("Email already registered")
    user = User(
        email=payload.email,
        name=payload.name.strip(),
        current_tier="baseline",
        streak=0,
        settings=dict(DEFAULT_SETTINGS),
    )
    db.session.add(user)
    db.session.commit()
    logger.info("Created user %s (%s)", user.id, user.email)
    return user


def ensure_demo_user() -> User:
    """Return the fixed demo user, creating it on first use."""
    email = current_app.config["DEMO_USER_EMAIL"]
    user = User.query.filter_by(email=email).first()
    if user:
        return user
    user = User(
        email=email,
        name=current_app.config["DEMO_USER_NAME"],
        current_tier="baseline",
        streak=0,
        settings=dict(DEFAULT_SETTINGS),
    )
    db.session.add(user)
    db.session.commit()
    logger.info("Created demo user %s", user.id)
    return user


def current_user_id() -> int:
    return ensure_demo_user().id


def update_tier(user_id: int, tier: str) -> User:
    if tier not in TIERS:
        raise RequestValidationError(f"Unknown tier: {tier}")
    user = require_user(user_id)
    user.current_tier = tier
    db.session.commit()
    return user


def update_settings(user_id: int, payload: UserSettingsUpdate) -> User:
    user = require_user(user_id)
    merged = dict(DEFAULT_SETTINGS)
    merged.update(user.settings or {})
    merged.update(payload.model_dump(exclude_none=True))
    # Reassign so the JSON column is flagged dirty.
    user.settings = merged
    db.session.commit()
    return user


def get_user_stats(user_id: int) -> dict:
    user = require_user(user_id)
    total_habits = Habit.query.filter_by(user_id=user_id).count()
    completions = HabitCompletion.query.filter_by(user_id=user_id).count()
    skips = HabitSkip.query.filter_by(user_id=user_id).count()
    attempts = completions + skips
    rate = round(completions / attempts * 100, 1) if attempts else 0.0
    return {
        "current_tier": user.current_tier,
        "streak": user.streak,
        "total_habits": total_habits,
        "completion_rate": rate,
    }
