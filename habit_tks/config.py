"""Application configuration for Habit TKS."""

from __future__ import annotations

import os
from typing import Dict, Type

from dotenv import load_dotenv
from sqlalchemy.engine.url import make_url

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _engine_options_from_uri(uri: str) -> dict:
    url = make_url(uri)
    if url.get_backend_name() == "sqlite":
        return {
            "pool_pre_ping": True,
            "connect_args": {"timeout": 30},
        }
    if url.get_backend_name() in {"postgresql", "postgres"}:
        timeout = int(os.environ.get("DB_CONNECT_TIMEOUT_SECONDS", "10"))
        return {"pool_pre_ping": True, "connect_args": {"connect_timeout": timeout}}
    return {"pool_pre_ping": True}


class BaseConfig:
    """Base configuration loaded for all environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///instance/habit_tks.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(1024 * 1024)))

    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT", "600/hour")
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL", "memory://")
    RATELIMIT_ENABLED = _env_flag("RATELIMIT_ENABLED", "true")

    # There is no login: every request acts as this user.
    DEMO_USER_EMAIL = os.environ.get("DEMO_USER_EMAIL", "demo@habit-tks.com")
    DEMO_USER_NAME = os.environ.get("DEMO_USER_NAME", "Demo User")

    NOTIFICATIONS_HEARTBEAT_SECONDS = float(os.environ.get("NOTIFICATIONS_HEARTBEAT_SECONDS", "30"))
    NOTIFICATIONS_HEARTBEAT_ENABLED = _env_flag("NOTIFICATIONS_HEARTBEAT_ENABLED", "true")

    PROGRESSION_SKIP_PENALTY_THRESHOLD = int(os.environ.get("PROGRESSION_SKIP_PENALTY_THRESHOLD", "3"))
    PROGRESSION_SKIP_WINDOW_DAYS = int(os.environ.get("PROGRESSION_SKIP_WINDOW_DAYS", "7"))
    TIER_UNLOCK_DELAY_DAYS = int(os.environ.get("TIER_UNLOCK_DELAY_DAYS", "7"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ENV = "development"


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)
    RATELIMIT_ENABLED = False
    NOTIFICATIONS_HEARTBEAT_ENABLED = False


class ProductionConfig(BaseConfig):
    ENV = "production"


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    # CI pipelines set APP_ENV=ci; map to testing defaults.
    "ci": TestingConfig,
}
