"""Habit TKS application factory and bootstrap."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from flask import Flask

from habit_tks.config import config_by_name
from habit_tks.core.errors import HabitTksError
from habit_tks.extensions import init_extensions


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Habit TKS Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///"):
        db_path = Path(db_uri.replace("sqlite:///", "", 1))
        if not db_path.is_absolute():
            db_path = project_root / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"

    init_extensions(app)
    _register_services(app)
    _register_blueprints(app)
    _register_error_handlers(app)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    @app.get("/api/v1/ping")
    def ping():
        """Lightweight endpoint for load-balancer health checks."""
        return {"pong": True}, 200

    # Register CLI commands
    from habit_tks.scripts.seed_demo import register_commands

    register_commands(app)

    if app.config.get("NOTIFICATIONS_HEARTBEAT_ENABLED") and not app.testing:
        app.extensions["notification_heartbeat"].start()

    return app


def _register_services(app: Flask) -> None:
    """Build the service graph once per app and expose it on ``app.extensions``."""
    from habit_tks.domains.habits.repository import SqlHabitStore
    from habit_tks.domains.habits.services import HabitService
    from habit_tks.domains.progression.engine import ProgressionEngine
    from habit_tks.domains.progression.repository import SqlProgressionStore
    from habit_tks.domains.setup.services import SetupService
    from habit_tks.platform.notifications.heartbeat import HeartbeatWorker
    from habit_tks.platform.notifications.hub import NotificationHub

    hub = NotificationHub()
    habit_store = SqlHabitStore()
    engine = ProgressionEngine(
        SqlProgressionStore(),
        habit_store,
        skip_penalty_threshold=app.config["PROGRESSION_SKIP_PENALTY_THRESHOLD"],
        skip_window_days=app.config["PROGRESSION_SKIP_WINDOW_DAYS"],
    )
    habit_service = HabitService(habit_store, engine, hub)

    app.extensions["notification_hub"] = hub
    app.extensions["notification_heartbeat"] = HeartbeatWorker(
        hub, interval=app.config["NOTIFICATIONS_HEARTBEAT_SECONDS"]
    )
    app.extensions["progression_engine"] = engine
    app.extensions["habit_service"] = habit_service
    app.extensions["setup_service"] = SetupService(
        habit_service, engine, unlock_delay_days=app.config["TIER_UNLOCK_DELAY_DAYS"]
    )


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from habit_tks.core.users.controllers import user_api_bp
    from habit_tks.domains.analytics.controllers.analytics_api import analytics_api_bp
    from habit_tks.domains.habits.controllers.habit_api import habit_api_bp
    from habit_tks.domains.progression.controllers.progression_api import progression_api_bp
    from habit_tks.domains.setup.controllers.setup_api import setup_api_bp
    from habit_tks.platform.notifications.socket import notifications_bp

    app.register_blueprint(user_api_bp, url_prefix="/api/users")
    app.register_blueprint(habit_api_bp, url_prefix="/api/habits")
    app.register_blueprint(setup_api_bp, url_prefix="/api/setup")
    app.register_blueprint(progression_api_bp, url_prefix="/api/progression")
    app.register_blueprint(analytics_api_bp, url_prefix="/api/analytics")
    app.register_blueprint(notifications_bp)


def _register_error_handlers(app: Flask) -> None:
    """JSON error responses."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HabitTksError)
    def _service_error(exc: HabitTksError):
        return exc.to_dict(), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": "unexpected_error", "message": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500
