import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from habit_tks import create_app
from habit_tks.core.events import event_models  # noqa: F401
from habit_tks.core.users.models import DEFAULT_SETTINGS, User
from habit_tks.core.users.services import ensure_demo_user
from habit_tks.domains.habits.repository import SqlHabitStore
from habit_tks.domains.progression.models import progression_models  # noqa: F401
from habit_tks.extensions import db
from habit_tks.platform.notifications.sink import Connection, NotificationSink



# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")
    config.addinivalue_line("markers", "slow: Slow running tests")


# ==================== Fakes ====================
class FakeConnection(Connection):
    """Records frames; can be told to fail on send or ping."""

    def __init__(self, fail_send=False, fail_ping=False):
        self.sent = []
        self.pings = 0
        self.closed = False
        self.fail_send = fail_send
        self.fail_ping = fail_ping

    def send(self, text):
        if self.fail_send:
            raise ConnectionError("socket gone")
        self.sent.append(json.loads(text))

    def ping(self):
        if self.fail_ping:
            raise ConnectionError("socket gone")
        self.pings += 1

    def close(self):
        self.closed = True

    def types(self):
        return [message["type"] for message in self.sent]


class RecordingSink(NotificationSink):
    def __init__(self):
        self.events = []

    def broadcast_to_user(self, user_id, event_type, payload):
        self.events.append((user_id, event_type, payload))
        return 1

    def types(self):
        return [event_type for _, event_type, _ in self.events]

    def of_type(self, event_type):
        return [payload for _, kind, payload in self.events if kind == event_type]


# ==================== Fixtures ====================
@pytest.fixture()
def app():
    """Per-test app backed by a fresh in-memory SQLite database."""
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    try:
        yield app
    finally:
        app.extensions["notification_hub"].shutdown()
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def demo_user(app):
    return ensure_demo_user()


@pytest.fixture()
def other_user(app):
    user = User(
        email="someone-else@example.com",
        name="Someone Else",
        current_tier="baseline",
        streak=0,
        settings=dict(DEFAULT_SETTINGS),
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def habit_store(app):
    return SqlHabitStore()


@pytest.fixture()
def make_habit(habit_store):
    """Factory for habits with sensible defaults."""

    def _make(user_id, **overrides):
        fields = {
            "name": "5 push-ups",
            "category": "fitness",
            "tier": "baseline",
            "frequency": "daily",
            "priority": "high",
            "streak_tracking": True,
            "skip_allowed": True,
            "is_active": True,
        }
        fields.update(overrides)
        return habit_store.add_habit(user_id, **fields)

    return _make


@pytest.fixture()
def sink():
    return RecordingSink()


@pytest.fixture()
def make_connection():
    def _make(**kwargs):
        return FakeConnection(**kwargs)

    return _make
