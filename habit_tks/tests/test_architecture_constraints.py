"""Architecture and data-contract invariants."""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Iterable, Set, Tuple

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from habit_tks.domains.habits import events

pytestmark = pytest.mark.unit

REPO_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_ROOT = REPO_ROOT / "habit_tks"
MIGRATIONS_ROOT = PACKAGE_ROOT / "migrations"
BANNED_MIGRATION_OPS = {
    "drop_table",
    "drop_column",
    "drop_index",
    "drop_constraint",
    "alter_column",
    "batch_alter_table",
    "execute",
    "rename_table",
    "rename_column",
}
# Call sites that forward a validated event name instead of a catalog constant.
EVENT_NAME_ALLOWLIST = {
    ("event_type", "habit_tks/domains/analytics/services/__init__.py"),
}
EXPECTED_TABLES = {
    "user",
    "event_record",
    "habits_habit",
    "habits_completion",
    "habits_skip",
    "progression_rule",
    "progression_event",
}


def _source_files() -> Iterable[Path]:
    for path in PACKAGE_ROOT.rglob("*.py"):
        if "tests" in path.parts or "migrations" in path.parts:
            continue
        yield path


def _recorded_event_names() -> Set[Tuple[str, str, int]]:
    """Return (constant, path, lineno) for event names passed to the event log."""
    recorded: Set[Tuple[str, str, int]] = set()
    for path in _source_files():
        tree = ast.parse(path.read_text())
        for node in ast.walk(tree):
            if not isinstance(node, ast.Call) or not node.args:
                continue
            func = node.func
            name = func.id if isinstance(func, ast.Name) else getattr(func, "attr", None)
            if name not in {"log_event", "_record_event"}:
                continue
            if isinstance(node.args[0], ast.Name):
                recorded.add((node.args[0].id, str(path.relative_to(REPO_ROOT)), node.lineno))
    return recorded


def test_recorded_events_are_catalogued():
    recorded = _recorded_event_names()
    assert recorded, "expected the habit service to record events"
    missing = {
        (constant, where, lineno)
        for constant, where, lineno in recorded
        if (constant, where) not in EVENT_NAME_ALLOWLIST
        and getattr(events, constant, None) not in events.EVENT_CATALOG
    }
    assert missing == set()


def test_catalog_entries_are_versioned():
    for event_type, entry in events.EVENT_CATALOG.items():
        assert event_type.count(".") == 2
        assert entry["version"] == "v1"
        assert isinstance(entry["payload"], dict)


def _modules_importing(paths: Iterable[Path], needle: str) -> Set[str]:
    violating: Set[str] = set()
    for path in paths:
        tree = ast.parse(path.read_text())
        for node in ast.walk(tree):
            modules = []
            if isinstance(node, ast.ImportFrom) and node.module:
                modules.append(node.module)
            elif isinstance(node, ast.Import):
                modules.extend(alias.name for alias in node.names)
            if any(needle in module for module in modules):
                violating.add(str(path.relative_to(REPO_ROOT)))
                break
    return violating


def test_services_do_not_depend_on_controllers():
    services = [p for p in _source_files() if "services" in p.parts or p.name == "services.py"]
    assert _modules_importing(services, ".controllers") == set()


def test_controllers_do_not_touch_the_session():
    controllers = [p for p in _source_files() if "controllers" in p.parts or p.name == "controllers.py"]
    assert _modules_importing(controllers, "habit_tks.extensions") == set()


def test_progression_engine_is_framework_free():
    engine = PACKAGE_ROOT / "domains" / "progression" / "engine.py"
    assert _modules_importing([engine], "flask") == set()


def _destructive_ops_in_upgrade(path: Path, banned_ops: Iterable[str]) -> Set[str]:
    tree = ast.parse(path.read_text())
    banned_hits: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.FunctionDef) and node.name == "upgrade":
            for inner in ast.walk(node):
                if isinstance(inner, ast.Call):
                    func = inner.func
                    if (
                        isinstance(func, ast.Attribute)
                        and isinstance(func.value, ast.Name)
                        and func.value.id == "op"
                        and func.attr in banned_ops
                    ):
                        banned_hits.add(func.attr)
    return banned_hits


def test_migrations_are_additive_by_default():
    violations: dict[str, Set[str]] = {}
    for path in (MIGRATIONS_ROOT / "versions").glob("*.py"):
        destructive = _destructive_ops_in_upgrade(path, BANNED_MIGRATION_OPS)
        if destructive:
            violations[str(path.relative_to(REPO_ROOT))] = destructive
    assert violations == {}


@pytest.mark.slow
def test_migrations_upgrade_and_downgrade(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrate.db'}"
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_ROOT))
    cfg.set_main_option("sqlalchemy.url", url)

    command.upgrade(cfg, "head")
    engine = create_engine(url)
    try:
        assert EXPECTED_TABLES <= set(inspect(engine).get_table_names())

        command.downgrade(cfg, "base")
        assert EXPECTED_TABLES.isdisjoint(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_client_events_are_catalogued():
    assert events.CLIENT_EVENTS
    assert events.CLIENT_EVENTS <= set(events.EVENT_CATALOG)
