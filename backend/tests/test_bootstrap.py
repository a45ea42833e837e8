import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from roomdesk.db import bootstrap


def _memory_engine():
    return create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


def test_bootstrap_creates_missing_tables():
    engine = _memory_engine()

    bootstrap.ensure_runtime_schema_compatibility(engine)

    assert bootstrap.missing_schema_items(engine) == ([], {})


def test_bootstrap_adds_manual_owner_column_to_legacy_events():
    engine = _memory_engine()
    with engine.begin() as connection:
        connection.execute(
            text(
                "CREATE TABLE events (id INTEGER PRIMARY KEY, event_name VARCHAR(300), event_type VARCHAR(100), "
                "instructor_name VARCHAR(200), room_name VARCHAR(100), date DATE, start_time VARCHAR(8), "
                "end_time VARCHAR(8), resources JSON, created_at DATETIME, updated_at DATETIME)"
            )
        )

    bootstrap.ensure_runtime_schema_compatibility(engine)

    columns = {item["name"] for item in inspect(engine).get_columns("events")}
    assert "man_owner" in columns


def test_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility(_memory_engine())
