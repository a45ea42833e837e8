from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

import roomdesk.models  # noqa: F401
from roomdesk.db.base import Base
from roomdesk.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "rooms": {"id", "name"},
    "profiles": {"id", "name", "role"},
    "shifts": {"id", "profile_id", "date", "start_time", "end_time"},
    "shift_blocks": {"id", "date", "start_time", "end_time", "assignments"},
    "events": {"id", "room_name", "date", "start_time", "end_time", "man_owner"},
    "schedule_revisions": {"date", "revision"},
    "faculty": {"id", "calendar_name"},
    "room_filters": {"id", "name", "display_rooms", "notify_rooms", "owner_id", "is_default"},
}


def _ensure_events_man_owner_column(bind: Engine) -> None:
    # Event rows are synced from the campus calendar feed, which predates manual owners.
    with bind.begin() as connection:
        inspector = inspect(connection)
        if "events" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("events")}
        if "man_owner" in column_names:
            return
        connection.execute(text("ALTER TABLE events ADD COLUMN man_owner VARCHAR(36)"))


def missing_schema_items(bind: Engine) -> tuple[list[str], dict[str, list[str]]]:
    with bind.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables: list[str] = []
        missing_columns: dict[str, list[str]] = {}
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                missing_tables.append(table_name)
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                missing_columns[table_name] = missing
    return sorted(missing_tables), missing_columns


def ensure_runtime_schema_compatibility(bind: Engine | None = None) -> None:
    bind = bind or engine
    try:
        Base.metadata.create_all(bind=bind)
        _ensure_events_man_owner_column(bind)
        missing_tables, missing_columns = missing_schema_items(bind)
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
        if missing_columns:
            flat = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
            raise RuntimeError(f"Missing required columns: {', '.join(flat)}")
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
