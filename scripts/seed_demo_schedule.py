"""Seed the Grainger Hall room catalog, demo staff, faculty, shared room filters and one day of shifts.

Run:
  PYTHONPATH=backend python scripts/seed_demo_schedule.py [YYYY-MM-DD]
"""

from __future__ import annotations

from datetime import date
import logging
import os
import sys

from sqlalchemy import select

from roomdesk.db.bootstrap import ensure_runtime_schema_compatibility
from roomdesk.db.session import SessionLocal
from roomdesk.models.event import Event
from roomdesk.models.faculty import Faculty
from roomdesk.models.profile import Profile, ProfileRole
from roomdesk.models.room import Room
from roomdesk.models.room_filter import RoomFilter
from roomdesk.services.schedule_store import upsert_shift

logger = logging.getLogger("seed_demo_schedule")

GH_ROOMS = [
    "GH L129",
    "GH L110",
    "GH L120",
    "GH L130",
    "GH L070",
    "GH 1110",
    "GH 1120",
    "GH 1130",
    "GH 1420",
    "GH 1430",
    "GH 2110",
    "GH 2120",
    "GH 2130",
    "GH 2410A",
    "GH 2410B",
    "GH 2420A",
    "GH 2420B",
    "GH 2430A",
    "GH 2430B",
    "GH 4101",
    "GH 4301",
    "GH 4302",
    "GH 5101",
    "GH 5201",
    "GH 5301",
]

# (id, name, role, shift start, shift end)
DEMO_STAFF = [
    ("demo-admin", "Demo Admin", ProfileRole.admin, None, None),
    ("demo-alice", "Alice Demo", ProfileRole.staff, "09:00", "12:00"),
    ("demo-bob", "Bob Demo", ProfileRole.staff, "11:00", "14:00"),
]

DEMO_EVENTS = [
    (
        "Intro to Circuits",
        "Lecture",
        "GH 1420&30",
        "10:30",
        "11:30",
        [{"itemName": "Panopto Recording"}, {"itemName": "KSM-KGH-AV-Staff Assistance"}],
        "Ohm, Georg",
    ),
    ("Thermo Review", "Lecture", "GH 2410A", "12:00", "13:00", [], None),
    ("Kaleidoscope Session", "KEC", "GH L110", "09:00", "10:00", [], None),
]

DEMO_FACULTY = [("Ohm, Georg", "Georg Ohm", "Professor of Electrical Engineering")]

DEMO_FILTERS = [
    ("Lower Level", ["GH L110", "GH L120", "GH L129", "GH L130", "GH L070"]),
    ("Large Halls", ["GH 1420", "GH 1430", "GH 2410A", "GH 2410B"]),
]


def _seed_rooms() -> int:
    with SessionLocal() as session:
        existing = set(session.execute(select(Room.name)).scalars())
        missing = [name for name in GH_ROOMS if name not in existing]
        session.add_all(Room(name=name) for name in missing)
        session.commit()
    return len(missing)


def _seed_profiles() -> None:
    with SessionLocal() as session:
        for profile_id, name, role, _, _ in DEMO_STAFF:
            if session.get(Profile, profile_id) is None:
                session.add(Profile(id=profile_id, name=name, role=role))
        session.commit()


def _seed_directory() -> None:
    with SessionLocal() as session:
        known = set(session.execute(select(Faculty.calendar_name)).scalars())
        for calendar_name, directory_name, title in DEMO_FACULTY:
            if calendar_name not in known:
                session.add(Faculty(calendar_name=calendar_name, directory_name=directory_name, directory_title=title))
        shared = set(session.execute(select(RoomFilter.name).where(RoomFilter.owner_id.is_(None))).scalars())
        for name, rooms in DEMO_FILTERS:
            if name not in shared:
                session.add(RoomFilter(name=name, display_rooms=rooms, notify_rooms=rooms, is_default=True))
        session.commit()


def _seed_day(day: date) -> None:
    with SessionLocal() as session:
        for profile_id, _, _, start, end in DEMO_STAFF:
            if start is None:
                continue
            upsert_shift(session, profile_id=profile_id, shift_date=day, start_time=start, end_time=end)

        existing = set(session.execute(select(Event.event_name).where(Event.date == day)).scalars())
        for name, event_type, room, start, end, resources, instructor in DEMO_EVENTS:
            if name in existing:
                continue
            session.add(
                Event(
                    event_name=name,
                    event_type=event_type,
                    instructor_name=instructor,
                    room_name=room,
                    date=day,
                    start_time=start,
                    end_time=end,
                    resources=resources,
                )
            )
        session.commit()


def main() -> None:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    day = date.fromisoformat(sys.argv[1]) if len(sys.argv) > 1 else date.today()
    ensure_runtime_schema_compatibility()
    added = _seed_rooms()
    _seed_profiles()
    _seed_directory()
    _seed_day(day)
    logger.info("Seeded %d room(s), %d profile(s) and the schedule for %s", added, len(DEMO_STAFF), day)


if __name__ == "__main__":
    main()
