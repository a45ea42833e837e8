from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from roomdesk.core.exceptions import InvalidInputError, ResourceNotFoundError
from roomdesk.models.profile import Profile, ProfileRole
from roomdesk.models.room_filter import RoomFilter
from roomdesk.services.room_catalog import expand_room_name
from roomdesk.services.schedule_store import persistence_error

logger = logging.getLogger(__name__)


def visible_filters(db: Session, profile: Profile) -> list[RoomFilter]:
    """The profile's own presets first, then the shared defaults."""
    rows = db.execute(
        select(RoomFilter)
        .where(or_(RoomFilter.owner_id == profile.id, RoomFilter.is_default.is_(True)))
        .order_by(RoomFilter.name.asc(), RoomFilter.id.asc())
    ).scalars()
    unique = {row.id: row for row in rows}
    return sorted(unique.values(), key=lambda row: row.owner_id != profile.id)


def active_filter(db: Session, profile: Profile) -> RoomFilter | None:
    if not profile.current_filter:
        return None
    for row in visible_filters(db, profile):
        if row.name == profile.current_filter:
            return row
    logger.warning("Profile %s has unknown current filter %r", profile.id, profile.current_filter)
    return None


def display_rooms_for(db: Session, profile: Profile) -> frozenset[str] | None:
    """Rooms the profile has chosen to see; ``None`` when no preset is loaded."""
    selected = active_filter(db, profile)
    return frozenset(selected.display_rooms) if selected is not None else None


def notify_rooms_for(db: Session, profile: Profile) -> frozenset[str] | None:
    """Rooms the profile gets event reminders for; ``None`` means every room."""
    selected = active_filter(db, profile)
    return frozenset(selected.notify_rooms) if selected is not None else None


def room_matches(room_name: str | None, rooms: frozenset[str] | None) -> bool:
    """Whether an event room falls inside a room set. Merged rooms match on any part."""
    if rooms is None:
        return True
    if not room_name:
        return False
    try:
        parts: Iterable[str] = expand_room_name(room_name)
    except InvalidInputError:
        parts = (room_name,)
    return any(part in rooms for part in parts)


def create_filter(
    db: Session,
    *,
    profile: Profile,
    name: str,
    display_rooms: list[str],
    notify_rooms: list[str],
    is_default: bool = False,
) -> RoomFilter:
    """Save a preset. A personal preset also becomes the profile's current filter."""
    owner_id = None if is_default else profile.id
    row = RoomFilter(
        name=name,
        display_rooms=display_rooms,
        notify_rooms=notify_rooms,
        owner_id=owner_id,
        is_default=is_default,
    )
    db.add(row)
    if not is_default:
        profile.current_filter = name
    try:
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "save room filter", exc) from exc
    db.refresh(row)
    return row


def load_filter(db: Session, *, profile: Profile, filter_id: int) -> RoomFilter:
    row = db.get(RoomFilter, filter_id)
    if row is None or (row.owner_id != profile.id and not row.is_default):
        raise ResourceNotFoundError("Room filter", str(filter_id))
    profile.current_filter = row.name
    try:
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "load room filter", exc) from exc
    db.refresh(row)
    return row


def delete_filter(db: Session, *, profile: Profile, filter_id: int) -> None:
    """Delete one of the profile's own presets; shared presets are admin-only."""
    row = db.get(RoomFilter, filter_id)
    if row is None:
        raise ResourceNotFoundError("Room filter", str(filter_id))
    if row.owner_id != profile.id and not (row.is_default and profile.role == ProfileRole.admin):
        raise ResourceNotFoundError("Room filter", str(filter_id))
    if profile.current_filter == row.name and row.owner_id == profile.id:
        profile.current_filter = None
    db.delete(row)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "delete room filter", exc) from exc
