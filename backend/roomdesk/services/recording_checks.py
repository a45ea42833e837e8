from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from roomdesk.core.config import Settings, get_settings
from roomdesk.core.exceptions import MalformedRecordError, ResourceNotFoundError
from roomdesk.models.event import Event
from roomdesk.models.notification import NotificationType
from roomdesk.models.profile import Profile
from roomdesk.models.recording_check import RecordingCheck
from roomdesk.schemas.common import minutes_to_time, parse_time_to_minutes
from roomdesk.services.notifications import notify_users
from roomdesk.services.ownership import owner_at
from roomdesk.services.schedule_store import cached_blocks, event_slot, persistence_error

logger = logging.getLogger(__name__)


class CheckStatus(str, Enum):
    upcoming = "upcoming"
    current = "current"
    overdue = "overdue"
    completed = "completed"


def has_recording_resource(resources: Iterable[dict] | None, keywords: Iterable[str]) -> bool:
    needles = [item.lower() for item in keywords if item]
    for resource in resources or ():
        if not isinstance(resource, dict):
            continue
        name = str(resource.get("itemName") or "").lower()
        if any(needle in name for needle in needles):
            return True
    return False


def check_minutes(start: int, end: int, interval: int) -> list[int]:
    """Check instants from the event start, every ``interval`` minutes, before the end."""
    if interval < 1:
        raise ValueError("interval must be at least 1 minute")
    return list(range(start, end, interval))


def check_status(check: RecordingCheck, at_minute: int, interval: int) -> CheckStatus:
    if check.completed_at is not None:
        return CheckStatus.completed
    due = parse_time_to_minutes(check.check_time)
    if at_minute < due:
        return CheckStatus.upcoming
    if at_minute < due + interval:
        return CheckStatus.current
    return CheckStatus.overdue


def _events_needing_checks(db: Session, check_date: date, settings: Settings) -> list[Event]:
    events = db.execute(
        select(Event).where(Event.date == check_date).order_by(Event.start_time.asc(), Event.id.asc())
    ).scalars()
    return [
        event
        for event in events
        if event.start_time
        and event.end_time
        and has_recording_resource(event.resources, settings.recording_resource_keywords)
    ]


def plan_checks(db: Session, check_date: date, *, settings: Settings | None = None) -> list[RecordingCheck]:
    """Create the date's missing checks and route unsent ones to the current owner."""
    settings = settings or get_settings()
    blocks = cached_blocks(db, check_date)
    planned: list[RecordingCheck] = []
    try:
        for event in _events_needing_checks(db, check_date, settings):
            try:
                slot = event_slot(event)
            except MalformedRecordError as exc:
                logger.warning("Skipping recording checks for event %s: %s", event.id, exc.message)
                continue
            existing = {
                check.check_number: check
                for check in db.execute(
                    select(RecordingCheck).where(RecordingCheck.event_id == event.id)
                ).scalars()
            }
            minutes = check_minutes(slot.start, slot.end, settings.recording_check_interval_minutes)
            for number, minute in enumerate(minutes, start=1):
                owner = owner_at(slot, blocks, minute, unowned_event_types=settings.unowned_event_types)
                check = existing.pop(number, None)
                if check is None:
                    check = RecordingCheck(
                        event_id=event.id,
                        date=check_date,
                        check_number=number,
                        check_time=minutes_to_time(minute),
                    )
                    db.add(check)
                if check.notified_at is None:
                    check.check_time = minutes_to_time(minute)
                    check.owner_id = owner
                planned.append(check)
            # Event got shorter.
            for stale in existing.values():
                if stale.notified_at is None and stale.completed_at is None:
                    db.delete(stale)
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "plan recording checks", exc) from exc
    return planned


def dispatch_due_checks(
    db: Session,
    check_date: date,
    at_time: str,
    *,
    settings: Settings | None = None,
) -> tuple[int, int]:
    """Notify owners of every due, unsent check. Returns (planned, notified)."""
    settings = settings or get_settings()
    planned = plan_checks(db, check_date, settings=settings)
    at_minute = parse_time_to_minutes(at_time)
    now = datetime.now(timezone.utc)
    events = {event.id: event for event in db.execute(select(Event).where(Event.date == check_date)).scalars()}

    notified = 0
    try:
        for check in planned:
            if check.notified_at is not None or check.completed_at is not None:
                continue
            if parse_time_to_minutes(check.check_time) > at_minute:
                continue
            if check.owner_id is None:
                logger.warning(
                    "Recording check %d for event %s at %s has no owner",
                    check.check_number,
                    check.event_id,
                    check.check_time,
                )
                continue
            event = events.get(check.event_id)
            sent = notify_users(
                db,
                user_ids=[check.owner_id],
                title="Recording check due",
                message=(
                    f"Check #{check.check_number} for {event.event_name if event else check.event_id}"
                    f" in {event.room_name if event else 'its room'} at {check.check_time}."
                ),
                notification_type=NotificationType.recording_check,
                event_id=check.event_id,
                data={"check_id": check.id, "check_number": check.check_number, "check_time": check.check_time},
            )
            check.notified_at = now
            notified += len(sent)
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "dispatch recording checks", exc) from exc
    logger.info("Dispatched %d recording check notification(s) for %s at %s", notified, check_date, at_time)
    return len(planned), notified


def complete_check(db: Session, check_id: str, *, actor: Profile) -> RecordingCheck:
    check = db.get(RecordingCheck, check_id)
    if check is None:
        raise ResourceNotFoundError("Recording check", check_id)
    if check.completed_at is not None:
        return check
    check.completed_at = datetime.now(timezone.utc)
    check.completed_by = actor.id
    try:
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "complete recording check", exc) from exc
    db.refresh(check)
    return check
