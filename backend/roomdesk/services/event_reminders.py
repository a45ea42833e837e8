from __future__ import annotations

from datetime import date
import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from roomdesk.core.config import Settings, get_settings
from roomdesk.core.exceptions import MalformedRecordError
from roomdesk.models.event import Event
from roomdesk.models.notification import Notification, NotificationType
from roomdesk.models.profile import Profile
from roomdesk.schemas.common import parse_time_to_minutes
from roomdesk.services.notifications import create_notification
from roomdesk.services.room_filters import notify_rooms_for, room_matches
from roomdesk.services.schedule_store import event_slot, persistence_error

logger = logging.getLogger(__name__)


def needs_reminder(resources: Iterable[dict] | None, resource_names: Iterable[str]) -> bool:
    wanted = set(resource_names)
    return any(
        isinstance(resource, dict) and resource.get("itemName") in wanted for resource in resources or ()
    )


def _already_reminded(db: Session, event_ids: list[int]) -> set[tuple[str, int]]:
    if not event_ids:
        return set()
    rows = db.execute(
        select(Notification.user_id, Notification.event_id).where(
            Notification.notification_type == NotificationType.event_reminder,
            Notification.event_id.in_(event_ids),
        )
    ).all()
    return {(user_id, event_id) for user_id, event_id in rows}


def due_events(db: Session, event_date: date, at_minute: int, settings: Settings) -> list[Event]:
    """Events on the date that need AV help and start within the reminder lead time."""
    horizon = at_minute + settings.event_reminder_lead_minutes
    due: list[Event] = []
    for event in db.execute(
        select(Event).where(Event.date == event_date).order_by(Event.start_time.asc(), Event.id.asc())
    ).scalars():
        if not needs_reminder(event.resources, settings.event_reminder_resource_names):
            continue
        try:
            slot = event_slot(event)
        except MalformedRecordError as exc:
            logger.warning("Skipping reminder for event %s: %s", event.id, exc.message)
            continue
        if slot.start is None:
            continue
        if at_minute <= slot.start <= horizon:
            due.append(event)
    return due


def dispatch_event_reminders(
    db: Session,
    event_date: date,
    at_time: str,
    *,
    settings: Settings | None = None,
) -> int:
    """Remind every active profile whose notify rooms cover an upcoming event. Sent at most once."""
    settings = settings or get_settings()
    events = due_events(db, event_date, parse_time_to_minutes(at_time), settings)
    profiles = list(db.execute(select(Profile).where(Profile.is_active.is_(True)).order_by(Profile.id.asc())).scalars())
    rooms_by_profile = {profile.id: notify_rooms_for(db, profile) for profile in profiles}
    sent = _already_reminded(db, [event.id for event in events])

    created = 0
    try:
        for event in events:
            for profile in profiles:
                if (profile.id, event.id) in sent:
                    continue
                if not room_matches(event.room_name, rooms_by_profile[profile.id]):
                    continue
                create_notification(
                    db,
                    user_id=profile.id,
                    title="Event starting soon",
                    message=f"{event.event_name or 'An event'} in {event.room_name} starts at {event.start_time}.",
                    notification_type=NotificationType.event_reminder,
                    event_id=event.id,
                    data={"room_name": event.room_name, "start_time": event.start_time},
                )
                created += 1
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "send event reminders", exc) from exc
    logger.info("Sent %d event reminder(s) for %s at %s", created, event_date, at_time)
    return created
