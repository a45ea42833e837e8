from datetime import date
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from roomdesk.api.deps import get_current_profile, get_db, require_scheduler
from roomdesk.core.config import get_settings
from roomdesk.core.exceptions import MalformedRecordError
from roomdesk.models.event import Event
from roomdesk.models.faculty import Faculty
from roomdesk.models.profile import Profile
from roomdesk.schemas.event import (
    EventOut,
    EventOwnershipOut,
    EventReminderDispatch,
    EventReminderDispatchOut,
    ManualOwnerUpdate,
    TimelineEntryOut,
)
from roomdesk.schemas.faculty import FacultyOut
from roomdesk.services.audit import log_activity
from roomdesk.services.event_reminders import dispatch_event_reminders
from roomdesk.services.notifications import notify_event_assignment
from roomdesk.services.ownership import filter_my_events, hand_off_time, owner_ids, resolve_ownership
from roomdesk.services.room_filters import display_rooms_for, room_matches
from roomdesk.services.schedule_store import cached_blocks, event_slot

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.get("", response_model=list[EventOut])
def list_events(
    date: date,
    mine: bool = False,
    filtered: bool = False,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[EventOut]:
    events = list(
        db.execute(
            select(Event).where(Event.date == date).order_by(Event.start_time.asc(), Event.id.asc())
        ).scalars()
    )
    if filtered:
        rooms = display_rooms_for(db, current)
        events = [event for event in events if room_matches(event.room_name, rooms)]
    if not mine:
        return events

    slots = []
    for event in events:
        try:
            slots.append(event_slot(event))
        except MalformedRecordError as exc:
            logger.warning("Leaving event %s out of My Events: %s", event.id, exc.message)
    owned = filter_my_events(
        slots,
        current.id,
        {date: cached_blocks(db, date)},
        unowned_event_types=get_settings().unowned_event_types,
    )
    owned_ids = {slot.id for slot in owned}
    return [event for event in events if event.id in owned_ids]


@router.get("/{event_id}/ownership", response_model=EventOwnershipOut)
def read_event_ownership(
    event_id: int,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> EventOwnershipOut:
    event = _get_event(db, event_id)
    slot = event_slot(event)
    blocks = cached_blocks(db, event.date) if event.date else ()
    timeline = resolve_ownership(slot, blocks, unowned_event_types=get_settings().unowned_event_types)
    return EventOwnershipOut(
        event_id=event.id,
        owners=owner_ids(timeline),
        timeline=[
            TimelineEntryOut(owner_id=entry.owner_id, transition_time=entry.transition_time) for entry in timeline
        ],
        hand_off_time=hand_off_time(timeline),
        is_manual=bool(event.man_owner) and bool(timeline),
    )


@router.put("/{event_id}/owner", response_model=EventOut)
def set_manual_owner(
    event_id: int,
    payload: ManualOwnerUpdate,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> EventOut:
    event = _get_event(db, event_id)
    owner = db.get(Profile, payload.profile_id)
    if owner is None or not owner.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    previous = event.man_owner
    event.man_owner = owner.id
    log_activity(
        db,
        actor=current,
        action="event.owner.set",
        entity_type="event",
        entity_id=event.id,
        details={"previous": previous, "owner": owner.id},
    )
    if previous != owner.id:
        notify_event_assignment(db, event=event, owner_id=owner.id, assigned_by=current)
    db.commit()
    db.refresh(event)
    return event


@router.delete("/{event_id}/owner", response_model=EventOut)
def clear_manual_owner(
    event_id: int,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> EventOut:
    event = _get_event(db, event_id)
    previous = event.man_owner
    event.man_owner = None
    if previous is not None:
        log_activity(
            db,
            actor=current,
            action="event.owner.clear",
            entity_type="event",
            entity_id=event.id,
            details={"previous": previous},
        )
    db.commit()
    db.refresh(event)
    return event


@router.post("/reminders/dispatch", response_model=EventReminderDispatchOut)
def dispatch_reminders(
    payload: EventReminderDispatch,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> EventReminderDispatchOut:
    log_activity(
        db,
        actor=current,
        action="event.reminders.dispatch",
        entity_type="event",
        details={"date": payload.date.isoformat(), "at_time": payload.at_time},
    )
    notified = dispatch_event_reminders(db, payload.date, payload.at_time)
    return EventReminderDispatchOut(notified=notified)


@router.get("/{event_id}/faculty", response_model=FacultyOut)
def read_event_faculty(
    event_id: int,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> FacultyOut:
    event = _get_event(db, event_id)
    name = " ".join((event.instructor_name or "").split())
    faculty = None
    if name:
        faculty = db.execute(select(Faculty).where(Faculty.calendar_name == name)).scalar_one_or_none()
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No faculty record for this event")
    return faculty
