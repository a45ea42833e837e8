from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from typing import Iterable, Mapping, Sequence

from roomdesk.core.exceptions import InvalidInputError
from roomdesk.schemas.common import minutes_to_time
from roomdesk.services.room_catalog import base_room_name
from roomdesk.services.schedule_types import Block, EventSlot, TimelineEntry

logger = logging.getLogger(__name__)

DEFAULT_UNOWNED_EVENT_TYPES: frozenset[str] = frozenset({"KEC"})


@dataclass(frozen=True)
class OwnedSegment:
    owner_id: str | None
    start: int
    end: int


def _event_room(event: EventSlot) -> str | None:
    if not event.room_name:
        return None
    try:
        return base_room_name(event.room_name)
    except InvalidInputError:
        return event.room_name


def _claimant(block: Block, room: str) -> str | None:
    claimants = [item.staff_id for item in block.assignments if room in item.room_set]
    if len(claimants) > 1:
        logger.warning(
            "Room %s claimed by %s in block %s-%s on %s; using the last claim",
            room,
            claimants,
            block.start_time,
            block.end_time,
            block.date,
        )
    return claimants[-1] if claimants else None


def owned_segments(event: EventSlot, blocks: Iterable[Block]) -> list[OwnedSegment]:
    """Per-block owners of the event's room across the event's time span.

    Blocks keep the store's order for equal start times, so when two blocks
    share a time range the later one decides the owner for that range.
    """
    room = _event_room(event)
    if not event.is_schedulable or room is None:
        return []

    relevant = [
        block
        for block in blocks
        if block.date == event.date and block.start < event.end and block.end > event.start
    ]
    relevant.sort(key=lambda item: item.start)

    by_range: dict[tuple[int, int], str | None] = {}
    order: list[tuple[int, int]] = []
    for block in relevant:
        key = (block.start, block.end)
        owner = _claimant(block, room)
        if key in by_range:
            logger.warning(
                "Duplicate shift blocks %s-%s on %s; later block wins",
                block.start_time,
                block.end_time,
                block.date,
            )
            if owner is None:
                continue
        else:
            order.append(key)
        by_range[key] = owner
    return [OwnedSegment(owner_id=by_range[key], start=key[0], end=key[1]) for key in order]


def build_timeline(segments: Sequence[OwnedSegment]) -> list[TimelineEntry]:
    owned = [segment for segment in segments if segment.owner_id is not None]
    runs: list[OwnedSegment] = []
    for segment in owned:
        if runs and runs[-1].owner_id == segment.owner_id:
            runs[-1] = OwnedSegment(owner_id=segment.owner_id, start=runs[-1].start, end=segment.end)
        else:
            runs.append(segment)
    timeline: list[TimelineEntry] = []
    for index, run in enumerate(runs):
        transition = minutes_to_time(run.end) if index < len(runs) - 1 else None
        timeline.append(TimelineEntry(owner_id=run.owner_id, transition_time=transition))
    return timeline


def resolve_ownership(
    event: EventSlot,
    blocks: Iterable[Block],
    *,
    unowned_event_types: Iterable[str] = DEFAULT_UNOWNED_EVENT_TYPES,
) -> list[TimelineEntry]:
    """Who owns the event, and when it changes hands.

    A manual owner replaces the whole timeline. Otherwise each overlapping
    block's assignee for the event's room owns that stretch; stretches with
    nobody assigned are left out.
    """
    if event.event_type and event.event_type in set(unowned_event_types):
        return []
    if event.man_owner:
        return [TimelineEntry(owner_id=event.man_owner, transition_time=None)]
    return build_timeline(owned_segments(event, blocks))


def owner_ids(timeline: Sequence[TimelineEntry]) -> list[str]:
    return list(dict.fromkeys(entry.owner_id for entry in timeline))


def hand_off_time(timeline: Sequence[TimelineEntry]) -> str | None:
    for entry in timeline:
        if entry.transition_time is not None:
            return entry.transition_time
    return None


def owner_at(
    event: EventSlot,
    blocks: Iterable[Block],
    minute: int,
    *,
    unowned_event_types: Iterable[str] = DEFAULT_UNOWNED_EVENT_TYPES,
) -> str | None:
    if event.event_type and event.event_type in set(unowned_event_types):
        return None
    if event.man_owner:
        return event.man_owner
    for segment in owned_segments(event, blocks):
        if segment.start <= minute < segment.end:
            return segment.owner_id
    return None


def is_user_event_owner(
    event: EventSlot,
    user_id: str,
    blocks: Iterable[Block],
    *,
    unowned_event_types: Iterable[str] = DEFAULT_UNOWNED_EVENT_TYPES,
) -> bool:
    timeline = resolve_ownership(event, blocks, unowned_event_types=unowned_event_types)
    return user_id in owner_ids(timeline)


def filter_my_events(
    events: Iterable[EventSlot],
    user_id: str,
    blocks_by_date: Mapping[date, Sequence[Block]],
    *,
    unowned_event_types: Iterable[str] = DEFAULT_UNOWNED_EVENT_TYPES,
) -> list[EventSlot]:
    unowned = frozenset(unowned_event_types)
    return [
        event
        for event in events
        if is_user_event_owner(event, user_id, blocks_by_date.get(event.date, ()), unowned_event_types=unowned)
    ]
