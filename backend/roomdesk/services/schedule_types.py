from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable

from roomdesk.core.exceptions import InvalidInputError
from roomdesk.schemas.common import minutes_to_time, parse_time_to_minutes


def to_minutes(value: str, *, field_name: str = "time") -> int:
    try:
        return parse_time_to_minutes(value)
    except ValueError as exc:
        raise InvalidInputError(
            f"Invalid {field_name} {value!r}: {exc}",
            details={"field": field_name, "value": value},
        ) from exc


def _dedupe(rooms: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(room for room in rooms if room))


@dataclass(frozen=True)
class StaffShift:
    staff_id: str
    date: date
    start: int
    end: int

    @classmethod
    def from_times(cls, staff_id: str, shift_date: date, start_time: str, end_time: str) -> "StaffShift":
        start = to_minutes(start_time, field_name="start_time")
        end = to_minutes(end_time, field_name="end_time")
        if end <= start:
            raise InvalidInputError(
                "Shift end time must be after start time",
                details={"staff_id": staff_id, "start_time": start_time, "end_time": end_time},
            )
        return cls(staff_id=staff_id, date=shift_date, start=start, end=end)

    @property
    def start_time(self) -> str:
        return minutes_to_time(self.start)

    @property
    def end_time(self) -> str:
        return minutes_to_time(self.end)

    def covers(self, start: int, end: int) -> bool:
        return self.start <= start and end <= self.end


@dataclass(frozen=True)
class Assignment:
    staff_id: str
    rooms: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rooms", _dedupe(self.rooms))

    @property
    def room_set(self) -> frozenset[str]:
        return frozenset(self.rooms)

    def to_payload(self) -> dict:
        return {"user": self.staff_id, "rooms": list(self.rooms)}


@dataclass(frozen=True)
class Block:
    date: date
    start: int
    end: int
    assignments: tuple[Assignment, ...] = ()
    id: int | None = field(default=None, compare=False)

    @property
    def start_time(self) -> str:
        return minutes_to_time(self.start)

    @property
    def end_time(self) -> str:
        return minutes_to_time(self.end)

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def staff_ids(self) -> tuple[str, ...]:
        return tuple(item.staff_id for item in self.assignments)

    def rooms_for(self, staff_id: str) -> tuple[str, ...]:
        for item in self.assignments:
            if item.staff_id == staff_id:
                return item.rooms
        return ()

    def assigned_rooms(self) -> frozenset[str]:
        return frozenset(room for item in self.assignments for room in item.rooms)

    def overlap(self, start: int, end: int) -> int:
        return max(0, min(self.end, end) - max(self.start, start))

    def with_assignments(self, assignments: Iterable[Assignment]) -> "Block":
        return replace(self, assignments=tuple(assignments))

    def on_date(self, target: date) -> "Block":
        return replace(self, date=target, id=None)


@dataclass(frozen=True)
class EventSlot:
    """The fields of an event that ownership resolution reads."""

    id: int | None
    room_name: str | None
    date: date | None
    start: int | None
    end: int | None
    man_owner: str | None = None
    event_type: str | None = None

    @classmethod
    def from_values(
        cls,
        *,
        id: int | None = None,
        room_name: str | None,
        date: date | None,
        start_time: str | None,
        end_time: str | None,
        man_owner: str | None = None,
        event_type: str | None = None,
    ) -> "EventSlot":
        start = to_minutes(start_time, field_name="start_time") if start_time else None
        end = to_minutes(end_time, field_name="end_time") if end_time else None
        return cls(
            id=id,
            room_name=room_name,
            date=date,
            start=start,
            end=end,
            man_owner=man_owner or None,
            event_type=event_type,
        )

    @property
    def is_schedulable(self) -> bool:
        return bool(self.room_name and self.date and self.start is not None and self.end is not None)


@dataclass(frozen=True)
class TimelineEntry:
    owner_id: str
    transition_time: str | None = None


def check_block_list(blocks: Iterable[Block]) -> list[str]:
    """Invariant violations of one date's block list, empty when the list is valid."""
    problems: list[str] = []
    ordered = list(blocks)
    for index, block in enumerate(ordered):
        if block.end <= block.start:
            problems.append(f"block {block.start_time}-{block.end_time} has no duration")
        seen: dict[str, str] = {}
        for item in block.assignments:
            for room in item.rooms:
                if room in seen and seen[room] != item.staff_id:
                    problems.append(
                        f"room {room} assigned to both {seen[room]} and {item.staff_id} "
                        f"in block {block.start_time}-{block.end_time}"
                    )
                seen[room] = item.staff_id
        if index and ordered[index - 1].start > block.start:
            problems.append(f"block {block.start_time}-{block.end_time} is out of order")
        if index and ordered[index - 1].end > block.start:
            problems.append(
                f"block {ordered[index - 1].start_time}-{ordered[index - 1].end_time} "
                f"overlaps {block.start_time}-{block.end_time}"
            )
    return problems
