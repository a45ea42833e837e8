from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from roomdesk.schemas.common import TIME_FORMAT_MESSAGE, TIME_PATTERN, normalize_time, parse_time_to_minutes


def _validate_room_names(rooms: list[str]) -> list[str]:
    cleaned: list[str] = []
    for room in rooms:
        name = room.strip()
        if not name:
            raise ValueError("Room names must not be empty")
        if "&" in name:
            raise ValueError(f"Merged room {name!r} cannot be assigned; assign its rooms individually")
        cleaned.append(name)
    return list(dict.fromkeys(cleaned))


class AssignmentRecord(BaseModel):
    """One element of the stored ``shift_blocks.assignments`` JSON."""

    model_config = {"extra": "forbid"}

    user: str = Field(min_length=1, max_length=36)
    rooms: list[str] = Field(default_factory=list)

    @field_validator("rooms")
    @classmethod
    def validate_rooms(cls, value: list[str]) -> list[str]:
        return _validate_room_names(value)


class ShiftBlockIn(BaseModel):
    start_time: str
    end_time: str
    assignments: list[AssignmentRecord] = Field(default_factory=list, max_length=100)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError(TIME_FORMAT_MESSAGE)
        return normalize_time(value)

    @model_validator(mode="after")
    def validate_assignments(self) -> "ShiftBlockIn":
        users = [item.user for item in self.assignments]
        if len(users) != len(set(users)):
            raise ValueError("Each staff member can appear once per shift block")
        owners: dict[str, str] = {}
        for item in self.assignments:
            for room in item.rooms:
                if room in owners:
                    raise ValueError(f"Room {room} is assigned to both {owners[room]} and {item.user}")
                owners[room] = item.user
        return self


class ShiftBlockReplace(BaseModel):
    blocks: list[ShiftBlockIn] = Field(default_factory=list, max_length=96)

    @model_validator(mode="after")
    def validate_partition(self) -> "ShiftBlockReplace":
        # Zero-duration blocks are dropped on save rather than rejected here.
        timed = sorted(
            (parse_time_to_minutes(item.start_time), parse_time_to_minutes(item.end_time))
            for item in self.blocks
        )
        for start, end in timed:
            if end < start:
                raise ValueError("Shift block end time must not be before its start time")
        timed = [item for item in timed if item[1] > item[0]]
        for (_, previous_end), (start, _) in zip(timed, timed[1:]):
            if start < previous_end:
                raise ValueError("Shift blocks for one date must not overlap")
        return self


class AssignmentOut(BaseModel):
    user: str
    rooms: list[str]


class ShiftBlockOut(BaseModel):
    id: int | None
    date: date
    start_time: str
    end_time: str
    assignments: list[AssignmentOut]


class MoveRoomsRequest(BaseModel):
    block_id: int
    rooms: list[str] = Field(min_length=1, max_length=200)
    target: str | None = None

    @field_validator("rooms")
    @classmethod
    def validate_rooms(cls, value: list[str]) -> list[str]:
        return _validate_room_names(value)


class MoveRoomsOut(BaseModel):
    block: ShiftBlockOut | None
    blocks: list[ShiftBlockOut]
    all_rooms_assigned: bool


class CopyToMatchingDaysOut(BaseModel):
    source_date: date
    copied_dates: list[date]


class RoomCoverageOut(BaseModel):
    date: date
    all_assigned: bool
    unassigned: list[str]
