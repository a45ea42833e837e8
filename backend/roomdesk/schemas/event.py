from datetime import date

from pydantic import BaseModel, Field, field_validator

from roomdesk.schemas.common import TIME_FORMAT_MESSAGE, TIME_PATTERN, normalize_time


class EventOut(BaseModel):
    id: int
    event_name: str | None
    event_type: str | None
    instructor_name: str | None
    room_name: str | None
    date: date | None
    start_time: str | None
    end_time: str | None
    resources: list[dict]
    man_owner: str | None

    model_config = {"from_attributes": True}


class TimelineEntryOut(BaseModel):
    owner_id: str
    transition_time: str | None


class EventOwnershipOut(BaseModel):
    event_id: int
    owners: list[str]
    timeline: list[TimelineEntryOut]
    hand_off_time: str | None
    is_manual: bool


class ManualOwnerUpdate(BaseModel):
    profile_id: str = Field(min_length=1, max_length=36)


class EventReminderDispatch(BaseModel):
    date: date
    at_time: str

    @field_validator("at_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError(TIME_FORMAT_MESSAGE)
        return normalize_time(value)


class EventReminderDispatchOut(BaseModel):
    notified: int
