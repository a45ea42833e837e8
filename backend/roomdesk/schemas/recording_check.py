from datetime import date, datetime

from pydantic import BaseModel, field_validator

from roomdesk.schemas.common import TIME_FORMAT_MESSAGE, TIME_PATTERN, normalize_time


class RecordingCheckOut(BaseModel):
    id: str
    event_id: int
    date: date
    check_number: int
    check_time: str
    owner_id: str | None
    notified_at: datetime | None
    completed_at: datetime | None
    completed_by: str | None
    status: str | None = None

    model_config = {"from_attributes": True}


class DispatchChecksRequest(BaseModel):
    date: date
    at_time: str

    @field_validator("at_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError(TIME_FORMAT_MESSAGE)
        return normalize_time(value)


class DispatchChecksOut(BaseModel):
    planned: int
    notified: int
