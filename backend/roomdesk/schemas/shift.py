from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from roomdesk.schemas.common import TIME_FORMAT_MESSAGE, TIME_PATTERN, normalize_time, parse_time_to_minutes


class ShiftUpsert(BaseModel):
    profile_id: str = Field(min_length=1, max_length=36)
    date: date
    start_time: str | None = None
    end_time: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        if not TIME_PATTERN.match(value.strip()):
            raise ValueError(TIME_FORMAT_MESSAGE)
        return normalize_time(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "ShiftUpsert":
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("Provide both start_time and end_time, or neither to clear the shift")
        if self.start_time is not None and self.end_time is not None:
            if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
                raise ValueError("End time must be after start time")
        return self

    @property
    def clears(self) -> bool:
        return self.start_time is None


class ShiftOut(BaseModel):
    id: str
    profile_id: str
    date: date
    start_time: str
    end_time: str

    model_config = {"from_attributes": True}


class ShiftUpsertOut(BaseModel):
    shift: ShiftOut | None
    block_count: int


class CopyDayRequest(BaseModel):
    source_date: date
    target_date: date

    @model_validator(mode="after")
    def validate_dates(self) -> "CopyDayRequest":
        if self.source_date == self.target_date:
            raise ValueError("Source and target dates must differ")
        return self


class CopyWeekRequest(BaseModel):
    source_week_start: date
    target_week_start: date
    days: int = Field(default=7, ge=1, le=7)

    @model_validator(mode="after")
    def validate_weeks(self) -> "CopyWeekRequest":
        if self.source_week_start == self.target_week_start:
            raise ValueError("Source and target weeks must differ")
        return self


class CopyResultOut(BaseModel):
    source_date: date
    target_date: date
    shifts_copied: int
    blocks_copied: int
