from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class FacultyBase(BaseModel):
    calendar_name: str = Field(min_length=1, max_length=200)
    directory_name: str | None = Field(default=None, max_length=200)
    directory_title: str | None = Field(default=None, max_length=300)
    directory_subtitle: str | None = Field(default=None, max_length=300)
    bio: str | None = Field(default=None, max_length=10000)
    bio_url: str | None = Field(default=None, max_length=500)
    image_url: str | None = Field(default=None, max_length=500)

    @field_validator("calendar_name")
    @classmethod
    def normalize_calendar_name(cls, value: str) -> str:
        name = " ".join(value.split())
        if not name:
            raise ValueError("calendar_name cannot be blank")
        return name


class FacultyCreate(FacultyBase):
    pass


class FacultySetupUpdate(BaseModel):
    """Classroom setup details any AV staff member may record for an instructor."""

    setup_notes: str | None = Field(default=None, max_length=5000)
    timing: int | None = Field(default=None, ge=1, le=5)
    complexity: int | None = Field(default=None, ge=1, le=5)
    temperament: int | None = Field(default=None, ge=1, le=5)
    uses_mic: bool | None = None
    left_source: str | None = Field(default=None, max_length=100)
    right_source: str | None = Field(default=None, max_length=100)


class FacultyOut(FacultyBase):
    id: int
    setup_notes: str | None
    timing: int | None
    complexity: int | None
    temperament: int | None
    uses_mic: bool
    left_source: str | None
    right_source: str | None
    setup_updated_at: datetime | None
    setup_updated_by: str | None

    model_config = {"from_attributes": True}
