from datetime import datetime

from pydantic import BaseModel, Field, field_validator


def _room_list(values: list[str]) -> list[str]:
    rooms: list[str] = []
    for value in values:
        name = " ".join(value.split())
        if name and name not in rooms:
            rooms.append(name)
    return rooms


class RoomFilterCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    display_rooms: list[str] = Field(default_factory=list, max_length=500)
    notify_rooms: list[str] = Field(default_factory=list, max_length=500)
    is_default: bool = False

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        name = " ".join(value.split())
        if not name:
            raise ValueError("Filter name cannot be blank")
        return name

    @field_validator("display_rooms", "notify_rooms")
    @classmethod
    def normalize_rooms(cls, value: list[str]) -> list[str]:
        return _room_list(value)


class RoomFilterOut(BaseModel):
    id: int
    name: str
    display_rooms: list[str]
    notify_rooms: list[str]
    owner_id: str | None
    is_default: bool
    created_at: datetime

    model_config = {"from_attributes": True}
