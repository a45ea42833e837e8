from pydantic import BaseModel, Field, field_validator


class RoomCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        name = " ".join(value.split())
        if "&" in name:
            raise ValueError("Merged room names are not catalog rooms")
        return name


class RoomOut(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}


class RoomExpansionOut(BaseModel):
    name: str
    rooms: list[str]
    base_room: str
