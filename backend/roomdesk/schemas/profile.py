from pydantic import BaseModel

from roomdesk.models.profile import ProfileRole


class ProfileOut(BaseModel):
    id: str
    name: str
    email: str | None
    role: ProfileRole
    current_filter: str | None
    is_active: bool

    model_config = {"from_attributes": True}
