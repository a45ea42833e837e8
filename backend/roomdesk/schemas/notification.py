from datetime import datetime

from pydantic import BaseModel

from roomdesk.models.notification import NotificationType


class NotificationOut(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    notification_type: NotificationType
    event_id: int | None
    data: dict
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}
