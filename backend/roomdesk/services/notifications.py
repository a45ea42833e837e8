from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Iterable

from anyio import from_thread
from sqlalchemy import select
from sqlalchemy.orm import Session

from roomdesk.models.event import Event
from roomdesk.models.notification import Notification, NotificationType
from roomdesk.models.profile import Profile
from roomdesk.services.notification_hub import notification_hub

logger = logging.getLogger(__name__)


def _iso(value: datetime | None) -> str:
    if value is None:
        return datetime.now(timezone.utc).isoformat()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def realtime_payload(notification: Notification, *, event: str = "notification.created") -> dict:
    return {
        "event": event,
        "notification": {
            "id": notification.id,
            "user_id": notification.user_id,
            "title": notification.title,
            "message": notification.message,
            "notification_type": notification.notification_type.value,
            "event_id": notification.event_id,
            "data": notification.data or {},
            "is_read": notification.is_read,
            "created_at": _iso(notification.created_at),
        },
    }


def publish_realtime_notification(notification: Notification, *, event: str = "notification.created") -> None:
    payload = realtime_payload(notification, event=event)
    try:
        from_thread.run(notification_hub.publish, notification.user_id, payload)
    except Exception:  # pragma: no cover - only works from a worker thread with a running loop
        logger.debug("Realtime push skipped for %s", notification.user_id, exc_info=True)


def create_notification(
    db: Session,
    *,
    user_id: str,
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.system,
    event_id: int | None = None,
    data: dict | None = None,
    deliver_realtime: bool = True,
) -> Notification:
    record = Notification(
        user_id=user_id,
        title=title,
        message=message,
        notification_type=notification_type,
        event_id=event_id,
        data=data or {},
        is_read=False,
    )
    db.add(record)
    db.flush()
    if deliver_realtime:
        publish_realtime_notification(record)
    return record


def notify_users(
    db: Session,
    *,
    user_ids: Iterable[str],
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.system,
    event_id: int | None = None,
    data: dict | None = None,
    exclude_user_id: str | None = None,
) -> list[Notification]:
    """Notify every active profile among ``user_ids`` (deduplicated, order kept)."""
    wanted = [item for item in dict.fromkeys(user_ids) if item and item != exclude_user_id]
    if not wanted:
        return []
    active = set(
        db.execute(select(Profile.id).where(Profile.id.in_(wanted), Profile.is_active.is_(True))).scalars()
    )
    skipped = [item for item in wanted if item not in active]
    if skipped:
        logger.warning("Skipping notification %r for unknown or inactive profiles %s", title, skipped)
    return [
        create_notification(
            db,
            user_id=user_id,
            title=title,
            message=message,
            notification_type=notification_type,
            event_id=event_id,
            data=data,
        )
        for user_id in wanted
        if user_id in active
    ]


def _event_label(event: Event) -> str:
    label = event.event_name or f"event {event.id}"
    if event.room_name:
        label += f" in {event.room_name}"
    if event.date:
        label += f" on {event.date.isoformat()}"
    if event.start_time and event.end_time:
        label += f" {event.start_time}-{event.end_time}"
    return label


def notify_event_assignment(
    db: Session,
    *,
    event: Event,
    owner_id: str,
    assigned_by: Profile | None = None,
) -> list[Notification]:
    return notify_users(
        db,
        user_ids=[owner_id],
        title="Event assigned to you",
        message=f"You are now the owner of {_event_label(event)}.",
        notification_type=NotificationType.event_assignment,
        event_id=event.id,
        data={
            "room_name": event.room_name,
            "assigned_by": assigned_by.id if assigned_by is not None else None,
        },
        exclude_user_id=assigned_by.id if assigned_by is not None else None,
    )


def notify_schedule_change(
    db: Session,
    *,
    user_ids: Iterable[str],
    schedule_date: str,
    summary: str,
    changed_by: Profile | None = None,
) -> list[Notification]:
    return notify_users(
        db,
        user_ids=user_ids,
        title=f"Schedule updated for {schedule_date}",
        message=summary,
        notification_type=NotificationType.schedule,
        data={"date": schedule_date},
        exclude_user_id=changed_by.id if changed_by is not None else None,
    )
