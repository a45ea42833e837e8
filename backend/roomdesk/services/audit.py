from __future__ import annotations

from sqlalchemy.orm import Session

from roomdesk.models.activity_log import ActivityLog
from roomdesk.models.profile import Profile


def log_activity(
    db: Session,
    *,
    actor: Profile | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | int | None = None,
    details: dict | None = None,
) -> ActivityLog:
    """Stage an activity row; it is committed with the caller's transaction."""
    record = ActivityLog(
        profile_id=actor.id if actor is not None else None,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=details or {},
    )
    db.add(record)
    return record
