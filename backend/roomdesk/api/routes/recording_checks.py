from datetime import date, datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from roomdesk.api.deps import get_current_profile, get_db, require_scheduler
from roomdesk.core.config import get_settings
from roomdesk.models.profile import Profile
from roomdesk.schemas.recording_check import DispatchChecksOut, DispatchChecksRequest, RecordingCheckOut
from roomdesk.services.audit import log_activity
from roomdesk.services.recording_checks import check_status, complete_check, dispatch_due_checks, plan_checks

router = APIRouter()


def _minute_on(day: date) -> int:
    now = datetime.now()
    if day < now.date():
        return 24 * 60
    if day > now.date():
        return -1
    return now.hour * 60 + now.minute


@router.get("", response_model=list[RecordingCheckOut])
def list_recording_checks(
    date: date,
    mine: bool = False,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[RecordingCheckOut]:
    settings = get_settings()
    checks = plan_checks(db, date, settings=settings)
    if mine:
        checks = [check for check in checks if check.owner_id == current.id]
    at_minute = _minute_on(date)
    results = []
    for check in checks:
        item = RecordingCheckOut.model_validate(check)
        item.status = check_status(check, at_minute, settings.recording_check_interval_minutes).value
        results.append(item)
    return results


@router.post("/dispatch", response_model=DispatchChecksOut)
def dispatch_recording_checks(
    payload: DispatchChecksRequest,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> DispatchChecksOut:
    log_activity(
        db,
        actor=current,
        action="recording_check.dispatch",
        entity_type="recording_check",
        details={"date": payload.date.isoformat(), "at_time": payload.at_time},
    )
    planned, notified = dispatch_due_checks(db, payload.date, payload.at_time)
    return DispatchChecksOut(planned=planned, notified=notified)


@router.post("/{check_id}/complete", response_model=RecordingCheckOut)
def complete_recording_check(
    check_id: str,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> RecordingCheckOut:
    log_activity(db, actor=current, action="recording_check.complete", entity_type="recording_check", entity_id=check_id)
    check = complete_check(db, check_id, actor=current)
    item = RecordingCheckOut.model_validate(check)
    item.status = "completed"
    return item
