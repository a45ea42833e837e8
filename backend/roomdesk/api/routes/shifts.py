from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from roomdesk.api.deps import get_current_profile, get_db, require_scheduler
from roomdesk.models.profile import Profile, ProfileRole
from roomdesk.schemas.shift import (
    CopyDayRequest,
    CopyResultOut,
    CopyWeekRequest,
    ShiftOut,
    ShiftUpsert,
    ShiftUpsertOut,
)
from roomdesk.services.audit import log_activity
from roomdesk.services.copy_forward import copy_forward, copy_week
from roomdesk.services.notifications import notify_schedule_change
from roomdesk.services.schedule_store import clear_day, load_shift_rows, upsert_shift

router = APIRouter()


@router.get("", response_model=list[ShiftOut])
def list_shifts(
    dates: list[date] = Query(),
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[ShiftOut]:
    return load_shift_rows(db, dates)


@router.put("", response_model=ShiftUpsertOut)
def save_shift(
    payload: ShiftUpsert,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> ShiftUpsertOut:
    if payload.profile_id != current.id and current.role not in {ProfileRole.admin, ProfileRole.scheduler}:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    if db.get(Profile, payload.profile_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    log_activity(
        db,
        actor=current,
        action="shift.clear" if payload.clears else "shift.save",
        entity_type="shift",
        entity_id=payload.profile_id,
        details={"date": payload.date.isoformat(), "start_time": payload.start_time, "end_time": payload.end_time},
    )
    shift, blocks = upsert_shift(
        db,
        profile_id=payload.profile_id,
        shift_date=payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )
    if payload.profile_id != current.id:
        notify_schedule_change(
            db,
            user_ids=[payload.profile_id],
            schedule_date=payload.date.isoformat(),
            summary=(
                f"{current.name} cleared your shift."
                if payload.clears
                else f"{current.name} set your shift to {payload.start_time}-{payload.end_time}."
            ),
            changed_by=current,
        )
        db.commit()
    return ShiftUpsertOut(
        shift=ShiftOut.model_validate(shift) if shift is not None else None,
        block_count=len(blocks),
    )


@router.delete("")
def clear_shifts(
    date: date,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> dict:
    log_activity(db, actor=current, action="shift.clear_day", entity_type="shift", details={"date": date.isoformat()})
    clear_day(db, date)
    return {"cleared": date.isoformat()}


@router.post("/copy-day", response_model=CopyResultOut)
def copy_day(
    payload: CopyDayRequest,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> CopyResultOut:
    log_activity(
        db,
        actor=current,
        action="schedule.copy_day",
        entity_type="shift",
        details={"source_date": payload.source_date.isoformat(), "target_date": payload.target_date.isoformat()},
    )
    result = copy_forward(db, payload.source_date, payload.target_date)
    return CopyResultOut(**asdict(result))


@router.post("/copy-week", response_model=list[CopyResultOut])
def copy_whole_week(
    payload: CopyWeekRequest,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> list[CopyResultOut]:
    log_activity(
        db,
        actor=current,
        action="schedule.copy_week",
        entity_type="shift",
        details={
            "source_week_start": payload.source_week_start.isoformat(),
            "target_week_start": payload.target_week_start.isoformat(),
            "days": payload.days,
        },
    )
    results = copy_week(db, payload.source_week_start, payload.target_week_start, payload.days)
    return [CopyResultOut(**asdict(item)) for item in results]
