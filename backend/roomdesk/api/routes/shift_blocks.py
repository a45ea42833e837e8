from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from roomdesk.api.deps import get_current_profile, get_db, require_scheduler
from roomdesk.models.profile import Profile
from roomdesk.schemas.shift_block import (
    CopyToMatchingDaysOut,
    MoveRoomsOut,
    MoveRoomsRequest,
    ShiftBlockOut,
    ShiftBlockReplace,
)
from roomdesk.services.assignment_editor import AssignmentEditor
from roomdesk.services.audit import log_activity
from roomdesk.services.copy_forward import copy_blocks_to_matching_days
from roomdesk.services.notifications import notify_schedule_change
from roomdesk.services.schedule_store import (
    block_payload,
    cached_blocks,
    load_blocks,
    recalculate_date,
    replace_blocks_for_date,
    room_names,
    rooms_fully_assigned,
)
from roomdesk.services.schedule_types import Assignment, Block, to_minutes

router = APIRouter()


@router.get("", response_model=list[ShiftBlockOut])
def list_shift_blocks(
    date: date,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[ShiftBlockOut]:
    return [block_payload(block) for block in cached_blocks(db, date)]


@router.put("/{block_date}", response_model=list[ShiftBlockOut])
def replace_shift_blocks(
    block_date: date,
    payload: ShiftBlockReplace,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> list[ShiftBlockOut]:
    blocks = [
        Block(
            date=block_date,
            start=to_minutes(item.start_time, field_name="start_time"),
            end=to_minutes(item.end_time, field_name="end_time"),
            assignments=tuple(Assignment(staff_id=record.user, rooms=tuple(record.rooms)) for record in item.assignments),
        )
        for item in payload.blocks
    ]
    log_activity(
        db,
        actor=current,
        action="shift_blocks.replace",
        entity_type="shift_block",
        details={"date": block_date.isoformat(), "count": len(blocks)},
    )
    stored = replace_blocks_for_date(db, block_date, blocks)
    return [block_payload(block) for block in stored]


@router.post("/{block_date}/move", response_model=MoveRoomsOut)
def move_rooms_in_block(
    block_date: date,
    payload: MoveRoomsRequest,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> MoveRoomsOut:
    editor = AssignmentEditor(block_date, load_blocks(db, block_date), room_names(db))
    index = editor.index_of(payload.block_id)
    first, *rest = payload.rooms
    editor.click(index, first)
    for room in rest:
        editor.click(index, room, ctrl=True)
    moved = editor.move_selection(index, payload.target)

    log_activity(
        db,
        actor=current,
        action="shift_blocks.move",
        entity_type="shift_block",
        entity_id=payload.block_id,
        details={"date": block_date.isoformat(), "rooms": payload.rooms, "target": payload.target},
    )
    stored = editor.commit(lambda day, blocks: replace_blocks_for_date(db, day, blocks))

    if payload.target is not None and payload.target != current.id:
        notify_schedule_change(
            db,
            user_ids=[payload.target],
            schedule_date=block_date.isoformat(),
            summary=f"{current.name} assigned you {', '.join(payload.rooms)}.",
            changed_by=current,
        )
        db.commit()
    # Zero-duration rows are dropped on commit, so stored indices can shift.
    stored_block = next((block for block in stored if (block.start, block.end) == (moved.start, moved.end)), None)
    return MoveRoomsOut(
        block=block_payload(stored_block) if stored_block is not None else None,
        blocks=[block_payload(block) for block in stored],
        all_rooms_assigned=rooms_fully_assigned(db, block_date),
    )


@router.post("/{block_date}/recalculate", response_model=list[ShiftBlockOut])
def recalculate_shift_blocks(
    block_date: date,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> list[ShiftBlockOut]:
    log_activity(
        db,
        actor=current,
        action="shift_blocks.recalculate",
        entity_type="shift_block",
        details={"date": block_date.isoformat()},
    )
    return [block_payload(block) for block in recalculate_date(db, block_date)]


@router.post("/{block_date}/copy-to-matching-days", response_model=CopyToMatchingDaysOut)
def copy_to_matching_days(
    block_date: date,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> CopyToMatchingDaysOut:
    log_activity(
        db,
        actor=current,
        action="shift_blocks.copy_to_matching_days",
        entity_type="shift_block",
        details={"date": block_date.isoformat()},
    )
    copied = copy_blocks_to_matching_days(db, block_date)
    return CopyToMatchingDaysOut(source_date=block_date, copied_dates=copied)
