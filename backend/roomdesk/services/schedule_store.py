from __future__ import annotations

from datetime import date
import logging
from typing import Iterable, Sequence

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from roomdesk.core.exceptions import InvalidInputError, MalformedRecordError, PersistenceError
from roomdesk.models.event import Event
from roomdesk.models.room import Room
from roomdesk.models.schedule_revision import ScheduleRevision
from roomdesk.models.shift import Shift
from roomdesk.models.shift_block import ShiftBlock
from roomdesk.schemas.common import TIME_PATTERN
from roomdesk.schemas.shift_block import AssignmentRecord
from roomdesk.services.assignment_editor import drop_empty_blocks
from roomdesk.services.block_calculator import recalculate_blocks
from roomdesk.services.ownership_cache import block_cache
from roomdesk.services.room_catalog import ordered_catalog
from roomdesk.services.schedule_types import (
    Assignment,
    Block,
    EventSlot,
    StaffShift,
    check_block_list,
    to_minutes,
)

logger = logging.getLogger(__name__)

_assignment_list = TypeAdapter(list[AssignmentRecord])


def block_from_row(row: ShiftBlock) -> Block:
    try:
        records = _assignment_list.validate_python(row.assignments if row.assignments is not None else [])
        start = to_minutes(row.start_time, field_name="start_time")
        end = to_minutes(row.end_time, field_name="end_time")
    except (ValidationError, InvalidInputError) as exc:
        raise MalformedRecordError("shift_blocks", row.id, str(exc)) from exc
    return Block(
        date=row.date,
        start=start,
        end=end,
        assignments=tuple(Assignment(staff_id=item.user, rooms=tuple(item.rooms)) for item in records),
        id=row.id,
    )


def shift_from_row(row: Shift) -> StaffShift:
    try:
        return StaffShift.from_times(row.profile_id, row.date, row.start_time, row.end_time)
    except InvalidInputError as exc:
        raise MalformedRecordError("shifts", row.id, exc.message) from exc


def event_slot(event: Event) -> EventSlot:
    for value in (event.start_time, event.end_time):
        if value and not TIME_PATTERN.match(value):
            raise MalformedRecordError("events", event.id, f"invalid time {value!r}")
    return EventSlot.from_values(
        id=event.id,
        room_name=event.room_name,
        date=event.date,
        start_time=event.start_time,
        end_time=event.end_time,
        man_owner=event.man_owner,
        event_type=event.event_type,
    )


def block_payload(block: Block) -> dict:
    return {
        "id": block.id,
        "date": block.date,
        "start_time": block.start_time,
        "end_time": block.end_time,
        "assignments": [item.to_payload() for item in block.assignments],
    }


def _block_row(block: Block, block_date: date) -> ShiftBlock:
    return ShiftBlock(
        date=block_date,
        start_time=block.start_time,
        end_time=block.end_time,
        assignments=[item.to_payload() for item in block.assignments],
    )


# Reads


def load_blocks(db: Session, block_date: date) -> list[Block]:
    rows = db.execute(
        select(ShiftBlock)
        .where(ShiftBlock.date == block_date)
        .order_by(ShiftBlock.start_time.asc(), ShiftBlock.id.asc())
    ).scalars()
    return [block_from_row(row) for row in rows]


def schedule_revision(db: Session, block_date: date) -> int:
    revision = db.execute(
        select(ScheduleRevision.revision).where(ScheduleRevision.date == block_date)
    ).scalar_one_or_none()
    return revision or 0


def cached_blocks(db: Session, block_date: date) -> tuple[Block, ...]:
    return block_cache.get(block_date, schedule_revision(db, block_date), lambda value: load_blocks(db, value))


def load_shift_rows(db: Session, dates: Iterable[date]) -> list[Shift]:
    wanted = sorted(set(dates))
    if not wanted:
        return []
    return list(
        db.execute(
            select(Shift).where(Shift.date.in_(wanted)).order_by(Shift.date.asc(), Shift.start_time.asc())
        ).scalars()
    )


def load_shifts(db: Session, shift_date: date) -> list[StaffShift]:
    return [shift_from_row(row) for row in load_shift_rows(db, [shift_date])]


def room_names(db: Session) -> list[str]:
    return list(ordered_catalog(db.execute(select(Room.name)).scalars()))


def unassigned_catalog_rooms(db: Session, block_date: date) -> list[str]:
    assigned = {room for block in cached_blocks(db, block_date) for room in block.assigned_rooms()}
    return [name for name in room_names(db) if name not in assigned]


# Writes


def persistence_error(db: Session, operation: str, exc: SQLAlchemyError) -> PersistenceError:
    db.rollback()
    logger.exception("Failed to %s", operation)
    return PersistenceError(operation, f"Failed to {operation}: {exc.__class__.__name__}")


def _validated(blocks: Sequence[Block], block_date: date) -> list[Block]:
    kept = drop_empty_blocks(sorted(blocks, key=lambda item: item.start))
    for block in kept:
        if block.date != block_date:
            raise InvalidInputError(
                "Shift block date does not match the date being replaced",
                details={"date": block_date.isoformat(), "block_date": block.date.isoformat()},
            )
    problems = check_block_list(kept)
    if problems:
        raise InvalidInputError("Shift blocks are inconsistent", details={"problems": problems})
    return kept


def bump_revision(db: Session, block_date: date) -> None:
    """Mark the date as changed; must run inside the writing transaction."""
    result = db.execute(
        update(ScheduleRevision)
        .where(ScheduleRevision.date == block_date)
        .values(revision=ScheduleRevision.revision + 1)
    )
    if result.rowcount == 0:
        db.add(ScheduleRevision(date=block_date, revision=1))
        db.flush()


def _write_blocks(db: Session, block_date: date, blocks: Sequence[Block]) -> list[ShiftBlock]:
    db.execute(delete(ShiftBlock).where(ShiftBlock.date == block_date))
    bump_revision(db, block_date)
    rows = [_block_row(block, block_date) for block in blocks]
    db.add_all(rows)
    db.flush()
    return rows


def replace_blocks_for_date(db: Session, block_date: date, blocks: Sequence[Block]) -> list[Block]:
    """Swap the stored blocks of a date for ``blocks`` in one transaction."""
    kept = _validated(blocks, block_date)
    try:
        rows = _write_blocks(db, block_date, kept)
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "replace shift blocks", exc) from exc
    finally:
        block_cache.invalidate(block_date)
    logger.info("Replaced shift blocks for %s with %d block(s)", block_date, len(rows))
    return [block_from_row(row) for row in rows]


def upsert_shift(
    db: Session,
    *,
    profile_id: str,
    shift_date: date,
    start_time: str | None,
    end_time: str | None,
) -> tuple[Shift | None, list[Block]]:
    """Create, replace or clear one staff member's shift and recalculate the day."""
    shift = None
    if start_time is not None or end_time is not None:
        if start_time is None or end_time is None:
            raise InvalidInputError("Provide both start_time and end_time, or neither to clear the shift")
        shift = StaffShift.from_times(profile_id, shift_date, start_time, end_time)

    try:
        prior = load_blocks(db, shift_date)
        db.execute(delete(Shift).where(Shift.profile_id == profile_id, Shift.date == shift_date))
        row = None
        if shift is not None:
            row = Shift(
                profile_id=profile_id,
                date=shift_date,
                start_time=shift.start_time,
                end_time=shift.end_time,
            )
            db.add(row)
        db.flush()
        blocks = recalculate_blocks(load_shifts(db, shift_date), prior, block_date=shift_date)
        block_rows = _write_blocks(db, shift_date, _validated(blocks, shift_date))
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "save shift", exc) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        block_cache.invalidate(shift_date)

    if row is not None:
        db.refresh(row)
    logger.info(
        "%s shift for %s on %s; %d block(s) recalculated",
        "Saved" if row is not None else "Cleared",
        profile_id,
        shift_date,
        len(block_rows),
    )
    return row, [block_from_row(item) for item in block_rows]


def clear_day(db: Session, shift_date: date) -> None:
    try:
        db.execute(delete(Shift).where(Shift.date == shift_date))
        db.execute(delete(ShiftBlock).where(ShiftBlock.date == shift_date))
        bump_revision(db, shift_date)
        db.commit()
    except SQLAlchemyError as exc:
        raise persistence_error(db, "clear shifts", exc) from exc
    finally:
        block_cache.invalidate(shift_date)
    logger.info("Cleared shifts and shift blocks for %s", shift_date)


def recalculate_date(db: Session, shift_date: date) -> list[Block]:
    try:
        prior = load_blocks(db, shift_date)
        blocks = recalculate_blocks(load_shifts(db, shift_date), prior, block_date=shift_date)
    except SQLAlchemyError as exc:
        raise persistence_error(db, "load shifts", exc) from exc
    return replace_blocks_for_date(db, shift_date, blocks)


def rooms_fully_assigned(db: Session, block_date: date) -> bool:
    return not unassigned_catalog_rooms(db, block_date)
