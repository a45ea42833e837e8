from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
import logging
from typing import Iterable

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from roomdesk.core.exceptions import CopyForwardError, InvalidInputError
from roomdesk.models.shift import Shift
from roomdesk.models.shift_block import ShiftBlock
from roomdesk.services.ownership_cache import block_cache
from roomdesk.services.schedule_store import (
    bump_revision,
    load_blocks,
    load_shifts,
    replace_blocks_for_date,
)
from roomdesk.services.schedule_types import Block, StaffShift

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopyResult:
    source_date: date
    target_date: date
    shifts_copied: int
    blocks_copied: int


def copy_forward(db: Session, source_date: date, target_date: date) -> CopyResult:
    """Overwrite ``target_date`` with the shifts and blocks of ``source_date``.

    Runs as two commits: the target is cleared first, then the copies are
    inserted. If the insert fails the target stays cleared and the caller
    gets a ``CopyForwardError`` it may retry.
    """
    if source_date == target_date:
        raise InvalidInputError("Source and target dates must differ", details={"date": source_date.isoformat()})

    shifts = load_shifts(db, source_date)
    blocks = load_blocks(db, source_date)

    try:
        db.execute(delete(Shift).where(Shift.date == target_date))
        db.execute(delete(ShiftBlock).where(ShiftBlock.date == target_date))
        bump_revision(db, target_date)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to clear %s before copying from %s", target_date, source_date)
        raise CopyForwardError(target_date.isoformat(), f"Failed to clear {target_date}", cleared=False) from exc
    finally:
        block_cache.invalidate(target_date)

    try:
        db.add_all(_shift_rows(shifts, target_date))
        db.add_all(_block_rows(blocks, target_date))
        bump_revision(db, target_date)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to copy %s onto %s; target left cleared", source_date, target_date)
        raise CopyForwardError(
            target_date.isoformat(),
            f"Copied schedule could not be saved; {target_date} was cleared",
            cleared=True,
        ) from exc
    finally:
        block_cache.invalidate(target_date)

    logger.info(
        "Copied %d shift(s) and %d block(s) from %s to %s",
        len(shifts),
        len(blocks),
        source_date,
        target_date,
    )
    return CopyResult(
        source_date=source_date,
        target_date=target_date,
        shifts_copied=len(shifts),
        blocks_copied=len(blocks),
    )


def _shift_rows(shifts: Iterable[StaffShift], target_date: date) -> list[Shift]:
    return [
        Shift(profile_id=item.staff_id, date=target_date, start_time=item.start_time, end_time=item.end_time)
        for item in shifts
    ]


def _block_rows(blocks: Iterable[Block], target_date: date) -> list[ShiftBlock]:
    return [
        ShiftBlock(
            date=target_date,
            start_time=block.start_time,
            end_time=block.end_time,
            assignments=[item.to_payload() for item in block.assignments],
        )
        for block in blocks
        if block.end > block.start
    ]


def copy_week(db: Session, source_week_start: date, target_week_start: date, days: int = 7) -> list[CopyResult]:
    if days < 1 or days > 7:
        raise InvalidInputError("days must be between 1 and 7", details={"days": days})
    results: list[CopyResult] = []
    for offset in range(days):
        results.append(
            copy_forward(
                db,
                source_week_start + timedelta(days=offset),
                target_week_start + timedelta(days=offset),
            )
        )
    return results


def week_start(value: date) -> date:
    return value - timedelta(days=value.weekday())


def shift_schedule_key(shifts: Iterable[StaffShift]) -> Counter:
    return Counter(f"{item.staff_id}:{item.start_time}-{item.end_time}" for item in shifts)


def has_same_shift_schedule(left: Iterable[StaffShift], right: Iterable[StaffShift]) -> bool:
    return shift_schedule_key(left) == shift_schedule_key(right)


def copy_blocks_to_matching_days(db: Session, source_date: date) -> list[date]:
    """Copy a day's room assignments onto the days of its week that have the same shifts."""
    blocks = load_blocks(db, source_date)
    if not blocks:
        raise InvalidInputError(f"No shift blocks on {source_date} to copy", details={"date": source_date.isoformat()})
    source_shifts = load_shifts(db, source_date)
    if not source_shifts:
        raise InvalidInputError(f"No shifts on {source_date} to compare", details={"date": source_date.isoformat()})

    monday = week_start(source_date)
    matching = [
        day
        for day in (monday + timedelta(days=offset) for offset in range(7))
        if day != source_date and has_same_shift_schedule(source_shifts, load_shifts(db, day))
    ]
    if not matching:
        raise InvalidInputError(
            f"No other day in the week of {monday} has the same shift schedule",
            details={"date": source_date.isoformat(), "week_start": monday.isoformat()},
        )

    for day in matching:
        replace_blocks_for_date(db, day, [block.on_date(day) for block in blocks])
    logger.info("Copied shift blocks from %s to %s", source_date, ", ".join(day.isoformat() for day in matching))
    return matching
