from __future__ import annotations

from datetime import date
import logging
from typing import Iterable, Sequence

from roomdesk.core.exceptions import BlockInvariantError, InvalidInputError
from roomdesk.services.schedule_types import Assignment, Block, StaffShift

logger = logging.getLogger(__name__)


def _boundaries(shifts: Sequence[StaffShift]) -> list[int]:
    points: set[int] = set()
    for shift in shifts:
        points.add(shift.start)
        points.add(shift.end)
    return sorted(points)


def _carried_rooms(staff_id: str, start: int, end: int, prior_blocks: Sequence[Block]) -> tuple[int, tuple[str, ...]]:
    """Rooms a staff member held in the prior block that best matches ``[start, end)``.

    Best match is the longest overlap, then the earlier prior block.
    Returns the overlap length alongside the rooms so callers can rank claims.
    """
    best: Block | None = None
    best_overlap = 0
    for block in prior_blocks:
        if staff_id not in block.staff_ids:
            continue
        overlap = block.overlap(start, end)
        if overlap <= 0:
            continue
        if best is None or overlap > best_overlap or (overlap == best_overlap and block.start < best.start):
            best = block
            best_overlap = overlap
    if best is None:
        return 0, ()
    return best_overlap, best.rooms_for(staff_id)


def recalculate_blocks(
    shifts: Iterable[StaffShift],
    prior_blocks: Iterable[Block] = (),
    *,
    block_date: date | None = None,
) -> list[Block]:
    """Partition a day into blocks from its shifts.

    Block boundaries are every distinct shift start and end. Each block lists
    the staff whose shift covers it, in shift start order, carrying forward the
    rooms they held in ``prior_blocks``. A room can only be carried by one
    staff member per block; the one with the stronger prior claim keeps it.
    """
    shift_list = sorted(shifts, key=lambda item: (item.start, item.staff_id))
    if not shift_list:
        return []

    dates = {item.date for item in shift_list}
    if block_date is not None:
        dates.add(block_date)
    if len(dates) != 1:
        raise InvalidInputError(
            "Shifts for block calculation must share one date",
            details={"dates": sorted(value.isoformat() for value in dates)},
        )
    target_date = dates.pop()

    staff_seen: set[str] = set()
    for shift in shift_list:
        if shift.end <= shift.start:
            raise InvalidInputError(
                "Shift end time must be after start time",
                details={"staff_id": shift.staff_id, "start_time": shift.start_time, "end_time": shift.end_time},
            )
        if shift.staff_id in staff_seen:
            raise InvalidInputError(
                "Only one shift per staff member and date is allowed",
                details={"staff_id": shift.staff_id, "date": target_date.isoformat()},
            )
        staff_seen.add(shift.staff_id)

    prior = sorted(
        (block for block in prior_blocks if block.date == target_date),
        key=lambda item: item.start,
    )

    points = _boundaries(shift_list)
    blocks: list[Block] = []
    for start, end in zip(points, points[1:]):
        if end <= start:
            raise BlockInvariantError(
                "Block calculation produced a zero-duration block",
                details={"date": target_date.isoformat(), "start": start, "end": end},
            )

        working = [shift for shift in shift_list if shift.covers(start, end)]
        if not working:
            continue

        claims = [(_carried_rooms(shift.staff_id, start, end, prior), order) for order, shift in enumerate(working)]
        # Stronger prior claim first; ties keep shift order.
        ranking = sorted(claims, key=lambda item: (-item[0][0], item[1]))
        taken: set[str] = set()
        rooms_by_order: dict[int, tuple[str, ...]] = {}
        for (_, rooms), order in ranking:
            kept = tuple(room for room in rooms if room not in taken)
            if len(kept) != len(rooms):
                logger.warning(
                    "Dropped rooms %s for %s on %s: already carried by another staff member",
                    sorted(set(rooms) - set(kept)),
                    working[order].staff_id,
                    target_date,
                )
            taken.update(kept)
            rooms_by_order[order] = kept

        assignments = tuple(
            Assignment(staff_id=shift.staff_id, rooms=rooms_by_order[order]) for order, shift in enumerate(working)
        )
        blocks.append(Block(date=target_date, start=start, end=end, assignments=assignments))

    return blocks
