from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from roomdesk.core.exceptions import CopyForwardError, InvalidInputError
from roomdesk.models.shift import Shift
from roomdesk.models.shift_block import ShiftBlock
from roomdesk.services import schedule_store
from roomdesk.services.copy_forward import (
    copy_blocks_to_matching_days,
    copy_forward,
    copy_week,
    has_same_shift_schedule,
    week_start,
)
from roomdesk.services.schedule_types import Assignment, StaffShift

SOURCE = date(2024, 1, 1)
TARGET = date(2024, 1, 8)


def seed_day(db, day, shifts=(("alice", "09:00", "12:00"), ("bob", "11:00", "14:00"))):
    for profile_id, start, end in shifts:
        schedule_store.upsert_shift(db, profile_id=profile_id, shift_date=day, start_time=start, end_time=end)


def assign_rooms(db, day):
    blocks = schedule_store.load_blocks(db, day)
    updated = [
        block.with_assignments(
            Assignment(item.staff_id, ("GH 101",) if item.staff_id == "alice" else ("GH 102",))
            for item in block.assignments
        )
        for block in blocks
    ]
    return schedule_store.replace_blocks_for_date(db, day, updated)


def test_copy_forward_replaces_target_day(db_session):
    seed_day(db_session, SOURCE)
    source_blocks = assign_rooms(db_session, SOURCE)
    seed_day(db_session, TARGET, shifts=(("carol", "07:00", "08:00"),))
    source_shift_ids = set(db_session.execute(select(Shift.id).where(Shift.date == SOURCE)).scalars())
    old_target_block_ids = set(db_session.execute(select(ShiftBlock.id).where(ShiftBlock.date == TARGET)).scalars())

    result = copy_forward(db_session, SOURCE, TARGET)

    assert (result.shifts_copied, result.blocks_copied) == (2, 3)
    target_shifts = db_session.execute(select(Shift).where(Shift.date == TARGET)).scalars().all()
    assert sorted(row.profile_id for row in target_shifts) == ["alice", "bob"]
    assert not source_shift_ids & {row.id for row in target_shifts}

    target_blocks = schedule_store.load_blocks(db_session, TARGET)
    assert [block.on_date(SOURCE) for block in target_blocks] == list(source_blocks)
    assert not old_target_block_ids & {block.id for block in target_blocks}
    assert not {block.id for block in source_blocks} & {block.id for block in target_blocks}


def test_copy_forward_failure_leaves_target_cleared(db_session, monkeypatch):
    seed_day(db_session, SOURCE)
    seed_day(db_session, TARGET, shifts=(("carol", "07:00", "08:00"),))
    real_commit = db_session.commit
    calls = []

    def commit_once_then_fail():
        calls.append(1)
        if len(calls) > 1:
            raise OperationalError("COMMIT", {}, Exception("connection lost"))
        real_commit()

    monkeypatch.setattr(db_session, "commit", commit_once_then_fail)

    with pytest.raises(CopyForwardError) as excinfo:
        copy_forward(db_session, SOURCE, TARGET)

    monkeypatch.undo()
    assert excinfo.value.cleared is True
    assert excinfo.value.details["retryable"] is True
    assert excinfo.value.details["target_date"] == TARGET.isoformat()
    assert schedule_store.load_shifts(db_session, TARGET) == []
    assert schedule_store.load_blocks(db_session, TARGET) == []
    assert len(schedule_store.load_shifts(db_session, SOURCE)) == 2


def test_copy_forward_rejects_same_day(db_session):
    with pytest.raises(InvalidInputError):
        copy_forward(db_session, SOURCE, SOURCE)


def test_copy_week_uses_weekday_offsets(db_session):
    seed_day(db_session, SOURCE)
    seed_day(db_session, date(2024, 1, 3), shifts=(("carol", "08:00", "09:00"),))

    results = copy_week(db_session, SOURCE, TARGET, days=3)

    assert [item.target_date for item in results] == [date(2024, 1, 8), date(2024, 1, 9), date(2024, 1, 10)]
    assert [item.shifts_copied for item in results] == [2, 0, 1]
    assert [row.profile_id for row in schedule_store.load_shift_rows(db_session, [date(2024, 1, 10)])] == ["carol"]


def test_shift_schedule_comparison_ignores_order():
    first = [StaffShift.from_times("alice", SOURCE, "09:00", "12:00"), StaffShift.from_times("bob", SOURCE, "11:00", "14:00")]
    second = [StaffShift.from_times("bob", TARGET, "11:00", "14:00"), StaffShift.from_times("alice", TARGET, "09:00", "12:00")]
    third = [StaffShift.from_times("alice", TARGET, "09:00", "12:00")]

    assert has_same_shift_schedule(first, second)
    assert not has_same_shift_schedule(first, third)
    assert week_start(date(2024, 1, 4)) == SOURCE


def test_copy_blocks_to_matching_days(db_session):
    wednesday = date(2024, 1, 3)
    thursday = date(2024, 1, 4)
    seed_day(db_session, SOURCE)
    seed_day(db_session, wednesday)
    seed_day(db_session, thursday, shifts=(("alice", "09:00", "12:00"),))
    source_blocks = assign_rooms(db_session, SOURCE)

    copied = copy_blocks_to_matching_days(db_session, SOURCE)

    assert copied == [wednesday]
    assert [block.on_date(SOURCE) for block in schedule_store.load_blocks(db_session, wednesday)] == list(source_blocks)
    assert schedule_store.load_blocks(db_session, thursday)[0].rooms_for("alice") == ()


def test_copy_blocks_to_matching_days_errors(db_session):
    with pytest.raises(InvalidInputError):
        copy_blocks_to_matching_days(db_session, SOURCE)

    seed_day(db_session, SOURCE)
    with pytest.raises(InvalidInputError):
        copy_blocks_to_matching_days(db_session, SOURCE)
