from datetime import date
import random

import pytest

from roomdesk.core.exceptions import InvalidInputError
from roomdesk.services.block_calculator import recalculate_blocks
from roomdesk.services.schedule_types import Assignment, Block, StaffShift, check_block_list

DAY = date(2024, 1, 1)


def shift(staff_id: str, start: str, end: str, day: date = DAY) -> StaffShift:
    return StaffShift.from_times(staff_id, day, start, end)


def minutes(value: str) -> int:
    hours, mins = value.split(":")
    return int(hours) * 60 + int(mins)


def test_overlapping_shifts_split_into_three_blocks():
    blocks = recalculate_blocks([shift("alice", "09:00", "12:00"), shift("bob", "11:00", "14:00")])

    assert [(block.start_time, block.end_time, block.staff_ids) for block in blocks] == [
        ("09:00", "11:00", ("alice",)),
        ("11:00", "12:00", ("alice", "bob")),
        ("12:00", "14:00", ("bob",)),
    ]
    assert all(block.end > block.start for block in blocks)
    assert check_block_list(blocks) == []


def test_no_shifts_means_no_blocks():
    assert recalculate_blocks([]) == []


def test_gap_between_shifts_produces_no_block():
    blocks = recalculate_blocks([shift("alice", "08:00", "10:00"), shift("bob", "12:00", "13:00")])

    assert [(block.start_time, block.end_time) for block in blocks] == [("08:00", "10:00"), ("12:00", "13:00")]


def test_identical_shifts_share_one_block_in_staff_order():
    blocks = recalculate_blocks([shift("bob", "09:00", "10:00"), shift("alice", "09:00", "10:00")])

    assert len(blocks) == 1
    assert blocks[0].staff_ids == ("alice", "bob")


def test_rooms_carry_forward_from_prior_blocks():
    prior = [
        Block(
            date=DAY,
            start=minutes("09:00"),
            end=minutes("12:00"),
            assignments=(Assignment("alice", ("GH 101", "GH 102")),),
        )
    ]

    blocks = recalculate_blocks([shift("alice", "09:00", "12:00"), shift("bob", "11:00", "14:00")], prior)

    assert blocks[0].rooms_for("alice") == ("GH 101", "GH 102")
    assert blocks[1].rooms_for("alice") == ("GH 101", "GH 102")
    assert blocks[1].rooms_for("bob") == ()
    assert blocks[2].rooms_for("bob") == ()


def test_rooms_of_staff_without_shift_become_unassigned():
    prior = [
        Block(
            date=DAY,
            start=minutes("09:00"),
            end=minutes("12:00"),
            assignments=(Assignment("alice", ("GH 101",)), Assignment("bob", ("GH 102",))),
        )
    ]

    blocks = recalculate_blocks([shift("alice", "09:00", "12:00")], prior)

    assert blocks[0].assigned_rooms() == frozenset({"GH 101"})


def test_carry_forward_prefers_longest_overlap_then_earlier_block():
    prior = [
        Block(date=DAY, start=minutes("09:00"), end=minutes("10:00"), assignments=(Assignment("alice", ("GH 101",)),)),
        Block(date=DAY, start=minutes("10:00"), end=minutes("11:00"), assignments=(Assignment("alice", ("GH 102",)),)),
    ]

    tie = recalculate_blocks([shift("alice", "09:30", "10:30")], prior)
    longer = recalculate_blocks([shift("alice", "09:45", "11:00")], prior)

    assert tie[0].rooms_for("alice") == ("GH 101",)
    assert longer[0].rooms_for("alice") == ("GH 102",)


def test_conflicting_carried_rooms_stay_disjoint():
    prior = [
        Block(date=DAY, start=minutes("09:00"), end=minutes("11:00"), assignments=(Assignment("alice", ("GH 101",)),)),
        Block(date=DAY, start=minutes("11:00"), end=minutes("12:00"), assignments=(Assignment("bob", ("GH 101",)),)),
    ]

    blocks = recalculate_blocks([shift("alice", "09:00", "12:00"), shift("bob", "09:00", "12:00")], prior)

    assert len(blocks) == 1
    assert blocks[0].rooms_for("alice") == ("GH 101",)
    assert blocks[0].rooms_for("bob") == ()
    assert check_block_list(blocks) == []


def test_prior_blocks_from_other_dates_are_ignored():
    prior = [
        Block(
            date=date(2024, 1, 2),
            start=minutes("09:00"),
            end=minutes("12:00"),
            assignments=(Assignment("alice", ("GH 101",)),),
        )
    ]

    blocks = recalculate_blocks([shift("alice", "09:00", "12:00")], prior)

    assert blocks[0].rooms_for("alice") == ()


def test_shifts_on_different_dates_are_rejected():
    with pytest.raises(InvalidInputError):
        recalculate_blocks([shift("alice", "09:00", "12:00"), shift("bob", "09:00", "12:00", date(2024, 1, 2))])


def test_two_shifts_for_one_staff_member_are_rejected():
    with pytest.raises(InvalidInputError):
        recalculate_blocks([shift("alice", "09:00", "10:00"), shift("alice", "11:00", "12:00")])


@pytest.mark.parametrize(
    ("start", "end"),
    [("12:00", "09:00"), ("09:00", "09:00"), ("9am", "10:00"), ("25:00", "26:00")],
)
def test_bad_shift_times_are_invalid_input(start, end):
    with pytest.raises(InvalidInputError):
        shift("alice", start, end)


STAFF = ("alice", "bob", "carol", "dan")
ROOMS = ("GH 101", "GH 102", "GH 103", "GH 1420", "GH 1430")


def random_shifts(rng: random.Random) -> list[StaffShift]:
    shifts = []
    for staff_id in rng.sample(STAFF, rng.randint(0, len(STAFF))):
        start = rng.randrange(7 * 60, 19 * 60, 15)
        end = rng.randrange(start + 15, 20 * 60 + 1, 15)
        shifts.append(StaffShift(staff_id=staff_id, date=DAY, start=start, end=end))
    return shifts


def randomly_assigned(blocks: list[Block], rng: random.Random) -> list[Block]:
    assigned = []
    for block in blocks:
        rooms: dict[str, list[str]] = {staff_id: [] for staff_id in block.staff_ids}
        for room in ROOMS:
            owner = rng.choice(block.staff_ids + (None,))
            if owner is not None:
                rooms[owner].append(room)
        assigned.append(
            block.with_assignments([Assignment(staff_id, tuple(items)) for staff_id, items in rooms.items()])
        )
    return assigned


@pytest.mark.parametrize("seed", range(200))
def test_recalculated_blocks_always_hold_their_invariants(seed):
    rng = random.Random(seed)
    prior = randomly_assigned(recalculate_blocks(random_shifts(rng)), rng)
    shifts = random_shifts(rng)

    blocks = recalculate_blocks(shifts, prior, block_date=DAY)

    assert check_block_list(blocks) == []
    on_shift = {item.staff_id: item for item in shifts}
    for block in blocks:
        assert block.end > block.start
        for assignment in block.assignments:
            assert on_shift[assignment.staff_id].covers(block.start, block.end)
