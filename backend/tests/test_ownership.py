from datetime import date

from roomdesk.services.ownership import (
    filter_my_events,
    hand_off_time,
    is_user_event_owner,
    owner_at,
    owner_ids,
    resolve_ownership,
)
from roomdesk.services.schedule_types import Assignment, Block, EventSlot, TimelineEntry

DAY = date(2024, 1, 1)


def block(start: int, end: int, *assignments: tuple[str, tuple[str, ...]], block_id: int | None = None) -> Block:
    return Block(
        date=DAY,
        start=start,
        end=end,
        assignments=tuple(Assignment(staff, rooms) for staff, rooms in assignments),
        id=block_id,
    )


def event(room: str = "GH 101", start: str = "10:30", end: str = "11:30", **kwargs) -> EventSlot:
    return EventSlot.from_values(id=1, room_name=room, date=DAY, start_time=start, end_time=end, **kwargs)


HANDOFF_BLOCKS = [
    block(540, 660, ("alice", ("GH 101",))),
    block(660, 720, ("bob", ("GH 101",))),
]


def test_ownership_hands_off_at_block_boundary():
    timeline = resolve_ownership(event(), HANDOFF_BLOCKS)

    assert timeline == [TimelineEntry("alice", "11:00"), TimelineEntry("bob", None)]
    assert hand_off_time(timeline) == "11:00"
    assert owner_ids(timeline) == ["alice", "bob"]


def test_manual_owner_replaces_timeline():
    timeline = resolve_ownership(event(man_owner="carol"), HANDOFF_BLOCKS)

    assert timeline == [TimelineEntry("carol", None)]
    assert hand_off_time(timeline) is None


def test_no_covering_block_gives_empty_timeline():
    assert resolve_ownership(event(start="15:00", end="16:00"), HANDOFF_BLOCKS) == []
    assert resolve_ownership(event(room="GH 999"), HANDOFF_BLOCKS) == []


def test_unowned_event_types_have_no_owner_even_with_override():
    kec = event(event_type="KEC", man_owner="carol")

    assert resolve_ownership(kec, HANDOFF_BLOCKS) == []
    assert owner_at(kec, HANDOFF_BLOCKS, 640) is None
    assert resolve_ownership(kec, HANDOFF_BLOCKS, unowned_event_types=()) == [TimelineEntry("carol", None)]


def test_consecutive_blocks_with_same_owner_collapse():
    blocks = [
        block(540, 600, ("alice", ("GH 101",))),
        block(600, 660, ("alice", ("GH 101",)), ("bob", ())),
        block(660, 720, ("bob", ("GH 101",))),
    ]

    timeline = resolve_ownership(event(start="09:30", end="12:00"), blocks)

    assert timeline == [TimelineEntry("alice", "11:00"), TimelineEntry("bob", None)]


def test_unassigned_stretch_is_skipped():
    blocks = [
        block(540, 600, ("alice", ("GH 101",))),
        block(600, 660, ("alice", ())),
        block(660, 720, ("bob", ("GH 101",))),
    ]

    timeline = resolve_ownership(event(start="09:00", end="12:00"), blocks)

    assert timeline == [TimelineEntry("alice", "10:00"), TimelineEntry("bob", None)]


def test_merged_event_room_uses_base_room():
    blocks = [block(540, 720, ("alice", ("GH 1430",)), ("bob", ("GH 1420",)))]

    assert resolve_ownership(event(room="GH 1420&30"), blocks) == [TimelineEntry("bob", None)]


def test_duplicate_blocks_later_one_wins():
    blocks = [
        block(540, 720, ("alice", ("GH 101",)), block_id=1),
        block(540, 720, ("bob", ("GH 101",)), block_id=2),
    ]

    assert resolve_ownership(event(), blocks) == [TimelineEntry("bob", None)]


def test_room_claimed_twice_in_one_block_goes_to_later_assignment():
    blocks = [block(540, 720, ("alice", ("GH 101",)), ("bob", ("GH 101",)))]

    assert resolve_ownership(event(), blocks) == [TimelineEntry("bob", None)]


def test_blocks_from_other_dates_do_not_count():
    other_day = Block(date=date(2024, 1, 2), start=540, end=720, assignments=(Assignment("alice", ("GH 101",)),))

    assert resolve_ownership(event(), [other_day]) == []


def test_event_without_times_has_no_owner():
    slot = EventSlot.from_values(id=5, room_name="GH 101", date=DAY, start_time=None, end_time=None)

    assert resolve_ownership(slot, HANDOFF_BLOCKS) == []


def test_owner_at_and_is_user_event_owner():
    slot = event()

    assert owner_at(slot, HANDOFF_BLOCKS, 630) == "alice"
    assert owner_at(slot, HANDOFF_BLOCKS, 660) == "bob"
    assert owner_at(event(man_owner="carol"), HANDOFF_BLOCKS, 630) == "carol"
    assert is_user_event_owner(slot, "bob", HANDOFF_BLOCKS)
    assert not is_user_event_owner(slot, "carol", HANDOFF_BLOCKS)


def test_filter_my_events():
    events = [
        event(),
        EventSlot.from_values(id=2, room_name="GH 102", date=DAY, start_time="09:00", end_time="10:00"),
        EventSlot.from_values(id=3, room_name="GH 102", date=DAY, start_time="09:00", end_time="10:00", man_owner="alice"),
    ]
    by_date = {DAY: HANDOFF_BLOCKS}

    assert [item.id for item in filter_my_events(events, "alice", by_date)] == [1, 3]
    assert [item.id for item in filter_my_events(events, "bob", by_date)] == [1]
