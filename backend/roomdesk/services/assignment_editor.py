from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
import logging
from typing import Callable, Iterable, Mapping, Sequence

from roomdesk.core.exceptions import AppError, InvalidInputError
from roomdesk.services.room_catalog import block_room_order
from roomdesk.services.schedule_types import Assignment, Block

logger = logging.getLogger(__name__)


class SelectionMode(str, Enum):
    empty = "empty"
    single = "single-selected"
    multi = "multi-selected"


@dataclass(frozen=True)
class SelectionState:
    selected: frozenset[str] = frozenset()
    last_selected: str | None = None

    @property
    def mode(self) -> SelectionMode:
        if not self.selected:
            return SelectionMode.empty
        if len(self.selected) == 1:
            return SelectionMode.single
        return SelectionMode.multi

    def is_selected(self, room: str) -> bool:
        return room in self.selected


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_points(cls, x1: float, y1: float, x2: float, y2: float) -> "Rect":
        return cls(left=min(x1, x2), top=min(y1, y2), right=max(x1, x2), bottom=max(y1, y2))

    def intersects(self, other: "Rect") -> bool:
        return not (
            other.left > self.right
            or other.right < self.left
            or other.top > self.bottom
            or other.bottom < self.top
        )


def click(state: SelectionState, room: str) -> SelectionState:
    return SelectionState(selected=frozenset({room}), last_selected=room)


def toggle_click(state: SelectionState, room: str) -> SelectionState:
    """Ctrl/Cmd-click."""
    selected = set(state.selected)
    if room in selected:
        selected.discard(room)
    else:
        selected.add(room)
    return SelectionState(selected=frozenset(selected), last_selected=room)


def range_click(state: SelectionState, room: str, ordering: Sequence[str]) -> SelectionState:
    """Shift-click: add every room between the last selected room and ``room``."""
    if state.last_selected is None:
        return click(state, room)
    try:
        anchor = ordering.index(state.last_selected)
        current = ordering.index(room)
    except ValueError:
        if room in ordering:
            return click(state, room)
        return replace(state, last_selected=room)
    low, high = sorted((anchor, current))
    return SelectionState(
        selected=state.selected | frozenset(ordering[low : high + 1]),
        last_selected=room,
    )


def drag_select(state: SelectionState, badges: Mapping[str, Rect], drag: Rect) -> SelectionState:
    """Replace the selection with every room whose badge touches the drag rectangle."""
    hit = frozenset(room for room, bounds in badges.items() if drag.intersects(bounds))
    return replace(state, selected=hit)


def clear(state: SelectionState) -> SelectionState:
    return SelectionState()


def click_outside(state: SelectionState) -> SelectionState:
    if not state.selected:
        return state
    return clear(state)


def move_rooms(
    assignments: Iterable[Assignment],
    selection: Iterable[str],
    target: str | None,
) -> tuple[Assignment, ...]:
    """Move the selected rooms to ``target`` (``None`` leaves them unassigned).

    Selected rooms leave every assignment; the target's room set gains them,
    keeping its existing order. A target without an assignment yet gets one.
    """
    moving = tuple(dict.fromkeys(selection))
    moving_set = set(moving)
    result: list[Assignment] = []
    target_found = False
    for item in assignments:
        remaining = tuple(room for room in item.rooms if room not in moving_set)
        if target is not None and item.staff_id == target:
            target_found = True
            remaining = remaining + moving
        result.append(Assignment(staff_id=item.staff_id, rooms=remaining))
    if target is not None and not target_found and moving:
        result.append(Assignment(staff_id=target, rooms=moving))
    return tuple(result)


def drop_empty_blocks(blocks: Iterable[Block]) -> list[Block]:
    kept: list[Block] = []
    for block in blocks:
        if block.end <= block.start:
            logger.warning(
                "Refusing to store zero-duration block %s-%s on %s",
                block.start_time,
                block.end_time,
                block.date,
            )
            continue
        kept.append(block)
    return kept


BlockWriter = Callable[[date, Sequence[Block]], Sequence[Block]]


class AssignmentEditor:
    """In-memory editing session over one date's blocks.

    Mutations apply to a working copy in the order they happen; ``commit``
    stores the whole working copy at once and either advances the snapshot
    or rolls the working copy back to it.
    """

    def __init__(self, block_date: date, blocks: Iterable[Block], catalog: Sequence[str] = ()) -> None:
        self.date = block_date
        self.catalog = tuple(catalog)
        self._snapshot: tuple[Block, ...] = tuple(sorted(blocks, key=lambda item: item.start))
        self._working: list[Block] = list(self._snapshot)
        self._selections: dict[int, SelectionState] = {}

    @property
    def blocks(self) -> tuple[Block, ...]:
        return tuple(self._working)

    @property
    def snapshot(self) -> tuple[Block, ...]:
        return self._snapshot

    @property
    def dirty(self) -> bool:
        return tuple(self._working) != self._snapshot

    def _block(self, index: int) -> Block:
        if index < 0 or index >= len(self._working):
            raise InvalidInputError(f"No shift block at position {index}", details={"index": index})
        return self._working[index]

    def index_of(self, block_id: int) -> int:
        for index, block in enumerate(self._working):
            if block.id == block_id:
                return index
        raise InvalidInputError(f"Shift block {block_id} is not part of {self.date}", details={"block_id": block_id})

    def selection(self, index: int) -> SelectionState:
        self._block(index)
        return self._selections.get(index, SelectionState())

    def room_order(self, index: int) -> tuple[str, ...]:
        block = self._block(index)
        return block_room_order((item.rooms for item in block.assignments), self.catalog)

    def click(self, index: int, room: str, *, ctrl: bool = False, shift: bool = False) -> SelectionState:
        state = self.selection(index)
        if shift and state.last_selected is not None:
            state = range_click(state, room, self.room_order(index))
        elif ctrl:
            state = toggle_click(state, room)
        else:
            state = click(state, room)
        self._selections[index] = state
        return state

    def drag(self, index: int, badges: Mapping[str, Rect], drag: Rect) -> SelectionState:
        state = drag_select(self.selection(index), badges, drag)
        self._selections[index] = state
        return state

    def clear_selection(self, index: int) -> None:
        self._selections.pop(index, None)

    def move_selection(self, index: int, target: str | None) -> Block:
        state = self.selection(index)
        block = self._block(index)
        if not state.selected:
            return block
        if target is not None and target not in block.staff_ids:
            raise InvalidInputError(
                f"{target} is not on shift during {block.start_time}-{block.end_time}",
                details={"target": target},
            )
        updated = block.with_assignments(move_rooms(block.assignments, self._ordered_selection(index, state), target))
        self._working[index] = updated
        self.clear_selection(index)
        return updated

    def _ordered_selection(self, index: int, state: SelectionState) -> tuple[str, ...]:
        # Stable order for the moved rooms.
        order = self.room_order(index)
        ordered = [room for room in order if room in state.selected]
        ordered.extend(sorted(state.selected - set(order)))
        return tuple(ordered)

    def commit(self, writer: BlockWriter) -> tuple[Block, ...]:
        blocks = drop_empty_blocks(self._working)
        try:
            stored = writer(self.date, blocks)
        except AppError:
            logger.warning("Rolling back shift block edits for %s after failed commit", self.date)
            self._working = list(self._snapshot)
            self._selections.clear()
            raise
        self._snapshot = tuple(stored)
        self._working = list(self._snapshot)
        return self._snapshot
