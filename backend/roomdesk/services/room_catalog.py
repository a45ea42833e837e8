from __future__ import annotations

import re
from typing import Iterable

from roomdesk.core.exceptions import InvalidInputError

# "GH 1420", "GH L110", "GH 2410A"
_CANONICAL_PATTERN = re.compile(r"^(?P<prefix>[A-Z]+) (?P<number>L?\d+)(?P<letter>[AB]?)$")
_SIBLING_LETTER = {"A": "B", "B": "A"}


def _split_canonical(name: str) -> re.Match[str]:
    match = _CANONICAL_PATTERN.match(name)
    if not match:
        raise InvalidInputError(f"Unrecognised room name {name!r}", details={"room_name": name})
    return match


def expand_room_name(room_name: str) -> tuple[str, ...]:
    """Constituent canonical rooms of a possibly merged display name.

    ``"GH 1420&30"`` is GH 1420 plus GH 1430, ``"GH 2410A&B"`` is both halves of
    GH 2410. A fully written second room is taken as is.
    """
    name = (room_name or "").strip()
    if not name:
        raise InvalidInputError("Room name is required")
    if "&" not in name:
        return (name,)

    base, _, suffix = (part.strip() for part in name.partition("&"))
    if not base or not suffix or "&" in suffix:
        raise InvalidInputError(f"Unrecognised merged room name {name!r}", details={"room_name": name})

    match = _split_canonical(base)
    prefix, number, letter = match.group("prefix"), match.group("number"), match.group("letter")

    if suffix in _SIBLING_LETTER:
        if letter != _SIBLING_LETTER[suffix]:
            raise InvalidInputError(f"Unrecognised merged room name {name!r}", details={"room_name": name})
        return (base, f"{prefix} {number}{suffix}")

    if suffix == "30" and not letter and number.isdigit():
        return (base, f"{prefix} {int(number) + 10}")

    if suffix.isdigit() and len(suffix) == len(number):
        return (base, f"{prefix} {suffix}")

    if _CANONICAL_PATTERN.match(suffix):
        return (base, suffix)

    raise InvalidInputError(f"Unrecognised merged room name {name!r}", details={"room_name": name})


def base_room_name(room_name: str) -> str:
    """The room whose row (and owner) a merged event belongs to."""
    return expand_room_name(room_name)[0]


def ordered_catalog(room_names: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted(dict.fromkeys(name for name in room_names if name)))


def unassigned_rooms(catalog: Iterable[str], assigned: Iterable[str]) -> tuple[str, ...]:
    taken = set(assigned)
    return tuple(name for name in catalog if name not in taken)


def block_room_order(assignment_rooms: Iterable[Iterable[str]], catalog: Iterable[str]) -> tuple[str, ...]:
    """Room ordering used for range selection inside one block.

    Every assignment's rooms in assignment order, followed by the catalog's
    unassigned rooms.
    """
    ordered: list[str] = []
    for rooms in assignment_rooms:
        ordered.extend(rooms)
    ordered.extend(unassigned_rooms(catalog, ordered))
    return tuple(dict.fromkeys(ordered))
